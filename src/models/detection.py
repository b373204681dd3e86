"""
Detection models for object detection results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple


@dataclass(frozen=True)
class BoundingBox:
    """
    An axis-aligned box in integer pixel coordinates.

    Attributes:
        x: Left edge x coordinate.
        y: Top edge y coordinate.
        width: Box width in pixels.
        height: Box height in pixels.
    """
    x: int
    y: int
    width: int
    height: int

    @property
    def x2(self) -> int:
        return self.x + self.width

    @property
    def y2(self) -> int:
        return self.y + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    @property
    def area(self) -> int:
        return max(self.width, 0) * max(self.height, 0)

    @property
    def is_degenerate(self) -> bool:
        """True when the box encloses no pixels."""
        return self.width < 1 or self.height < 1

    def as_xywh(self) -> Tuple[int, int, int, int]:
        """Return as (x, y, width, height) tuple."""
        return (self.x, self.y, self.width, self.height)

    def as_xyxy(self) -> Tuple[int, int, int, int]:
        """Return as (x1, y1, x2, y2) tuple."""
        return (self.x, self.y, self.x2, self.y2)

    @classmethod
    def from_xywh(cls, t: Sequence[float]) -> "BoundingBox":
        """Create from an OpenCV style (x, y, w, h) rect."""
        return cls(x=int(t[0]), y=int(t[1]), width=int(t[2]), height=int(t[3]))


@dataclass(frozen=True)
class Detection:
    """
    A single detection produced by one detector for one frame.

    Attributes:
        bbox: Bounding box in pixel coordinates of the input frame.
        label: Display label ("face", "person", a color, a shape or a class name).
        source: Name of the detector that produced it.
        confidence: Score in [0, 1], or None for detectors that don't score.
        class_id: Index into the class table for neural detections.
    """
    bbox: BoundingBox
    label: str
    source: str
    confidence: Optional[float] = None
    class_id: Optional[int] = None

    @property
    def center(self) -> Tuple[float, float]:
        return self.bbox.center

    @property
    def display_label(self) -> str:
        """Label text as rendered on the annotated frame."""
        if self.confidence is None:
            return self.label
        return f"{self.label}: {self.confidence:.2f}"

    @classmethod
    def from_rect(
        cls,
        rect: Sequence[float],
        label: str,
        source: str,
        confidence: Optional[float] = None,
        class_id: Optional[int] = None,
    ) -> "Detection":
        """Adapter: build a Detection from an OpenCV (x, y, w, h) rect."""
        return cls(
            bbox=BoundingBox.from_xywh(rect),
            label=label,
            source=source,
            confidence=confidence,
            class_id=class_id,
        )
