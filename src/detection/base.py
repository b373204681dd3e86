"""
Detection interfaces.

Every detector exposes the same two calls so the ensemble can swap detection
strategies without knowing concrete types:
- detect(frame) reads the pristine input frame and returns detections
- annotate(frame, detections) draws those detections onto the working frame

Detectors are grouped:
- "advanced": neural detectors that replace the classical bundle when enabled
- "basic": the classical bundle (cascade, HOG, color, shapes)
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Tuple

import numpy as np

from models.detection import Detection
from .drawing import draw_labeled_box


Color = Tuple[int, int, int]


class DetectorGroup(str, Enum):
    ADVANCED = "advanced"
    BASIC = "basic"


class Detector:
    """Detector interface returning detections in pixel-space."""

    name: str = "detector"
    group: DetectorGroup = DetectorGroup.BASIC
    color: Color = (255, 255, 255)

    def detect(self, frame: np.ndarray) -> List[Detection]:
        raise NotImplementedError

    def annotate(self, frame: np.ndarray, detections: Iterable[Detection]) -> None:
        """Draw detections onto frame in place."""
        for det in detections:
            draw_labeled_box(frame, det.bbox, det.display_label, self.color_for(det))

    def color_for(self, detection: Detection) -> Color:
        return self.color

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, group={self.group.value})"


def drop_invalid(detections: Iterable[Detection]) -> List[Detection]:
    """Remove detections whose box encloses no pixels."""
    return [d for d in detections if not d.bbox.is_degenerate]
