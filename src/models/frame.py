"""
Captured frame container passed from a frame source to the runner.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


@dataclass(frozen=True, eq=False)
class FrameData:
    """
    A BGR image with its capture metadata.

    Attributes:
        frame: (H, W, 3) uint8 image as delivered by OpenCV.
        timestamp: time.time() at capture.
        frame_index: 1-based position since the source was opened.
        source: Source identifier, if known.
    """
    frame: np.ndarray
    timestamp: float
    frame_index: int = 0
    source: Optional[str] = None

    @classmethod
    def from_numpy(
        cls,
        frame: np.ndarray,
        timestamp: Optional[float] = None,
        frame_index: int = 0,
        source: Optional[str] = None,
    ) -> "FrameData":
        """Wrap an image, stamping it with the current time unless timestamp is given."""
        return cls(
            frame=frame,
            timestamp=time.time() if timestamp is None else timestamp,
            frame_index=frame_index,
            source=source,
        )

    @property
    def width(self) -> int:
        return int(self.frame.shape[1])

    @property
    def height(self) -> int:
        return int(self.frame.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height), the order OpenCV sizes use."""
        return (self.width, self.height)
