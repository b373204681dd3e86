"""
HSV color segmentation detector.

Each configured color class is thresholded independently, so a region that
satisfies two ranges is reported once per class.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import cv2
import numpy as np

from models.detection import Detection
from .base import Color, Detector

HsvBound = Tuple[int, int, int]


@dataclass(frozen=True)
class ColorClass:
    """
    A named color defined by one or more inclusive HSV ranges.

    Attributes:
        name: Label given to detections of this class.
        ranges: (lower, upper) HSV bounds; the mask is their union.
        display_color: BGR color used for the overlay.
    """
    name: str
    ranges: Tuple[Tuple[HsvBound, HsvBound], ...]
    display_color: Color


# OpenCV hue runs 0..180, so red wraps around and needs two ranges.
DEFAULT_COLOR_CLASSES: Tuple[ColorClass, ...] = (
    ColorClass("red", (((0, 50, 50), (10, 255, 255)), ((170, 50, 50), (180, 255, 255))), (0, 0, 255)),
    ColorClass("blue", (((100, 50, 50), (130, 255, 255)),), (255, 0, 0)),
    ColorClass("green", (((40, 50, 50), (80, 255, 255)),), (0, 255, 0)),
    ColorClass("yellow", (((20, 50, 50), (30, 255, 255)),), (0, 255, 255)),
)


class ColorSegmentationDetector(Detector):
    """Finds large connected regions of each configured color."""

    name = "color"

    def __init__(
        self,
        color_classes: Sequence[ColorClass] = DEFAULT_COLOR_CLASSES,
        min_area: float = 1000.0,
    ):
        """
        Args:
            color_classes: Colors to look for, in detection order.
            min_area: Minimum contour area (exclusive) in native frame pixels.
                Not scaled with frame size.
        """
        self.color_classes = tuple(color_classes)
        self.min_area = min_area
        self._display_colors: Dict[str, Color] = {c.name: c.display_color for c in self.color_classes}

    def mask_for(self, hsv: np.ndarray, color_class: ColorClass) -> np.ndarray:
        """Binary mask of the pixels inside any of the class's ranges."""
        mask = None
        for lower, upper in color_class.ranges:
            part = cv2.inRange(hsv, np.array(lower, dtype=np.uint8), np.array(upper, dtype=np.uint8))
            mask = part if mask is None else cv2.bitwise_or(mask, part)
        return mask

    def detect(self, frame: np.ndarray) -> List[Detection]:
        hsv = cv2.cvtColor(frame, cv2.COLOR_BGR2HSV)

        detections: List[Detection] = []
        for color_class in self.color_classes:
            mask = self.mask_for(hsv, color_class)
            contours, _ = cv2.findContours(mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)

            for contour in contours:
                if cv2.contourArea(contour) <= self.min_area:
                    continue
                detections.append(
                    Detection.from_rect(cv2.boundingRect(contour), label=color_class.name, source=self.name)
                )
        return detections

    def color_for(self, detection: Detection) -> Color:
        return self._display_colors.get(detection.label, self.color)
