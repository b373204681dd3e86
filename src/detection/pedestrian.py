"""
HOG + linear SVM pedestrian detector.
"""

from __future__ import annotations

from typing import List

import cv2
import numpy as np

from models.detection import Detection
from .base import Detector


class PedestrianDetector(Detector):
    name = "pedestrian"
    label = "person"
    color = (255, 0, 0)

    def __init__(
        self,
        hog: "cv2.HOGDescriptor",
        win_stride: int = 8,
        padding: int = 32,
        scale: float = 1.05,
        group_threshold: int = 3,
    ):
        """
        Args:
            hog: HOG descriptor with an SVM detector already set.
            win_stride: Sliding window step in pixels (both axes).
            padding: Border added around the frame before scanning.
            scale: Pyramid step between scales.
            group_threshold: Minimum overlapping hits before a region is kept.
        """
        self.hog = hog
        self.win_stride = (win_stride, win_stride)
        self.padding = (padding, padding)
        self.scale = scale
        self.group_threshold = group_threshold

    def detect(self, frame: np.ndarray) -> List[Detection]:
        # positional: the grouping keyword is named differently across OpenCV releases
        rects, _weights = self.hog.detectMultiScale(
            frame, 0, self.win_stride, self.padding, self.scale, self.group_threshold
        )
        return [Detection.from_rect(rect, label=self.label, source=self.name) for rect in rects]


def create_people_hog() -> "cv2.HOGDescriptor":
    """HOG descriptor with OpenCV's default pretrained people detector."""
    hog = cv2.HOGDescriptor()
    hog.setSVMDetector(cv2.HOGDescriptor_getDefaultPeopleDetector())
    return hog
