"""
Contour-based shape classifier.

Edges are found with Canny, external contours are approximated by polygons
and the shape is named after the vertex count.
"""

from __future__ import annotations

from typing import List

import cv2
import numpy as np

from models.detection import Detection
from .base import Detector

SHAPE_NAMES = {
    3: "triangle",
    4: "quadrilateral",
    5: "pentagon",
    6: "hexagon",
}


def classify_vertices(vertices: int) -> str:
    """Name a polygon by its vertex count."""
    if vertices in SHAPE_NAMES:
        return SHAPE_NAMES[vertices]
    return "many-sided" if vertices > 6 else "unknown"


class ShapeClassifier(Detector):
    name = "shape"
    color = (0, 165, 255)

    def __init__(
        self,
        min_area: float = 1000.0,
        blur_kernel: int = 5,
        canny_low: int = 50,
        canny_high: int = 150,
        epsilon_ratio: float = 0.02,
    ):
        self.min_area = min_area
        self.blur_kernel = blur_kernel
        self.canny_low = canny_low
        self.canny_high = canny_high
        self.epsilon_ratio = epsilon_ratio

    def edges(self, frame: np.ndarray) -> np.ndarray:
        gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
        blurred = cv2.GaussianBlur(gray, (self.blur_kernel, self.blur_kernel), 0)
        return cv2.Canny(blurred, self.canny_low, self.canny_high)

    def detect(self, frame: np.ndarray) -> List[Detection]:
        contours, _ = cv2.findContours(self.edges(frame), cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)

        detections: List[Detection] = []
        for contour in contours:
            if cv2.contourArea(contour) <= self.min_area:
                continue

            epsilon = self.epsilon_ratio * cv2.arcLength(contour, True)
            approx = cv2.approxPolyDP(contour, epsilon, True)
            detections.append(
                Detection.from_rect(
                    cv2.boundingRect(contour),
                    label=classify_vertices(len(approx)),
                    source=self.name,
                )
            )
        return detections
