"""
Haar cascade frontal face detector.
"""

from __future__ import annotations

import logging
import os
from typing import List, Optional, Tuple

import cv2
import numpy as np

from models.detection import Detection
from .base import Detector

DEFAULT_FACE_CASCADE = "haarcascade_frontalface_alt.xml"


class CascadeFaceDetector(Detector):
    """Multi-scale sliding-window face detector over an equalized grayscale frame."""

    name = "face"
    label = "face"
    color = (0, 255, 0)

    def __init__(
        self,
        classifier: "cv2.CascadeClassifier",
        scale_factor: float = 1.1,
        min_neighbors: int = 5,
        min_size: Tuple[int, int] = (50, 50),
    ):
        """
        Args:
            classifier: A loaded cascade classifier.
            scale_factor: Image pyramid step between scales.
            min_neighbors: Overlapping hits required to keep a window. Higher
                values trade recall for fewer false positives.
            min_size: Smallest face window in pixels.
        """
        self.classifier = classifier
        self.scale_factor = scale_factor
        self.min_neighbors = min_neighbors
        self.min_size = tuple(min_size)

    def detect(self, frame: np.ndarray) -> List[Detection]:
        gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
        gray = cv2.equalizeHist(gray)

        faces = self.classifier.detectMultiScale(
            gray,
            scaleFactor=self.scale_factor,
            minNeighbors=self.min_neighbors,
            flags=cv2.CASCADE_SCALE_IMAGE,
            minSize=self.min_size,
        )
        return [Detection.from_rect(rect, label=self.label, source=self.name) for rect in faces]


def load_cascade(path: Optional[str] = None) -> "cv2.CascadeClassifier":
    """
    Load a cascade classifier, defaulting to OpenCV's bundled frontal face model.

    Raises:
        RuntimeError: If the file is missing or OpenCV cannot parse it.
    """
    if path is None:
        path = os.path.join(cv2.data.haarcascades, DEFAULT_FACE_CASCADE)

    classifier = cv2.CascadeClassifier(path)
    if classifier.empty():
        raise RuntimeError(f"Failed to load cascade classifier: {path}")

    logging.info(f"Cascade classifier loaded: {os.path.basename(path)}")
    return classifier
