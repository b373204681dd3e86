"""
Keypoint overlay.

Purely cosmetic: draws ORB keypoints and produces no detections.
"""

from __future__ import annotations

import cv2
import numpy as np

from .drawing import COLOR_CYAN


class KeypointOverlay:
    name = "features"

    def __init__(self, max_features: int = 500):
        self.orb = cv2.ORB_create(nfeatures=max_features)

    def draw(self, source: np.ndarray, target: np.ndarray) -> int:
        """
        Detect keypoints on source and mark them on target.

        Returns:
            Number of keypoints drawn.
        """
        gray = cv2.cvtColor(source, cv2.COLOR_BGR2GRAY)
        keypoints = self.orb.detect(gray, None)
        for kp in keypoints:
            cv2.circle(target, (int(kp.pt[0]), int(kp.pt[1])), 2, COLOR_CYAN, -1)
        return len(keypoints)
