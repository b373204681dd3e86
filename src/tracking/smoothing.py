"""
Constant-velocity centroid smoothing for tracked identities.
"""

from __future__ import annotations

from typing import Tuple

import cv2
import numpy as np


class ConstantVelocityFilter:
    """
    Kalman filter over a box centroid.

    State: [cx, cy, vx, vy], measurement: [cx, cy], one step per tracker frame.
    """

    def __init__(
        self,
        center: Tuple[float, float],
        process_noise: float = 1e-2,
        measurement_noise: float = 1.0,
    ):
        self.kf = cv2.KalmanFilter(4, 2)
        self.kf.transitionMatrix = np.array([
            [1, 0, 1, 0],
            [0, 1, 0, 1],
            [0, 0, 1, 0],
            [0, 0, 0, 1],
        ], dtype=np.float32)
        self.kf.measurementMatrix = np.array([
            [1, 0, 0, 0],
            [0, 1, 0, 0],
        ], dtype=np.float32)
        self.kf.processNoiseCov = np.eye(4, dtype=np.float32) * process_noise
        self.kf.measurementNoiseCov = np.eye(2, dtype=np.float32) * measurement_noise

        # unknown initial velocity
        self.kf.errorCovPost = np.diag([1.0, 1.0, 100.0, 100.0]).astype(np.float32)
        self.kf.statePost = np.array([[center[0]], [center[1]], [0.0], [0.0]], dtype=np.float32)

    @property
    def center(self) -> Tuple[float, float]:
        state = self.kf.statePost
        return (float(state[0, 0]), float(state[1, 0]))

    @property
    def velocity(self) -> Tuple[float, float]:
        state = self.kf.statePost
        return (float(state[2, 0]), float(state[3, 0]))

    def predict(self, steps: int = 1) -> Tuple[float, float]:
        """Advance the state by steps frames and return the predicted centroid."""
        for _ in range(max(steps, 1)):
            state = self.kf.predict()
            # keep statePost in sync so consecutive predictions chain
            self.kf.statePost = state.copy()
            self.kf.errorCovPost = self.kf.errorCovPre.copy()
        return (float(state[0, 0]), float(state[1, 0]))

    def correct(self, center: Tuple[float, float]) -> Tuple[float, float]:
        """Fold a measured centroid into the state and return the filtered centroid."""
        measurement = np.array([[center[0]], [center[1]]], dtype=np.float32)
        self.kf.correct(measurement)
        return self.center
