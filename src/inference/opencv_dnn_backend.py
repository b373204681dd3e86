"""
OpenCV DNN inference backend.

Runs Darknet (YOLOv3-style) networks through cv2.dnn. Loading from disk lives
here, at the boundary, so the detector only ever sees a ready backend.
"""

from __future__ import annotations

import logging
import os
from typing import List

import cv2
import numpy as np

from .backend import InferenceBackend


class OpenCvDnnBackend(InferenceBackend):
    def __init__(self, net: "cv2.dnn.Net"):
        self._net = net
        self._output_names = list(net.getUnconnectedOutLayersNames())

    @classmethod
    def from_darknet(cls, config_path: str, weights_path: str) -> "OpenCvDnnBackend":
        """
        Load a Darknet network.

        Raises:
            FileNotFoundError: If either artifact is missing.
            cv2.error: If OpenCV cannot parse the network.
        """
        for path in (config_path, weights_path):
            if not os.path.exists(path):
                raise FileNotFoundError(f"Model artifact not found: {path}")

        net = cv2.dnn.readNetFromDarknet(config_path, weights_path)
        net.setPreferableBackend(cv2.dnn.DNN_BACKEND_OPENCV)
        net.setPreferableTarget(cv2.dnn.DNN_TARGET_CPU)
        logging.info(f"Darknet model loaded: {os.path.basename(weights_path)}")
        return cls(net)

    @property
    def output_names(self) -> List[str]:
        return list(self._output_names)

    def set_input(self, blob: np.ndarray) -> None:
        self._net.setInput(blob)

    def forward(self) -> List[np.ndarray]:
        return list(self._net.forward(self._output_names))

    def set_accelerated(self, enabled: bool) -> None:
        if enabled:
            if cv2.cuda.getCudaEnabledDeviceCount() == 0:
                raise RuntimeError("No CUDA-capable device available to OpenCV")
            self._net.setPreferableBackend(cv2.dnn.DNN_BACKEND_CUDA)
            self._net.setPreferableTarget(cv2.dnn.DNN_TARGET_CUDA)
        else:
            self._net.setPreferableBackend(cv2.dnn.DNN_BACKEND_OPENCV)
            self._net.setPreferableTarget(cv2.dnn.DNN_TARGET_CPU)
        logging.info(f"DNN target set to {'CUDA' if enabled else 'CPU'}")


def load_class_names(path: str) -> List[str]:
    """Read a Darknet .names file: one class per line, blank lines ignored."""
    with open(path, "r", encoding="utf-8") as f:
        return [line.strip() for line in f if line.strip()]
