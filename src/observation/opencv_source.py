"""
cv2.VideoCapture frame source for webcams (integer index) and video files (path).
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import cv2
import numpy as np

from models.frame import FrameData
from .base import ObservationConfig, ObservationSource

ROTATIONS = {
    90: cv2.ROTATE_90_CLOCKWISE,
    180: cv2.ROTATE_180,
    270: cv2.ROTATE_90_COUNTERCLOCKWISE,
}


@dataclass
class OpenCVSourceConfig(ObservationConfig):
    """
    Attributes:
        device_id: Camera index or video file path.
        max_retries: Open attempts before giving up.
        rotate: Clockwise rotation in degrees; 0, 90, 180 or 270.
        flip_horizontal: Mirror each frame left to right.
    """
    device_id: Union[int, str] = 0
    max_retries: int = 3
    rotate: int = 0
    flip_horizontal: bool = False

    @classmethod
    def from_camera_config(cls, camera_cfg: Dict[str, Any], source_id: str = "camera") -> "OpenCVSourceConfig":
        """Build from the `camera` section of the YAML config."""
        resolution = camera_cfg.get("resolution")
        return cls(
            source_id=source_id,
            resolution=tuple(resolution) if resolution else None,
            fps=camera_cfg.get("fps"),
            device_id=camera_cfg.get("device_id", 0),
            max_retries=camera_cfg.get("max_retries", 3),
            rotate=camera_cfg.get("rotate", 0) or 0,
            flip_horizontal=camera_cfg.get("flip_horizontal", False),
        )


class OpenCVSource(ObservationSource):
    """
    Example:
        with OpenCVSource(OpenCVSourceConfig(device_id="clip.mp4")) as source:
            for frame_data in source:
                controller.process(frame_data.frame)
    """

    config: OpenCVSourceConfig

    def __init__(self, config: OpenCVSourceConfig):
        super().__init__(config)
        self._cap: Optional[cv2.VideoCapture] = None

    @property
    def device_id(self) -> Union[int, str]:
        return self.config.device_id

    @property
    def is_file(self) -> bool:
        return isinstance(self.device_id, str) and os.path.exists(self.device_id)

    def open(self) -> None:
        if self._opened:
            return

        self._cap = self._connect()
        self._configure_capture()
        self._opened = True
        self.frames_read = 0
        logging.info(f"Frame source {self.source_id} opened on {self.device_id}")

    def _connect(self) -> "cv2.VideoCapture":
        """Open the device, backing off between failed attempts."""
        attempts = self.config.max_retries
        for attempt in range(1, attempts + 1):
            cap = cv2.VideoCapture(self.device_id)
            if cap.isOpened():
                return cap
            cap.release()
            logging.warning(f"Could not open {self.device_id} (attempt {attempt}/{attempts})")
            if attempt < attempts:
                time.sleep(min(2 ** attempt, 10))
        raise RuntimeError(f"Could not open {self.device_id} after {attempts} attempts")

    def _configure_capture(self) -> None:
        # files play at their own size and rate
        if not isinstance(self.device_id, int):
            return
        if self.config.resolution:
            width, height = self.config.resolution
            self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
            self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        if self.config.fps:
            self._cap.set(cv2.CAP_PROP_FPS, self.config.fps)

    def read(self) -> Optional[FrameData]:
        if self._cap is None:
            return None

        ok, frame = self._cap.read()
        if not ok or frame is None:
            if self.is_file:
                logging.info(f"End of {self.device_id}")
            else:
                logging.warning(f"Frame read failed on {self.device_id}")
            return None

        self.frames_read += 1
        return FrameData.from_numpy(self._transform(frame), frame_index=self.frames_read, source=self.source_id)

    def _transform(self, frame: np.ndarray) -> np.ndarray:
        if self.config.rotate in ROTATIONS:
            frame = cv2.rotate(frame, ROTATIONS[self.config.rotate])
        if self.config.flip_horizontal:
            frame = cv2.flip(frame, 1)
        return frame

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
        if self._opened:
            logging.info(f"Frame source {self.source_id} closed")
        self._opened = False

    @property
    def nominal_fps(self) -> float:
        """Rate reported by the device; 0.0 when closed or unknown."""
        if self._cap is None:
            return 0.0
        return float(self._cap.get(cv2.CAP_PROP_FPS) or 0.0)
