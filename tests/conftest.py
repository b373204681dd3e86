"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import cv2
import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from detection.base import Detector  # noqa: E402
from models.detection import Detection  # noqa: E402


class StubDetector(Detector):
    """Detector returning fixed rects, for ensemble and controller tests."""

    def __init__(self, name, rects, label=None, group=None, color=(0, 255, 0)):
        self.name = name
        self.label = label or name
        self.rects = list(rects)
        self.color = color
        self.calls = 0
        if group is not None:
            self.group = group

    def detect(self, frame):
        self.calls += 1
        return [Detection.from_rect(r, label=self.label, source=self.name) for r in self.rects]


class FailingDetector(Detector):
    """Detector that always raises."""

    def __init__(self, name="broken"):
        self.name = name

    def detect(self, frame):
        raise RuntimeError("detector exploded")


class FakeBackend:
    """In-memory InferenceBackend returning canned output layers."""

    def __init__(self, outputs=None, fail_acceleration=False):
        self.outputs = outputs if outputs is not None else []
        self.fail_acceleration = fail_acceleration
        self.inputs = []
        self.acceleration_calls = []

    def set_input(self, blob):
        self.inputs.append(blob)

    def forward(self):
        return list(self.outputs)

    def set_accelerated(self, enabled):
        self.acceleration_calls.append(enabled)
        if self.fail_acceleration:
            raise RuntimeError("CUDA not available")


def yolo_row(cx, cy, w, h, objectness, class_id, class_score=1.0, num_classes=80):
    """One YOLO output row with a single non-zero class score."""
    row = np.zeros(5 + num_classes, dtype=np.float32)
    row[:5] = [cx, cy, w, h, objectness]
    row[5 + class_id] = class_score
    return row


@pytest.fixture
def blank_frame():
    """Black 480x640 BGR frame."""
    return np.zeros((480, 640, 3), dtype=np.uint8)


@pytest.fixture
def blue_frame():
    """Black frame with one 60x60 pure blue square at (300, 200)."""
    frame = np.zeros((480, 640, 3), dtype=np.uint8)
    cv2.rectangle(frame, (300, 200), (359, 259), (255, 0, 0), -1)
    return frame


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
camera:
  device_id: 0
  resolution: [640, 480]
  fps: 30

pipeline:
  tracking: false

detection:
  color:
    min_area: 1000
  shapes:
    min_area: 1000

tracking:
  max_distance: 100

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "camera": {
            "device_id": 0,
            "resolution": [640, 480],
            "fps": 30,
        },
        "pipeline": {
            "advanced_detection": False,
            "tracking": True,
        },
        "detection": {
            "cascade": {"scale_factor": 1.1, "min_neighbors": 5},
            "color": {"min_area": 1000},
            "shapes": {"min_area": 1000},
        },
        "tracking": {
            "max_distance": 100,
            "max_frames_since_seen": 30,
        },
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
