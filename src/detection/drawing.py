"""
Overlay drawing helpers (OpenCV, BGR colors).
"""

from __future__ import annotations

from typing import Tuple

import cv2
import numpy as np

from models.detection import BoundingBox

FONT = cv2.FONT_HERSHEY_SIMPLEX

COLOR_WHITE = (255, 255, 255)
COLOR_MAGENTA = (255, 0, 255)
COLOR_CYAN = (255, 255, 0)


def draw_labeled_box(
    frame: np.ndarray,
    box: BoundingBox,
    label: str,
    color: Tuple[int, int, int],
    font_scale: float = 0.7,
    thickness: int = 2,
) -> None:
    """Outline box and write label just above its top-left corner."""
    x1, y1, x2, y2 = box.as_xyxy()
    cv2.rectangle(frame, (x1, y1), (x2, y2), color, thickness)
    cv2.putText(frame, label, (x1, y1 - 10), FONT, font_scale, color, thickness)


def draw_filled_label_box(
    frame: np.ndarray,
    box: BoundingBox,
    label: str,
    color: Tuple[int, int, int],
    font_scale: float = 0.5,
) -> None:
    """Outline box and write label in white over a filled strip of the box color."""
    x1, y1, x2, y2 = box.as_xyxy()
    cv2.rectangle(frame, (x1, y1), (x2, y2), color, 2)

    (tw, th), baseline = cv2.getTextSize(label, FONT, font_scale, 1)
    cv2.rectangle(frame, (box.x, box.y - th - baseline), (box.x + tw, box.y), color, -1)
    cv2.putText(frame, label, (box.x, box.y - baseline), FONT, font_scale, COLOR_WHITE, 1)


def draw_identity(frame: np.ndarray, box: BoundingBox, identity: int) -> None:
    """Write the track identity under the bottom-left corner of box."""
    cv2.putText(frame, f"ID: {identity}", (box.x, box.y2 + 20), FONT, 0.6, COLOR_MAGENTA, 2)
