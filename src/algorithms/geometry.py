"""
Geometry helpers shared by the detectors and the tracker.

Boxes are models.detection.BoundingBox instances in (x, y, width, height)
pixel form.
"""

from __future__ import annotations

import math
from typing import List, Sequence

import cv2
import numpy as np

from models.detection import BoundingBox


def intersection_over_union(box1: BoundingBox, box2: BoundingBox) -> float:
    """
    Calculate Intersection over Union (IoU) between two boxes.

    Returns:
        IoU value between 0 and 1 (0 when either box is empty).
    """
    x1_i = max(box1.x, box2.x)
    y1_i = max(box1.y, box2.y)
    x2_i = min(box1.x2, box2.x2)
    y2_i = min(box1.y2, box2.y2)

    if x2_i <= x1_i or y2_i <= y1_i:
        return 0.0

    intersection = (x2_i - x1_i) * (y2_i - y1_i)
    union = box1.area + box2.area - intersection

    if union <= 0:
        return 0.0

    return intersection / union


def centroid_distance(box1: BoundingBox, box2: BoundingBox) -> float:
    """Euclidean distance between the centers of two boxes."""
    cx1, cy1 = box1.center
    cx2, cy2 = box2.center
    return math.hypot(cx1 - cx2, cy1 - cy2)


def non_max_suppression(
    boxes: Sequence[BoundingBox],
    scores: Sequence[float],
    score_threshold: float,
    iou_threshold: float,
) -> List[int]:
    """
    Greedy non-maximum suppression through cv2.dnn.NMSBoxes.

    Candidates scoring at or below score_threshold are discarded first, the
    rest are visited in descending score order (stable for equal scores) and a
    candidate is kept only if its IoU with every already kept box is
    <= iou_threshold.

    Returns:
        Indices into boxes of the kept candidates, highest score first.
    """
    if len(boxes) != len(scores):
        raise ValueError(f"Got {len(boxes)} boxes but {len(scores)} scores")
    if not boxes:
        return []

    indices = cv2.dnn.NMSBoxes(
        [list(b.as_xywh()) for b in boxes],
        [float(s) for s in scores],
        score_threshold,
        iou_threshold,
    )
    # (N,), (N, 1) or () depending on the OpenCV release
    return [int(i) for i in np.array(indices).flatten()]
