"""
COCO class table and the per-class display palette for neural detections.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

NUM_CLASSES = 80
PALETTE_SEED = 42

COCO_CLASS_NAMES: List[str] = [
    "person", "bicycle", "car", "motorcycle", "airplane", "bus", "train", "truck", "boat",
    "traffic light", "fire hydrant", "stop sign", "parking meter", "bench", "bird", "cat",
    "dog", "horse", "sheep", "cow", "elephant", "bear", "zebra", "giraffe", "backpack",
    "umbrella", "handbag", "tie", "suitcase", "frisbee", "skis", "snowboard", "sports ball",
    "kite", "baseball bat", "baseball glove", "skateboard", "surfboard", "tennis racket",
    "bottle", "wine glass", "cup", "fork", "knife", "spoon", "bowl", "banana", "apple",
    "sandwich", "orange", "broccoli", "carrot", "hot dog", "pizza", "donut", "cake",
    "chair", "couch", "potted plant", "bed", "dining table", "toilet", "tv", "laptop",
    "mouse", "remote", "keyboard", "cell phone", "microwave", "oven", "toaster", "sink",
    "refrigerator", "book", "clock", "vase", "scissors", "teddy bear", "hair drier", "toothbrush",
]


class ClassPalette:
    """
    Deterministic class index -> BGR color mapping.

    Colors come from NumPy's legacy RandomState, whose stream is frozen, so the
    same seed yields the same colors in every process and NumPy release.
    """

    def __init__(self, colors: Sequence[Tuple[int, int, int]]):
        self._colors: Tuple[Tuple[int, int, int], ...] = tuple(tuple(c) for c in colors)

    @classmethod
    def from_seed(cls, num_classes: int = NUM_CLASSES, seed: int = PALETTE_SEED) -> "ClassPalette":
        rng = np.random.RandomState(seed)
        values = rng.randint(0, 255, size=(num_classes, 3))
        return cls([tuple(int(v) for v in row) for row in values])

    def __len__(self) -> int:
        return len(self._colors)

    def __getitem__(self, class_id: int) -> Tuple[int, int, int]:
        return self._colors[class_id]

    def color_for(self, class_id: int) -> Tuple[int, int, int]:
        if not 0 <= class_id < len(self._colors):
            raise IndexError(f"class_id {class_id} outside palette of {len(self._colors)} colors")
        return self._colors[class_id]
