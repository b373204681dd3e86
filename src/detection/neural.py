"""
Neural object detector for grid-based (YOLOv3-style) networks.

Output rows are laid out as:
    [cx, cy, w, h, objectness, class_0 ... class_N]
with box values normalized to the frame size.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

import cv2
import numpy as np

from algorithms.geometry import non_max_suppression
from inference.backend import InferenceBackend
from models.detection import BoundingBox, Detection
from .base import Detector, DetectorGroup
from .drawing import draw_filled_label_box
from .palette import NUM_CLASSES, ClassPalette

OBJECTNESS_COLUMN = 4
FIRST_CLASS_COLUMN = 5


@dataclass(frozen=True)
class Candidate:
    """A decoded output row that passed the objectness filter."""
    bbox: BoundingBox
    score: float
    class_id: int


def decode_outputs(
    outputs: Sequence[np.ndarray],
    frame_width: int,
    frame_height: int,
    objectness_threshold: float,
) -> List[Candidate]:
    """
    Decode raw network outputs into pixel-space candidates.

    Rows with objectness <= objectness_threshold are rejected. The candidate
    score is the best class score multiplied by objectness. Boxes with no area
    after truncation to integer pixels are dropped.
    """
    candidates: List[Candidate] = []
    for output in outputs:
        rows = np.asarray(output, dtype=np.float32)
        if rows.size == 0:
            continue
        rows = rows.reshape(-1, rows.shape[-1])
        if rows.shape[1] <= FIRST_CLASS_COLUMN:
            continue

        for row in rows[rows[:, OBJECTNESS_COLUMN] > objectness_threshold]:
            objectness = float(row[OBJECTNESS_COLUMN])
            class_scores = row[FIRST_CLASS_COLUMN:]
            class_id = int(np.argmax(class_scores))

            center_x = row[0] * frame_width
            center_y = row[1] * frame_height
            width = row[2] * frame_width
            height = row[3] * frame_height
            bbox = BoundingBox(
                x=int(center_x - width / 2),
                y=int(center_y - height / 2),
                width=int(width),
                height=int(height),
            )
            if bbox.is_degenerate:
                continue

            candidates.append(
                Candidate(bbox=bbox, score=float(class_scores[class_id]) * objectness, class_id=class_id)
            )

    return candidates


class NeuralObjectDetector(Detector):
    """
    80-class object detector running through an InferenceBackend.

    Pipeline per frame: blob -> forward -> objectness filter -> decode ->
    NMS -> class-range check.
    """

    name = "neural"
    group = DetectorGroup.ADVANCED

    def __init__(
        self,
        backend: InferenceBackend,
        class_names: Sequence[str],
        palette: Optional[ClassPalette] = None,
        input_size: int = 416,
        objectness_threshold: float = 0.7,
        score_threshold: float = 0.6,
        nms_threshold: float = 0.3,
    ):
        if backend is None:
            raise ValueError("NeuralObjectDetector requires an initialized backend")
        if len(class_names) != NUM_CLASSES:
            raise ValueError(f"Expected {NUM_CLASSES} class names, got {len(class_names)}")

        self.backend = backend
        self.class_names = list(class_names)
        self.palette = palette or ClassPalette.from_seed(len(self.class_names))
        self.input_size = input_size
        self.objectness_threshold = objectness_threshold
        self.score_threshold = score_threshold
        self.nms_threshold = nms_threshold

    def make_blob(self, frame: np.ndarray) -> np.ndarray:
        """Scale to [0, 1], resize to the network input and swap BGR -> RGB."""
        return cv2.dnn.blobFromImage(
            frame,
            1.0 / 255.0,
            (self.input_size, self.input_size),
            (0, 0, 0),
            swapRB=True,
            crop=False,
        )

    def detect(self, frame: np.ndarray) -> List[Detection]:
        frame_height, frame_width = frame.shape[:2]

        self.backend.set_input(self.make_blob(frame))
        outputs = self.backend.forward()

        candidates = decode_outputs(outputs, frame_width, frame_height, self.objectness_threshold)
        if not candidates:
            return []

        keep = non_max_suppression(
            [c.bbox for c in candidates],
            [c.score for c in candidates],
            self.score_threshold,
            self.nms_threshold,
        )

        detections: List[Detection] = []
        for idx in keep:
            cand = candidates[idx]
            if cand.class_id >= len(self.class_names):
                continue
            detections.append(
                Detection(
                    bbox=cand.bbox,
                    label=self.class_names[cand.class_id],
                    source=self.name,
                    confidence=cand.score,
                    class_id=cand.class_id,
                )
            )
        return detections

    def annotate(self, frame: np.ndarray, detections: Iterable[Detection]) -> None:
        for det in detections:
            draw_filled_label_box(frame, det.bbox, det.display_label, self.color_for(det))

    def color_for(self, detection: Detection):
        return self.palette.color_for(detection.class_id)
