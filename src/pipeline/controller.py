"""
Pipeline controller: the single per-frame entry point.

process(frame, config) runs the detection ensemble, assigns identities when
tracking is enabled and returns the annotated copy of the frame. Calls must not
overlap; the controller holds the tracker state and does no locking.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from detection.base import Detector
from detection.cascade import CascadeFaceDetector, load_cascade
from detection.color import ColorSegmentationDetector
from detection.drawing import draw_identity
from detection.features import KeypointOverlay
from detection.neural import NeuralObjectDetector
from detection.palette import COCO_CLASS_NAMES, ClassPalette
from detection.pedestrian import PedestrianDetector, create_people_hog
from detection.shapes import ShapeClassifier
from inference.backend import InferenceBackend
from inference.opencv_dnn_backend import OpenCvDnnBackend, load_class_names
from models.config import Config, DetectionConfig, NeuralConfig, PipelineConfig
from models.track import TrackAssignment
from pipeline.ensemble import DetectionEnsemble, EnsembleResult
from tracking.tracker import IdentityTracker


@dataclass
class PipelineStats:
    """Runtime statistics for the controller."""
    frame_count: int = 0
    detection_count: int = 0
    detector_failures: int = 0
    last_latency_ms: float = 0.0
    total_latency_ms: float = 0.0
    start_time: float = field(default_factory=time.time)

    @property
    def mean_latency_ms(self) -> float:
        return self.total_latency_ms / self.frame_count if self.frame_count else 0.0

    @property
    def fps(self) -> float:
        elapsed = time.time() - self.start_time
        return self.frame_count / elapsed if elapsed > 0 else 0.0


class PipelineController:
    """
    Runs one frame through detection, tracking and annotation.

    Example:
        controller = create_controller_from_config(Config())
        annotated = controller.process(frame)
    """

    def __init__(
        self,
        ensemble: DetectionEnsemble,
        tracker: Optional[IdentityTracker] = None,
        config: Optional[PipelineConfig] = None,
        backend: Optional[InferenceBackend] = None,
    ):
        self.ensemble = ensemble
        self.tracker = tracker
        self.config = config or PipelineConfig()
        self.backend = backend
        self.stats = PipelineStats()
        self.last_result: Optional[EnsembleResult] = None
        self.last_assignments: List[TrackAssignment] = []
        self._accelerated = False

    @property
    def advanced_available(self) -> bool:
        return self.ensemble.advanced_available

    def process(self, frame: np.ndarray, config: Optional[PipelineConfig] = None) -> np.ndarray:
        """
        Annotate one frame.

        Args:
            frame: BGR image of shape (H, W, 3). Not modified.
            config: Toggles for this call; defaults to self.config.

        Returns:
            A new annotated frame with the same shape and dtype.

        Raises:
            ValueError: If frame is not a 3-channel image, or tracking is
                        enabled without a tracker.
        """
        if not isinstance(frame, np.ndarray) or frame.ndim != 3 or frame.shape[2] != 3:
            raise ValueError("frame must be a numpy array of shape (H, W, 3)")

        cfg = config or self.config
        if cfg.tracking_enabled and self.tracker is None:
            raise ValueError("tracking enabled but the controller has no tracker")

        start = time.perf_counter()
        self._apply_acceleration(cfg.gpu_acceleration_requested)

        result = self.ensemble.run(frame, cfg)

        assignments: List[TrackAssignment] = []
        if cfg.tracking_enabled:
            assignments = self.tracker.update(result.detections)
            for assignment in assignments:
                draw_identity(result.frame, assignment.detection.bbox, assignment.identity)

        self.last_result = result
        self.last_assignments = assignments

        latency_ms = (time.perf_counter() - start) * 1000.0
        self.stats.frame_count += 1
        self.stats.detection_count += len(result.detections)
        self.stats.detector_failures += len(result.failed)
        self.stats.last_latency_ms = latency_ms
        self.stats.total_latency_ms += latency_ms

        return result.frame

    def _apply_acceleration(self, requested: bool) -> None:
        """Switch the backend target when the request changes; failures only log."""
        if requested == self._accelerated:
            return
        # remember the request either way so a failing switch isn't retried every frame
        self._accelerated = requested
        if self.backend is None:
            if requested:
                logging.info("GPU acceleration requested but no inference backend is loaded")
            return
        try:
            self.backend.set_accelerated(requested)
        except Exception as e:
            logging.warning(f"GPU acceleration change failed: {e}")


def build_detectors(
    detection_cfg: DetectionConfig,
    backend: Optional[InferenceBackend] = None,
    class_names: Optional[List[str]] = None,
) -> List[Detector]:
    """
    Create every available detector, in ensemble order.

    A detector whose artifacts fail to load is logged and left out.
    """
    detectors: List[Detector] = []

    if backend is not None:
        neural_cfg = detection_cfg.neural or NeuralConfig()
        try:
            names = class_names if class_names is not None else COCO_CLASS_NAMES
            detectors.append(
                NeuralObjectDetector(
                    backend,
                    names,
                    palette=ClassPalette.from_seed(len(names)),
                    input_size=neural_cfg.input_size,
                    objectness_threshold=neural_cfg.objectness_threshold,
                    score_threshold=neural_cfg.score_threshold,
                    nms_threshold=neural_cfg.nms_threshold,
                )
            )
        except ValueError as e:
            logging.warning(f"Neural detector unavailable: {e}")

    cascade_cfg = detection_cfg.cascade
    if cascade_cfg.enabled:
        try:
            detectors.append(
                CascadeFaceDetector(
                    load_cascade(cascade_cfg.path),
                    scale_factor=cascade_cfg.scale_factor,
                    min_neighbors=cascade_cfg.min_neighbors,
                    min_size=(cascade_cfg.min_size, cascade_cfg.min_size),
                )
            )
        except Exception as e:
            logging.warning(f"Face detector unavailable: {e}")

    pedestrian_cfg = detection_cfg.pedestrian
    if pedestrian_cfg.enabled:
        try:
            detectors.append(
                PedestrianDetector(
                    create_people_hog(),
                    win_stride=pedestrian_cfg.win_stride,
                    padding=pedestrian_cfg.padding,
                    scale=pedestrian_cfg.scale,
                    group_threshold=pedestrian_cfg.group_threshold,
                )
            )
        except Exception as e:
            logging.warning(f"Pedestrian detector unavailable: {e}")

    if detection_cfg.color.enabled:
        detectors.append(ColorSegmentationDetector(min_area=detection_cfg.color.min_area))

    shapes_cfg = detection_cfg.shapes
    if shapes_cfg.enabled:
        detectors.append(
            ShapeClassifier(
                min_area=shapes_cfg.min_area,
                blur_kernel=shapes_cfg.blur_kernel,
                canny_low=shapes_cfg.canny_low,
                canny_high=shapes_cfg.canny_high,
                epsilon_ratio=shapes_cfg.epsilon_ratio,
            )
        )

    logging.info(f"Detectors available: {[d.name for d in detectors]}")
    return detectors


def load_neural_backend(neural_cfg: Optional[NeuralConfig]):
    """
    Load the Darknet backend and class table.

    Returns:
        (backend, class_names), or (None, None) when not configured or not loadable.
    """
    if neural_cfg is None or not neural_cfg.model_config or not neural_cfg.model_weights:
        logging.info("No neural model configured; advanced detection unavailable")
        return None, None

    try:
        backend = OpenCvDnnBackend.from_darknet(neural_cfg.model_config, neural_cfg.model_weights)
        class_names = (
            load_class_names(neural_cfg.class_names_path)
            if neural_cfg.class_names_path
            else list(COCO_CLASS_NAMES)
        )
    except Exception as e:
        logging.warning(f"Neural model could not be loaded: {e}")
        return None, None

    return backend, class_names


def create_controller_from_config(config: Config) -> PipelineController:
    """
    Factory function to create a PipelineController from a typed Config.

    Loads model artifacts, builds the ensemble and tracker and copies the
    configured toggles into the controller's PipelineConfig.
    """
    backend, class_names = load_neural_backend(config.detection.neural)
    detectors = build_detectors(config.detection, backend=backend, class_names=class_names)

    ensemble = DetectionEnsemble(
        detectors,
        feature_overlay=KeypointOverlay(max_features=config.detection.features.max_features),
    )
    tracker = IdentityTracker(
        max_distance=config.tracking.max_distance,
        max_frames_since_seen=config.tracking.max_frames_since_seen,
        smoothing=config.tracking.smoothing,
    )

    pipeline_cfg = PipelineConfig(**vars(config.pipeline))
    if pipeline_cfg.advanced_detection_enabled and not ensemble.advanced_available:
        logging.warning("Advanced detection requested but unavailable; using classical detectors")
        pipeline_cfg.advanced_detection_enabled = False

    return PipelineController(ensemble, tracker=tracker, config=pipeline_cfg, backend=backend)
