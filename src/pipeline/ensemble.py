"""
Detection ensemble.

Selects which detectors run for a call, runs each inside its own error
boundary and draws their results onto a copy of the input frame.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from detection.base import Detector, DetectorGroup, drop_invalid
from detection.features import KeypointOverlay
from models.config import PipelineConfig
from models.detection import Detection


@dataclass
class DetectorOutcome:
    """
    Result of one detector invocation.

    Attributes:
        name: Detector name.
        detections: Valid detections produced (empty on failure).
        error: The exception raised by the detector, if any.
        elapsed_ms: Wall time spent in detect + annotate.
    """
    name: str
    detections: List[Detection] = field(default_factory=list)
    error: Optional[BaseException] = None
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class EnsembleResult:
    """Annotated working frame plus per-detector outcomes, in run order."""
    frame: np.ndarray
    outcomes: List[DetectorOutcome] = field(default_factory=list)
    keypoints: int = 0

    @property
    def detections(self) -> List[Detection]:
        """All detections, in detector order then production order."""
        return [det for outcome in self.outcomes for det in outcome.detections]

    @property
    def failed(self) -> List[DetectorOutcome]:
        return [o for o in self.outcomes if not o.ok]


class DetectionEnsemble:
    """
    Runs a configurable subset of detectors over one frame.

    Advanced detectors replace the basic bundle when advanced detection is
    enabled and at least one advanced detector is registered; the two groups
    never run together.

    Example:
        ensemble = DetectionEnsemble([face, pedestrian, color, shapes])
        result = ensemble.run(frame, PipelineConfig())
        for det in result.detections:
            ...
    """

    def __init__(
        self,
        detectors: Sequence[Detector],
        feature_overlay: Optional[KeypointOverlay] = None,
    ):
        self.detectors = list(detectors)
        self.feature_overlay = feature_overlay

    @property
    def advanced_available(self) -> bool:
        return any(d.group == DetectorGroup.ADVANCED for d in self.detectors)

    def select(self, config: PipelineConfig) -> List[Detector]:
        """Detectors that run for config, in registration order."""
        if config.advanced_detection_enabled and self.advanced_available:
            group = DetectorGroup.ADVANCED
        else:
            group = DetectorGroup.BASIC
        return [d for d in self.detectors if d.group == group]

    def run(self, frame: np.ndarray, config: PipelineConfig) -> EnsembleResult:
        """
        Detect on frame and annotate a copy of it.

        The input frame is only read; detectors never see each other's overlays.
        """
        result = EnsembleResult(frame=frame.copy())

        for detector in self.select(config):
            result.outcomes.append(self._run_detector(detector, frame, result.frame))

        if config.feature_overlay_enabled and self.feature_overlay is not None:
            try:
                result.keypoints = self.feature_overlay.draw(frame, result.frame)
            except Exception:
                logging.exception("Feature overlay failed")

        return result

    def _run_detector(self, detector: Detector, frame: np.ndarray, canvas: np.ndarray) -> DetectorOutcome:
        start = time.perf_counter()
        try:
            detections = drop_invalid(detector.detect(frame))
            detector.annotate(canvas, detections)
        except Exception as e:
            logging.exception(f"Detector '{detector.name}' failed")
            return DetectorOutcome(
                name=detector.name,
                error=e,
                elapsed_ms=(time.perf_counter() - start) * 1000.0,
            )

        return DetectorOutcome(
            name=detector.name,
            detections=detections,
            elapsed_ms=(time.perf_counter() - start) * 1000.0,
        )
