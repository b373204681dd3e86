"""
Pipeline module for the detection system.

The pipeline orchestrates the per-frame flow:
- Detector selection and isolated execution (DetectionEnsemble)
- Identity tracking and annotation (PipelineController)
"""

from .ensemble import DetectionEnsemble, DetectorOutcome, EnsembleResult
from .controller import (
    PipelineController,
    PipelineStats,
    build_detectors,
    create_controller_from_config,
    load_neural_backend,
)

__all__ = [
    "DetectionEnsemble",
    "DetectorOutcome",
    "EnsembleResult",
    "PipelineController",
    "PipelineStats",
    "build_detectors",
    "create_controller_from_config",
    "load_neural_backend",
]
