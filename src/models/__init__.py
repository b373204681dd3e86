"""
Typed models for the detection pipeline.

Frames, detections, track records and configuration live here so every layer
shares one vocabulary.
"""

from .frame import FrameData
from .detection import Detection, BoundingBox
from .track import TrackRecord, TrackAssignment
from .config import (
    Config,
    CameraConfig,
    PipelineConfig,
    DetectionConfig,
    NeuralConfig,
    CascadeConfig,
    PedestrianConfig,
    ColorConfig,
    ShapeConfig,
    FeatureConfig,
    TrackingConfig,
)

__all__ = [
    # Frame
    "FrameData",
    # Detection
    "Detection",
    "BoundingBox",
    # Tracking
    "TrackRecord",
    "TrackAssignment",
    # Config
    "Config",
    "CameraConfig",
    "PipelineConfig",
    "DetectionConfig",
    "NeuralConfig",
    "CascadeConfig",
    "PedestrianConfig",
    "ColorConfig",
    "ShapeConfig",
    "FeatureConfig",
    "TrackingConfig",
]
