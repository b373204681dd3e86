"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class CameraConfig:
    """Frame source configuration."""
    device_id: Union[int, str] = 0
    resolution: List[int] = field(default_factory=lambda: [640, 480])
    fps: int = 30
    rotate: int = 0
    flip_horizontal: bool = False

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CameraConfig":
        """Adapter: Create from config dictionary."""
        return cls(
            device_id=d.get("device_id", 0),
            resolution=d.get("resolution", [640, 480]),
            fps=d.get("fps", 30),
            rotate=d.get("rotate", 0) or 0,
            flip_horizontal=d.get("flip_horizontal", False),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "device_id": self.device_id,
            "resolution": self.resolution,
            "fps": self.fps,
            "rotate": self.rotate,
            "flip_horizontal": self.flip_horizontal,
        }


@dataclass
class PipelineConfig:
    """
    Per-call pipeline toggles.

    The controller reads these at the start of every call, so callers may flip
    them between frames.
    """
    advanced_detection_enabled: bool = False
    feature_overlay_enabled: bool = False
    tracking_enabled: bool = False
    gpu_acceleration_requested: bool = False

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PipelineConfig":
        return cls(
            advanced_detection_enabled=d.get("advanced_detection", False),
            feature_overlay_enabled=d.get("feature_overlay", False),
            tracking_enabled=d.get("tracking", False),
            gpu_acceleration_requested=d.get("gpu_acceleration", False),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "advanced_detection": self.advanced_detection_enabled,
            "feature_overlay": self.feature_overlay_enabled,
            "tracking": self.tracking_enabled,
            "gpu_acceleration": self.gpu_acceleration_requested,
        }


@dataclass
class NeuralConfig:
    """Darknet (YOLO) detector configuration."""
    model_config: str = ""
    model_weights: str = ""
    class_names_path: Optional[str] = None
    input_size: int = 416
    objectness_threshold: float = 0.7
    score_threshold: float = 0.6
    nms_threshold: float = 0.3

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "NeuralConfig":
        return cls(
            model_config=d.get("model_config", ""),
            model_weights=d.get("model_weights", ""),
            class_names_path=d.get("class_names_path"),
            input_size=d.get("input_size", 416),
            objectness_threshold=d.get("objectness_threshold", 0.7),
            score_threshold=d.get("score_threshold", 0.6),
            nms_threshold=d.get("nms_threshold", 0.3),
        )

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "model_config": self.model_config,
            "model_weights": self.model_weights,
            "input_size": self.input_size,
            "objectness_threshold": self.objectness_threshold,
            "score_threshold": self.score_threshold,
            "nms_threshold": self.nms_threshold,
        }
        if self.class_names_path is not None:
            d["class_names_path"] = self.class_names_path
        return d


@dataclass
class CascadeConfig:
    """Haar cascade face detector configuration. path=None uses OpenCV's bundled cascade."""
    enabled: bool = True
    path: Optional[str] = None
    scale_factor: float = 1.1
    min_neighbors: int = 5
    min_size: int = 50

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CascadeConfig":
        return cls(
            enabled=d.get("enabled", True),
            path=d.get("path"),
            scale_factor=d.get("scale_factor", 1.1),
            min_neighbors=d.get("min_neighbors", 5),
            min_size=d.get("min_size", 50),
        )

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "enabled": self.enabled,
            "scale_factor": self.scale_factor,
            "min_neighbors": self.min_neighbors,
            "min_size": self.min_size,
        }
        if self.path is not None:
            d["path"] = self.path
        return d


@dataclass
class PedestrianConfig:
    """HOG people detector configuration."""
    enabled: bool = True
    win_stride: int = 8
    padding: int = 32
    scale: float = 1.05
    group_threshold: int = 3

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PedestrianConfig":
        return cls(
            enabled=d.get("enabled", True),
            win_stride=d.get("win_stride", 8),
            padding=d.get("padding", 32),
            scale=d.get("scale", 1.05),
            group_threshold=d.get("group_threshold", 3),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "win_stride": self.win_stride,
            "padding": self.padding,
            "scale": self.scale,
            "group_threshold": self.group_threshold,
        }


@dataclass
class ColorConfig:
    """HSV color segmentation configuration."""
    enabled: bool = True
    min_area: float = 1000.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ColorConfig":
        return cls(
            enabled=d.get("enabled", True),
            min_area=d.get("min_area", 1000.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "min_area": self.min_area}


@dataclass
class ShapeConfig:
    """Contour shape classifier configuration."""
    enabled: bool = True
    min_area: float = 1000.0
    blur_kernel: int = 5
    canny_low: int = 50
    canny_high: int = 150
    epsilon_ratio: float = 0.02

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ShapeConfig":
        return cls(
            enabled=d.get("enabled", True),
            min_area=d.get("min_area", 1000.0),
            blur_kernel=d.get("blur_kernel", 5),
            canny_low=d.get("canny_low", 50),
            canny_high=d.get("canny_high", 150),
            epsilon_ratio=d.get("epsilon_ratio", 0.02),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "min_area": self.min_area,
            "blur_kernel": self.blur_kernel,
            "canny_low": self.canny_low,
            "canny_high": self.canny_high,
            "epsilon_ratio": self.epsilon_ratio,
        }


@dataclass
class FeatureConfig:
    """Keypoint overlay configuration."""
    max_features: int = 500

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FeatureConfig":
        return cls(max_features=d.get("max_features", 500))

    def to_dict(self) -> Dict[str, Any]:
        return {"max_features": self.max_features}


@dataclass
class DetectionConfig:
    """Detector ensemble configuration."""
    neural: Optional[NeuralConfig] = None
    cascade: CascadeConfig = field(default_factory=CascadeConfig)
    pedestrian: PedestrianConfig = field(default_factory=PedestrianConfig)
    color: ColorConfig = field(default_factory=ColorConfig)
    shapes: ShapeConfig = field(default_factory=ShapeConfig)
    features: FeatureConfig = field(default_factory=FeatureConfig)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectionConfig":
        neural_dict = d.get("neural")
        neural = NeuralConfig.from_dict(neural_dict) if neural_dict else None
        return cls(
            neural=neural,
            cascade=CascadeConfig.from_dict(d.get("cascade", {}) or {}),
            pedestrian=PedestrianConfig.from_dict(d.get("pedestrian", {}) or {}),
            color=ColorConfig.from_dict(d.get("color", {}) or {}),
            shapes=ShapeConfig.from_dict(d.get("shapes", {}) or {}),
            features=FeatureConfig.from_dict(d.get("features", {}) or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "cascade": self.cascade.to_dict(),
            "pedestrian": self.pedestrian.to_dict(),
            "color": self.color.to_dict(),
            "shapes": self.shapes.to_dict(),
            "features": self.features.to_dict(),
        }
        if self.neural:
            d["neural"] = self.neural.to_dict()
        return d


@dataclass
class TrackingConfig:
    """Identity tracker configuration. max_frames_since_seen=None disables eviction."""
    max_distance: float = 100.0
    max_frames_since_seen: Optional[int] = 30
    smoothing: bool = False

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TrackingConfig":
        return cls(
            max_distance=d.get("max_distance", 100.0),
            max_frames_since_seen=d.get("max_frames_since_seen", 30),
            smoothing=d.get("smoothing", False),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_distance": self.max_distance,
            "max_frames_since_seen": self.max_frames_since_seen,
            "smoothing": self.smoothing,
        }


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    camera: CameraConfig = field(default_factory=CameraConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    log_path: str = "logs/pipeline.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            camera=CameraConfig.from_dict(d.get("camera", {}) or {}),
            pipeline=PipelineConfig.from_dict(d.get("pipeline", {}) or {}),
            detection=DetectionConfig.from_dict(d.get("detection", {}) or {}),
            tracking=TrackingConfig.from_dict(d.get("tracking", {}) or {}),
            log_path=d.get("log_path", "logs/pipeline.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for saving or dumping to YAML)."""
        return {
            "camera": self.camera.to_dict(),
            "pipeline": self.pipeline.to_dict(),
            "detection": self.detection.to_dict(),
            "tracking": self.tracking.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
