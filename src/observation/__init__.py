"""
Observation layer: frame sources for the runner.

Capture stays outside the detection core; sources return FrameData objects
that the runner hands to the pipeline controller.
"""

from .base import ObservationSource, ObservationConfig
from .opencv_source import OpenCVSource, OpenCVSourceConfig

__all__ = [
    "ObservationSource",
    "ObservationConfig",
    "OpenCVSource",
    "OpenCVSourceConfig",
]
