"""
Detection module.

Classical detectors (cascade faces, HOG pedestrians, HSV colors, contour
shapes) and the neural object detector, all behind the Detector interface.
"""

from .base import Detector, DetectorGroup, drop_invalid
from .cascade import CascadeFaceDetector, load_cascade
from .color import ColorClass, ColorSegmentationDetector, DEFAULT_COLOR_CLASSES
from .features import KeypointOverlay
from .neural import NeuralObjectDetector, decode_outputs
from .palette import COCO_CLASS_NAMES, ClassPalette
from .pedestrian import PedestrianDetector, create_people_hog
from .shapes import ShapeClassifier, classify_vertices

__all__ = [
    "Detector",
    "DetectorGroup",
    "drop_invalid",
    "CascadeFaceDetector",
    "load_cascade",
    "ColorClass",
    "ColorSegmentationDetector",
    "DEFAULT_COLOR_CLASSES",
    "KeypointOverlay",
    "NeuralObjectDetector",
    "decode_outputs",
    "COCO_CLASS_NAMES",
    "ClassPalette",
    "PedestrianDetector",
    "create_people_hog",
    "ShapeClassifier",
    "classify_vertices",
]
