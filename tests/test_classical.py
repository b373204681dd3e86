"""
Tests for the cascade face and HOG pedestrian detectors.
"""

from unittest.mock import MagicMock

import cv2
import numpy as np
import pytest

from detection.base import DetectorGroup
from detection.cascade import CascadeFaceDetector, load_cascade
from detection.pedestrian import PedestrianDetector, create_people_hog
from models.detection import BoundingBox


class TestCascadeFaceDetector:
    def test_wraps_classifier_hits(self, blank_frame):
        classifier = MagicMock()
        classifier.detectMultiScale.return_value = np.array([[10, 20, 60, 60], [200, 100, 80, 80]], dtype=np.int32)

        dets = CascadeFaceDetector(classifier).detect(blank_frame)

        assert [d.bbox for d in dets] == [BoundingBox(10, 20, 60, 60), BoundingBox(200, 100, 80, 80)]
        assert all(d.label == "face" and d.confidence is None for d in dets)

    def test_passes_grayscale_and_parameters(self, blank_frame):
        classifier = MagicMock()
        classifier.detectMultiScale.return_value = ()

        detector = CascadeFaceDetector(classifier, scale_factor=1.2, min_neighbors=3, min_size=(40, 40))
        assert detector.detect(blank_frame) == []

        args, kwargs = classifier.detectMultiScale.call_args
        assert args[0].shape == (480, 640)
        assert kwargs["scaleFactor"] == 1.2
        assert kwargs["minNeighbors"] == 3
        assert kwargs["minSize"] == (40, 40)

    def test_group_is_basic(self):
        assert CascadeFaceDetector(MagicMock()).group == DetectorGroup.BASIC

    def test_load_default_cascade(self):
        classifier = load_cascade()
        assert not classifier.empty()

    def test_bundled_cascade_on_blank_frame(self, blank_frame):
        assert CascadeFaceDetector(load_cascade()).detect(blank_frame) == []

    def test_load_missing_cascade(self, tmp_path):
        with pytest.raises((RuntimeError, cv2.error)):
            load_cascade(str(tmp_path / "missing.xml"))


class TestPedestrianDetector:
    def test_wraps_hog_hits(self, blank_frame):
        hog = MagicMock()
        hog.detectMultiScale.return_value = (np.array([[5, 5, 64, 128]]), np.array([[1.3]]))

        [det] = PedestrianDetector(hog).detect(blank_frame)

        assert det.bbox == BoundingBox(5, 5, 64, 128)
        assert det.label == "person"
        assert det.source == "pedestrian"
        assert det.confidence is None

    def test_scan_parameters(self, blank_frame):
        hog = MagicMock()
        hog.detectMultiScale.return_value = ((), ())

        PedestrianDetector(hog, win_stride=4, padding=16, scale=1.1, group_threshold=2).detect(blank_frame)

        args, _ = hog.detectMultiScale.call_args
        assert args[1:] == (0, (4, 4), (16, 16), 1.1, 2)

    def test_default_people_detector_on_blank_frame(self, blank_frame):
        assert PedestrianDetector(create_people_hog()).detect(blank_frame) == []
