"""
Tests for detector selection, error isolation and annotation in the ensemble.
"""

import logging

import numpy as np

from conftest import FailingDetector, StubDetector
from detection.base import DetectorGroup
from detection.color import ColorSegmentationDetector
from detection.features import KeypointOverlay
from models.config import PipelineConfig
from pipeline.ensemble import DetectionEnsemble


def neural_stub():
    return StubDetector("neural", [(10, 10, 50, 50)], label="dog", group=DetectorGroup.ADVANCED)


def basic_stubs():
    return [
        StubDetector("face", [(100, 100, 60, 60)]),
        StubDetector("pedestrian", [(300, 50, 64, 128)], label="person"),
    ]


class TestSelection:
    def test_basic_bundle_when_advanced_disabled(self):
        ensemble = DetectionEnsemble([neural_stub()] + basic_stubs())
        names = [d.name for d in ensemble.select(PipelineConfig())]
        assert names == ["face", "pedestrian"]

    def test_advanced_replaces_basic(self):
        ensemble = DetectionEnsemble([neural_stub()] + basic_stubs())
        names = [d.name for d in ensemble.select(PipelineConfig(advanced_detection_enabled=True))]
        assert names == ["neural"]

    def test_falls_back_when_advanced_unavailable(self):
        ensemble = DetectionEnsemble(basic_stubs())
        assert not ensemble.advanced_available
        names = [d.name for d in ensemble.select(PipelineConfig(advanced_detection_enabled=True))]
        assert names == ["face", "pedestrian"]

    def test_run_never_mixes_groups(self, blank_frame):
        neural = neural_stub()
        basics = basic_stubs()
        ensemble = DetectionEnsemble([neural] + basics)

        result = ensemble.run(blank_frame, PipelineConfig(advanced_detection_enabled=True))

        assert {d.source for d in result.detections} == {"neural"}
        assert all(b.calls == 0 for b in basics)


class TestRun:
    def test_detections_in_detector_order(self, blank_frame):
        result = DetectionEnsemble(basic_stubs()).run(blank_frame, PipelineConfig())
        assert [d.label for d in result.detections] == ["face", "person"]
        assert [o.name for o in result.outcomes] == ["face", "pedestrian"]

    def test_input_frame_not_modified(self, blank_frame):
        result = DetectionEnsemble(basic_stubs()).run(blank_frame, PipelineConfig())

        assert not blank_frame.any()
        assert result.frame.any()
        assert result.frame is not blank_frame
        assert result.frame.shape == blank_frame.shape

    def test_failing_detector_is_isolated(self, blank_frame, caplog):
        face, pedestrian = basic_stubs()
        ensemble = DetectionEnsemble([face, FailingDetector(), pedestrian])

        with caplog.at_level(logging.ERROR):
            result = ensemble.run(blank_frame, PipelineConfig())

        assert [d.label for d in result.detections] == ["face", "person"]
        assert [o.name for o in result.failed] == ["broken"]
        assert isinstance(result.failed[0].error, RuntimeError)
        assert "broken" in caplog.text

    def test_degenerate_boxes_dropped(self, blank_frame):
        stub = StubDetector("face", [(10, 10, 0, 20), (10, 10, 20, 20)])
        result = DetectionEnsemble([stub]).run(blank_frame, PipelineConfig())
        assert [d.bbox.as_xywh() for d in result.detections] == [(10, 10, 20, 20)]

    def test_repeat_runs_are_identical(self, blue_frame):
        ensemble = DetectionEnsemble([ColorSegmentationDetector()])
        first = ensemble.run(blue_frame, PipelineConfig())
        second = ensemble.run(blue_frame, PipelineConfig())

        assert first.detections == second.detections
        assert np.array_equal(first.frame, second.frame)

    def test_detectors_see_pristine_frame(self, blue_frame):
        # the first detector draws a blue box; the second must not pick it up
        overlay = StubDetector("overlay", [(20, 20, 200, 150)], color=(255, 0, 0))
        color = ColorSegmentationDetector()

        result = DetectionEnsemble([overlay, color]).run(blue_frame, PipelineConfig())

        blue = [d for d in result.detections if d.source == "color"]
        assert [d.bbox.as_xywh() for d in blue] == [(300, 200, 60, 60)]

    def test_empty_ensemble(self, blank_frame):
        result = DetectionEnsemble([]).run(blank_frame, PipelineConfig())
        assert result.detections == []
        assert np.array_equal(result.frame, blank_frame)


class TestFeatureOverlay:
    def textured_frame(self):
        rng = np.random.RandomState(0)
        return rng.randint(0, 255, (240, 320, 3)).astype(np.uint8)

    def test_overlay_draws_without_detections(self):
        frame = self.textured_frame()
        ensemble = DetectionEnsemble([], feature_overlay=KeypointOverlay())

        result = ensemble.run(frame, PipelineConfig(feature_overlay_enabled=True))

        assert result.keypoints > 0
        assert result.detections == []
        assert not np.array_equal(result.frame, frame)

    def test_overlay_off_by_default(self):
        frame = self.textured_frame()
        ensemble = DetectionEnsemble([], feature_overlay=KeypointOverlay())

        result = ensemble.run(frame, PipelineConfig())
        assert result.keypoints == 0
        assert np.array_equal(result.frame, frame)

    def test_overlay_runs_with_either_group(self):
        frame = self.textured_frame()
        ensemble = DetectionEnsemble([neural_stub()], feature_overlay=KeypointOverlay())

        cfg = PipelineConfig(advanced_detection_enabled=True, feature_overlay_enabled=True)
        result = ensemble.run(frame, cfg)
        assert result.keypoints > 0
        assert [d.source for d in result.detections] == ["neural"]
