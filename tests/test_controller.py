"""
Tests for the pipeline controller and its factory functions.
"""

import logging

import numpy as np
import pytest

from conftest import FakeBackend, StubDetector, yolo_row
from detection.cascade import CascadeFaceDetector, load_cascade
from detection.color import ColorSegmentationDetector
from detection.neural import NeuralObjectDetector
from detection.palette import COCO_CLASS_NAMES
from detection.pedestrian import PedestrianDetector
from models.config import CascadeConfig, Config, DetectionConfig, NeuralConfig, PipelineConfig
from pipeline.controller import (
    PipelineController,
    build_detectors,
    create_controller_from_config,
    load_neural_backend,
)
from pipeline.ensemble import DetectionEnsemble
from tracking.tracker import IdentityTracker

MAGENTA = np.array([255, 0, 255], dtype=np.uint8)


def neural_backend():
    out = np.stack([yolo_row(0.5, 0.5, 0.2, 0.2, 0.95, class_id=0, class_score=0.9)])
    return FakeBackend(outputs=[out])


def make_controller(backend=None, tracker=None, config=None):
    backend = backend or neural_backend()
    detectors = [
        NeuralObjectDetector(backend, COCO_CLASS_NAMES),
        StubDetector("face", [(80, 60, 90, 90)]),
        ColorSegmentationDetector(),
    ]
    return PipelineController(DetectionEnsemble(detectors), tracker=tracker, config=config, backend=backend)


class TestProcess:
    def test_classical_path_end_to_end(self, blue_frame):
        """
        A stub stands in for the face detector: the Haar cascade has no
        reliable response to a synthetic pattern, so a fixed face box keeps
        the fallback merge deterministic. The real cascade runs in
        test_classical_path_with_real_cascade.
        """
        backend = neural_backend()
        controller = make_controller(backend=backend)

        out = controller.process(blue_frame)

        labels = [d.label for d in controller.last_result.detections]
        assert "face" in labels
        assert "blue" in labels
        assert not any(d.source == "neural" for d in controller.last_result.detections)
        assert backend.inputs == []
        assert out.shape == blue_frame.shape
        assert out.dtype == blue_frame.dtype

    def test_classical_path_with_real_cascade(self, blue_frame):
        controller = PipelineController(
            DetectionEnsemble([CascadeFaceDetector(load_cascade()), ColorSegmentationDetector()])
        )

        controller.process(blue_frame)

        result = controller.last_result
        assert [o.name for o in result.outcomes] == ["face", "color"]
        assert result.failed == []
        assert [d.label for d in result.detections if d.source == "color"] == ["blue"]

    def test_neural_path_end_to_end(self, blue_frame):
        controller = make_controller()
        controller.process(blue_frame, PipelineConfig(advanced_detection_enabled=True))

        sources = {d.source for d in controller.last_result.detections}
        assert sources == {"neural"}
        assert controller.last_result.detections[0].label == "person"

    def test_input_untouched(self, blue_frame):
        original = blue_frame.copy()
        out = make_controller().process(blue_frame)

        assert np.array_equal(blue_frame, original)
        assert not np.array_equal(out, original)

    @pytest.mark.parametrize("frame", [
        np.zeros((480, 640), dtype=np.uint8),
        np.zeros((480, 640, 4), dtype=np.uint8),
        [[0, 0, 0]],
        None,
    ])
    def test_rejects_bad_frames(self, frame):
        with pytest.raises(ValueError):
            make_controller().process(frame)

    def test_tracking_requires_tracker(self, blank_frame):
        with pytest.raises(ValueError):
            make_controller().process(blank_frame, PipelineConfig(tracking_enabled=True))

    def test_stats(self, blue_frame):
        controller = make_controller()
        controller.process(blue_frame)
        controller.process(blue_frame)

        assert controller.stats.frame_count == 2
        assert controller.stats.detection_count == 4
        assert controller.stats.detector_failures == 0
        assert controller.stats.mean_latency_ms >= 0.0


class TestTracking:
    def test_identities_drawn_and_stable(self, blue_frame):
        controller = make_controller(
            tracker=IdentityTracker(),
            config=PipelineConfig(tracking_enabled=True),
        )

        out = controller.process(blue_frame)
        first = [a.identity for a in controller.last_assignments]
        controller.process(blue_frame)
        second = [a.identity for a in controller.last_assignments]

        assert first == [0, 1]
        assert second == first
        assert np.all(out == MAGENTA, axis=2).any()

    def test_no_identities_when_tracking_off(self, blue_frame):
        tracker = IdentityTracker()
        controller = make_controller(tracker=tracker)

        out = controller.process(blue_frame)

        assert controller.last_assignments == []
        assert len(tracker) == 0
        assert not np.all(out == MAGENTA, axis=2).any()

    def test_tracking_can_be_toggled_per_call(self, blue_frame):
        tracker = IdentityTracker()
        controller = make_controller(tracker=tracker)

        controller.process(blue_frame, PipelineConfig(tracking_enabled=True))
        controller.process(blue_frame)
        assert tracker.frame_index == 1


class TestAcceleration:
    def test_switches_only_on_change(self, blank_frame):
        backend = FakeBackend()
        controller = make_controller(backend=backend)

        gpu = PipelineConfig(gpu_acceleration_requested=True)
        controller.process(blank_frame, gpu)
        controller.process(blank_frame, gpu)
        controller.process(blank_frame, PipelineConfig())

        assert backend.acceleration_calls == [True, False]

    def test_not_touched_by_default(self, blank_frame):
        backend = FakeBackend()
        make_controller(backend=backend).process(blank_frame)
        assert backend.acceleration_calls == []

    def test_failure_logged_not_raised(self, blank_frame, caplog):
        backend = FakeBackend(fail_acceleration=True)
        controller = make_controller(backend=backend)

        with caplog.at_level(logging.WARNING):
            out = controller.process(blank_frame, PipelineConfig(gpu_acceleration_requested=True))
            controller.process(blank_frame, PipelineConfig(gpu_acceleration_requested=True))

        assert out.shape == blank_frame.shape
        assert backend.acceleration_calls == [True]
        assert "GPU acceleration change failed" in caplog.text

    def test_without_backend(self, blank_frame):
        controller = PipelineController(DetectionEnsemble([StubDetector("face", [])]))
        out = controller.process(blank_frame, PipelineConfig(gpu_acceleration_requested=True))
        assert np.array_equal(out, blank_frame)


class TestFactories:
    def test_build_detectors_without_backend(self):
        detectors = build_detectors(DetectionConfig())
        assert [d.name for d in detectors] == ["face", "pedestrian", "color", "shape"]
        assert isinstance(detectors[0], CascadeFaceDetector)
        assert isinstance(detectors[1], PedestrianDetector)

    def test_build_detectors_with_backend(self):
        detectors = build_detectors(DetectionConfig(), backend=FakeBackend())
        assert detectors[0].name == "neural"
        assert len(detectors) == 5

    def test_wrong_class_table_skips_neural(self, caplog):
        with caplog.at_level(logging.WARNING):
            detectors = build_detectors(DetectionConfig(), backend=FakeBackend(), class_names=["a", "b"])
        assert "neural" not in [d.name for d in detectors]
        assert "Neural detector unavailable" in caplog.text

    def test_bad_cascade_skips_face(self, tmp_path):
        cfg = DetectionConfig(cascade=CascadeConfig(path=str(tmp_path / "missing.xml")))
        assert "face" not in [d.name for d in build_detectors(cfg)]

    def test_disabled_detectors_left_out(self):
        cfg = DetectionConfig.from_dict({
            "cascade": {"enabled": False},
            "pedestrian": {"enabled": False},
            "shapes": {"enabled": False},
        })
        assert [d.name for d in build_detectors(cfg)] == ["color"]

    def test_load_neural_backend_unconfigured(self):
        assert load_neural_backend(None) == (None, None)
        assert load_neural_backend(NeuralConfig()) == (None, None)

    def test_load_neural_backend_missing_files(self, tmp_path):
        cfg = NeuralConfig(model_config=str(tmp_path / "yolo.cfg"), model_weights=str(tmp_path / "yolo.weights"))
        assert load_neural_backend(cfg) == (None, None)

    def test_controller_from_default_config(self, blue_frame):
        controller = create_controller_from_config(Config())

        assert not controller.advanced_available
        assert controller.tracker is not None
        out = controller.process(blue_frame)
        assert "blue" in [d.label for d in controller.last_result.detections]
        assert out.shape == blue_frame.shape

    def test_advanced_request_downgraded_when_unavailable(self, caplog):
        config = Config.from_dict({"pipeline": {"advanced_detection": True, "tracking": True}})

        with caplog.at_level(logging.WARNING):
            controller = create_controller_from_config(config)

        assert controller.config.advanced_detection_enabled is False
        assert controller.config.tracking_enabled is True
        assert config.pipeline.advanced_detection_enabled is True
