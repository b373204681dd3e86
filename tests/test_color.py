"""
Tests for HSV color segmentation.
"""

import cv2
import numpy as np

from detection.color import DEFAULT_COLOR_CLASSES, ColorClass, ColorSegmentationDetector
from models.detection import BoundingBox


def frame_with_square(size, bgr, origin=(100, 100)):
    frame = np.zeros((480, 640, 3), dtype=np.uint8)
    x, y = origin
    cv2.rectangle(frame, (x, y), (x + size - 1, y + size - 1), bgr, -1)
    return frame


class TestColorSegmentationDetector:
    def test_large_red_square_detected_once(self):
        dets = ColorSegmentationDetector().detect(frame_with_square(40, (0, 0, 255)))

        assert len(dets) == 1
        assert dets[0].label == "red"
        assert dets[0].bbox == BoundingBox(100, 100, 40, 40)
        assert dets[0].confidence is None
        assert dets[0].source == "color"

    def test_small_red_square_ignored(self):
        assert ColorSegmentationDetector().detect(frame_with_square(20, (0, 0, 255))) == []

    def test_blank_frame_has_no_regions(self, blank_frame):
        assert ColorSegmentationDetector().detect(blank_frame) == []

    def test_each_default_color(self):
        detector = ColorSegmentationDetector()
        for bgr, label in [((255, 0, 0), "blue"), ((0, 255, 0), "green"), ((0, 255, 255), "yellow")]:
            dets = detector.detect(frame_with_square(50, bgr))
            assert [d.label for d in dets] == [label]

    def test_red_hue_wraparound(self):
        # hue ~175 in OpenCV's 0..180 scale
        frame = frame_with_square(50, (60, 0, 255))
        hsv = cv2.cvtColor(frame[100:101, 100:101], cv2.COLOR_BGR2HSV)
        assert hsv[0, 0, 0] >= 170

        dets = ColorSegmentationDetector().detect(frame)
        assert [d.label for d in dets] == ["red"]

    def test_min_area_is_exclusive(self):
        # a filled 40x40 square has a 39x39 contour
        detector = ColorSegmentationDetector(min_area=39 * 39)
        assert detector.detect(frame_with_square(40, (0, 0, 255))) == []

    def test_separate_regions_reported_separately(self):
        frame = frame_with_square(40, (0, 0, 255), origin=(10, 10))
        cv2.rectangle(frame, (300, 300), (349, 349), (0, 0, 255), -1)

        dets = ColorSegmentationDetector().detect(frame)
        assert sorted(d.bbox.as_xywh() for d in dets) == [(10, 10, 40, 40), (300, 300, 50, 50)]

    def test_custom_classes(self):
        cyan = ColorClass("cyan", (((85, 50, 50), (95, 255, 255)),), (255, 255, 0))
        detector = ColorSegmentationDetector(color_classes=[cyan])

        assert [d.label for d in detector.detect(frame_with_square(40, (255, 255, 0)))] == ["cyan"]
        assert detector.detect(frame_with_square(40, (0, 0, 255))) == []

    def test_annotation_uses_class_color(self, blank_frame):
        detector = ColorSegmentationDetector()
        dets = detector.detect(frame_with_square(60, (255, 0, 0), origin=(200, 200)))

        assert detector.color_for(dets[0]) == (255, 0, 0)
        detector.annotate(blank_frame, dets)
        assert tuple(int(v) for v in blank_frame[dets[0].bbox.y2, 230]) == (255, 0, 0)

    def test_default_table(self):
        assert [c.name for c in DEFAULT_COLOR_CLASSES] == ["red", "blue", "green", "yellow"]
        assert len(DEFAULT_COLOR_CLASSES[0].ranges) == 2
