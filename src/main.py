"""
Live detection runner.

Reads frames from a camera or video file, runs them through the detection
pipeline and optionally shows the annotated stream.

Usage:
    python src/main.py --config config/config.yaml --display

Arguments:
    --config: Path to configuration file
    --source: Camera index or video file (overrides camera.device_id)
    --display: Show the annotated stream in a window
    --advanced / --features / --tracking / --gpu: Initial toggle values

Keys (with --display):
    a: advanced detection   f: feature overlay   t: tracking
    g: GPU acceleration     q: quit
"""

import argparse
import logging
import os
import sys
import time
from typing import Any, Dict, Optional, Tuple

import cv2
import yaml

from models.config import Config, PipelineConfig
from observation import OpenCVSource, OpenCVSourceConfig
from ops.logging import setup_logging
from pipeline.controller import PipelineController, create_controller_from_config

WINDOW_NAME = "Object Detection"
STATS_LOG_INTERVAL = 10.0


def _merge_into(target: Dict[str, Any], layer: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay one YAML layer onto target in place; nested sections merge key by key."""
    for key, value in layer.items():
        existing = target.get(key)
        if isinstance(existing, dict) and isinstance(value, dict):
            _merge_into(existing, value)
        else:
            target[key] = value
    return target


def _config_layers(config_path: str):
    """Files that make up the effective config, lowest precedence first."""
    config_dir = os.path.dirname(config_path)
    layers = [os.path.join(config_dir, "default.yaml"), os.path.join(config_dir, "config.yaml")]
    if os.path.abspath(config_path) not in {os.path.abspath(p) for p in layers}:
        layers.append(config_path)
    return layers


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Read default.yaml, then config.yaml, then config_path from the same
    directory, each overriding the one before. Missing files are skipped.
    Exits the process when a file cannot be parsed.
    """
    merged: Dict[str, Any] = {}
    for path in _config_layers(config_path):
        if not os.path.exists(path):
            continue
        try:
            with open(path, "r") as f:
                layer = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logging.error(f"Cannot read configuration {path}: {e}")
            sys.exit(1)
        _merge_into(merged, layer)
    return merged


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['camera', 'detection', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    camera = config.get('camera', {}) or {}
    device_id = camera.get('device_id', 0)
    if not isinstance(device_id, (int, str)) or isinstance(device_id, bool):
        return False, "camera.device_id must be an integer (index) or string (file path)"
    if isinstance(device_id, int) and device_id < 0:
        return False, "camera.device_id integer must be non-negative"
    if 'resolution' in camera:
        resolution = camera['resolution']
        if not isinstance(resolution, list) or len(resolution) != 2:
            return False, "camera.resolution must be a list of [width, height]"
        if not all(isinstance(x, int) and x > 0 for x in resolution):
            return False, "camera.resolution values must be positive integers"
    if 'fps' in camera and (not isinstance(camera['fps'], int) or camera['fps'] <= 0):
        return False, "camera.fps must be a positive integer"
    if camera.get('rotate', 0) not in (0, 90, 180, 270, None):
        return False, "camera.rotate must be one of 0, 90, 180, 270"

    pipeline = config.get('pipeline', {}) or {}
    for key in ('advanced_detection', 'feature_overlay', 'tracking', 'gpu_acceleration'):
        if key in pipeline and not isinstance(pipeline[key], bool):
            return False, f"pipeline.{key} must be true or false"

    detection = config.get('detection', {}) or {}
    for section in ('color', 'shapes'):
        sub = detection.get(section, {}) or {}
        if 'min_area' in sub:
            area = sub['min_area']
            if not isinstance(area, (int, float)) or area < 0:
                return False, f"detection.{section}.min_area must be a non-negative number"

    neural = detection.get('neural')
    if neural:
        for key in ('objectness_threshold', 'score_threshold', 'nms_threshold'):
            if key in neural:
                value = neural[key]
                if not isinstance(value, (int, float)) or not (0 <= value <= 1):
                    return False, f"detection.neural.{key} must be between 0 and 1"
        if 'input_size' in neural:
            size = neural['input_size']
            if not isinstance(size, int) or size <= 0 or size % 32 != 0:
                return False, "detection.neural.input_size must be a positive multiple of 32"

    cascade = detection.get('cascade', {}) or {}
    if 'scale_factor' in cascade:
        sf = cascade['scale_factor']
        if not isinstance(sf, (int, float)) or sf <= 1:
            return False, "detection.cascade.scale_factor must be greater than 1"

    tracking = config.get('tracking', {}) or {}
    if 'max_distance' in tracking:
        md = tracking['max_distance']
        if not isinstance(md, (int, float)) or md <= 0:
            return False, "tracking.max_distance must be a positive number"
    if 'max_frames_since_seen' in tracking:
        mfs = tracking['max_frames_since_seen']
        if mfs is not None and (not isinstance(mfs, int) or mfs <= 0):
            return False, "tracking.max_frames_since_seen must be a positive integer or null"

    valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    if config['log_level'] not in valid_log_levels:
        return False, f"log_level must be one of: {', '.join(valid_log_levels)}"

    return True, None


def handle_key(key: int, config: PipelineConfig, controller: PipelineController) -> bool:
    """
    Apply a keyboard toggle to config.

    Returns False if the user asked to quit.
    """
    if key == ord('q'):
        return False
    if key == ord('a'):
        if not config.advanced_detection_enabled and not controller.advanced_available:
            logging.warning("Advanced detection is unavailable: no neural model loaded")
        else:
            config.advanced_detection_enabled = not config.advanced_detection_enabled
            logging.info(f"Advanced detection: {config.advanced_detection_enabled}")
    elif key == ord('f'):
        config.feature_overlay_enabled = not config.feature_overlay_enabled
        logging.info(f"Feature overlay: {config.feature_overlay_enabled}")
    elif key == ord('t'):
        config.tracking_enabled = not config.tracking_enabled
        logging.info(f"Tracking: {config.tracking_enabled}")
    elif key == ord('g'):
        config.gpu_acceleration_requested = not config.gpu_acceleration_requested
        logging.info(f"GPU acceleration requested: {config.gpu_acceleration_requested}")
    return True


def run(
    source: OpenCVSource,
    controller: PipelineController,
    display: bool = False,
    max_frames: Optional[int] = None,
) -> int:
    """
    Process frames until the source is exhausted, the user quits or max_frames is hit.

    Returns:
        Number of frames processed.
    """
    processed = 0
    last_stats_log = time.time()

    source.open()
    try:
        while max_frames is None or processed < max_frames:
            frame_data = source.read()
            if frame_data is None:
                break

            annotated = controller.process(frame_data.frame)
            processed += 1

            if display:
                cv2.imshow(WINDOW_NAME, annotated)
                key = cv2.waitKey(1) & 0xFF
                if key != 0xFF and not handle_key(key, controller.config, controller):
                    break

            now = time.time()
            if now - last_stats_log >= STATS_LOG_INTERVAL:
                stats = controller.stats
                logging.info(
                    f"Pipeline stats: frames={stats.frame_count}, fps={stats.fps:.1f}, "
                    f"latency_ms={stats.mean_latency_ms:.1f}, detections={stats.detection_count}, "
                    f"failures={stats.detector_failures}"
                )
                last_stats_log = now
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
    finally:
        source.close()
        if display:
            cv2.destroyAllWindows()

    return processed


def _parse_source(value: str):
    return int(value) if value.isdigit() else value


def main():
    """Main application function."""
    parser = argparse.ArgumentParser(description='Multi-detector object detection')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--source', type=str, default=None,
                        help='Camera index or video file path')
    parser.add_argument('--display', action='store_true',
                        help='Show annotated frames in a window')
    parser.add_argument('--advanced', action='store_true',
                        help='Start with advanced (neural) detection enabled')
    parser.add_argument('--features', action='store_true',
                        help='Start with the keypoint overlay enabled')
    parser.add_argument('--tracking', action='store_true',
                        help='Start with identity tracking enabled')
    parser.add_argument('--gpu', action='store_true',
                        help='Request GPU acceleration for the neural detector')
    parser.add_argument('--max-frames', type=int, default=None,
                        help='Stop after this many frames')
    args = parser.parse_args()

    raw_config = load_config(args.config)
    is_valid, error = validate_config(raw_config)
    if not is_valid:
        print(f"Invalid configuration: {error}", file=sys.stderr)
        sys.exit(1)

    config = Config.from_dict(raw_config)
    setup_logging(config.log_path, config.log_level)

    if args.source is not None:
        config.camera.device_id = _parse_source(args.source)
    config.pipeline.advanced_detection_enabled |= args.advanced
    config.pipeline.feature_overlay_enabled |= args.features
    config.pipeline.tracking_enabled |= args.tracking
    config.pipeline.gpu_acceleration_requested |= args.gpu

    controller = create_controller_from_config(config)
    source = OpenCVSource(OpenCVSourceConfig.from_camera_config(config.camera.to_dict(), source_id="main-camera"))

    try:
        processed = run(source, controller, display=args.display, max_frames=args.max_frames)
    except RuntimeError as e:
        logging.error(f"Capture error: {e}")
        sys.exit(1)

    logging.info(f"Processed {processed} frames")


if __name__ == "__main__":
    main()
