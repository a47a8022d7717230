"""
Banknote reader: live camera banknote recognition.

Opens the camera, identifies which reference note is in view, and reports
appear/disappear events to the amount overlay and the status API.

Usage:
    python src/main.py --config config/config.yaml --display

Arguments:
    --config: Path to configuration file
    --display: Show a preview window with the amount overlay
    --web: Serve the status API (overrides web.enabled)
    --port: Status API port (overrides web.port)
"""

import os
import sys
import argparse
import logging
import threading
import time
import yaml
import uvicorn
from typing import Dict, Any, Tuple, Optional

from capture import SourceUnavailableError
from features import FeatureExtractor, ReferenceCatalog
from models.config import DETECTION_METHODS
from observation import (
    EngineInitError,
    KeypointAnchorTracker,
    ObservationSource,
    create_observation_source,
)
from ops.logging import setup_logging, VALID_LOG_LEVELS
from pipeline import EventDispatcher, create_runner_from_config, create_session_from_config
from presentation import AmountOverlay
from web.app import create_app
from web.state import state as web_state


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        base_path = os.path.join(os.path.dirname(config_path), "default.yaml")
        base_cfg: Dict[str, Any] = {}
        if os.path.exists(base_path):
            with open(base_path, "r") as f:
                base_cfg = yaml.safe_load(f) or {}

        local_overrides_path = os.path.join(os.path.dirname(config_path), "config.yaml")
        local_cfg: Dict[str, Any] = {}
        if os.path.exists(local_overrides_path):
            with open(local_overrides_path, "r") as f:
                local_cfg = yaml.safe_load(f) or {}

        merged = _deep_merge(base_cfg, local_cfg)

        if os.path.exists(config_path) and os.path.abspath(config_path) != os.path.abspath(local_overrides_path):
            with open(config_path, "r") as f:
                explicit_cfg = yaml.safe_load(f) or {}
            merged = _deep_merge(merged, explicit_cfg)

        return merged
    except (OSError, yaml.YAMLError) as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration file structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['camera', 'detection', 'catalog', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    # Validate camera settings
    camera = config.get('camera') or {}
    if 'device_id' not in camera:
        return False, "Missing camera.device_id"
    if not isinstance(camera['device_id'], (int, str)):
        return False, "camera.device_id must be an integer (index) or string (video path)"
    if isinstance(camera['device_id'], int) and camera['device_id'] < 0:
        return False, "camera.device_id integer must be non-negative"

    if 'resolution' in camera:
        if not isinstance(camera['resolution'], list) or len(camera['resolution']) != 2:
            return False, "camera.resolution must be a list of [width, height]"
        if not all(isinstance(x, int) and x > 0 for x in camera['resolution']):
            return False, "camera.resolution values must be positive integers"

    if 'fps' in camera and (not isinstance(camera['fps'], int) or camera['fps'] <= 0):
        return False, "camera.fps must be a positive integer"

    if camera.get('backend', 'opencv') != 'opencv':
        return False, "camera.backend must be: opencv"

    if camera.get('rotate', 0) not in (0, 90, 180, 270):
        return False, "camera.rotate must be one of 0, 90, 180, 270"

    # Validate detection settings
    detection = config.get('detection') or {}
    method = detection.get('method', 'feature_print')
    if method not in DETECTION_METHODS:
        return False, f"detection.method must be one of: {', '.join(DETECTION_METHODS)}"

    interval = detection.get('min_sample_interval', 1.0)
    if not isinstance(interval, (int, float)) or interval < 0:
        return False, "detection.min_sample_interval must be a non-negative number"

    threshold = detection.get('match_distance_threshold', 30.0)
    if not isinstance(threshold, (int, float)) or threshold <= 0:
        return False, "detection.match_distance_threshold must be a positive number"

    anchor = detection.get('anchor') or {}
    if 'min_inliers' in anchor and (not isinstance(anchor['min_inliers'], int) or anchor['min_inliers'] < 4):
        return False, "detection.anchor.min_inliers must be an integer >= 4"
    if 'ratio_test' in anchor:
        ratio = anchor['ratio_test']
        if not isinstance(ratio, (int, float)) or not (0 < ratio < 1):
            return False, "detection.anchor.ratio_test must be between 0 and 1"

    # Validate catalog settings
    catalog = config.get('catalog') or {}
    if not isinstance(catalog.get('reference_dir'), str) or not catalog.get('reference_dir'):
        return False, "Missing catalog.reference_dir"
    labels = catalog.get('labels')
    if labels is not None and not (isinstance(labels, list) and all(isinstance(x, str) for x in labels)):
        return False, "catalog.labels must be a list of strings"

    # Validate web settings
    web = config.get('web') or {}
    if 'port' in web and (not isinstance(web['port'], int) or not (0 < web['port'] < 65536)):
        return False, "web.port must be a valid TCP port"

    # Validate log settings
    if config['log_level'] not in VALID_LOG_LEVELS:
        return False, f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}"

    return True, None


def build_observation_source(config: Dict[str, Any]) -> ObservationSource:
    """
    Build the catalog or anchor tracker the configured method needs, then the
    observation source itself.

    Raises:
        FileNotFoundError: If catalog.reference_dir does not exist.
        ValueError: For the native method, which needs an engine binding
            supplied by the embedding application.
    """
    detection_cfg = config.get('detection') or {}
    catalog_cfg = config.get('catalog') or {}
    method = detection_cfg.get('method', 'feature_print')

    if method == 'feature_print':
        catalog = ReferenceCatalog.from_directory(
            catalog_cfg['reference_dir'],
            extractor=FeatureExtractor(),
            labels=catalog_cfg.get('labels'),
        )
        if len(catalog) == 0:
            logging.warning("Reference catalog is empty; no note will ever be recognised")
        return create_observation_source(detection_cfg, catalog=catalog)

    if method == 'anchor':
        tracker = KeypointAnchorTracker.from_directory(
            catalog_cfg['reference_dir'],
            labels=catalog_cfg.get('labels'),
            **(detection_cfg.get('anchor') or {}),
        )
        return create_observation_source(detection_cfg, anchor_tracker=tracker)

    return create_observation_source(detection_cfg)


def main():
    """Main application function."""
    parser = argparse.ArgumentParser(description='Banknote Reader')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--display', action='store_true',
                        help='Show preview window with the amount overlay')
    parser.add_argument('--web', action='store_true',
                        help='Serve the status API')
    parser.add_argument('--port', type=int, default=None,
                        help='Status API port')
    args = parser.parse_args()

    config = load_config(args.config)

    is_valid, error_msg = validate_config(config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    setup_logging(config['log_path'], config['log_level'])
    logging.info("Starting Banknote Reader")

    try:
        source = build_observation_source(config)
    except (FileNotFoundError, ValueError) as e:
        logging.error(f"Failed to set up detection: {e}")
        sys.exit(1)

    overlay = AmountOverlay()
    dispatcher = EventDispatcher()
    dispatcher.subscribe(overlay.handle_event)
    dispatcher.subscribe(web_state.apply_event)

    session = create_session_from_config(config, source, dispatcher=dispatcher)
    runner = create_runner_from_config(
        config,
        session,
        display=args.display,
        renderer=overlay.render,
    )
    runner.add_callback(lambda frame_data, event: web_state.record_frame(session.stats))

    web_cfg = config.get('web') or {}
    if args.web or web_cfg.get('enabled', False):
        host = web_cfg.get('host', '0.0.0.0')
        port = args.port or web_cfg.get('port', 5000)
        web_state.set_config(config)
        web_state.update_system_stats({"start_time": time.time(), "method": source.name})

        def run_web_app():
            uvicorn.run(
                create_app(),
                host=host,
                port=port,
                log_level="info",
            )

        web_thread = threading.Thread(target=run_web_app, daemon=True)
        web_thread.start()
        logging.info(f"Status API started on port {port}")

    try:
        runner.run()
    except SourceUnavailableError as e:
        logging.error(f"Camera unavailable: {e}")
        sys.exit(1)
    except EngineInitError as e:
        logging.error(f"Detection engine failed to start: {e}")
        sys.exit(1)

    logging.info("Banknote Reader stopped")


if __name__ == "__main__":
    main()
