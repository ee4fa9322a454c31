"""
Configuration defaults for the low-light vision pipeline.

Components receive their own section of the configuration dictionary and read
it with ``cfg.get(key, default)``, so any section may be partial or empty.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

DEFAULT_CONFIG: Dict[str, Any] = {
    'enhancement': {
        'method': 'composite',
        'clahe_clip_limit': 3.0,
        'clahe_tile_grid_size': 8,
        'gamma': 1.8,
    },
    'keypoints': {
        'complexity_threshold': 30.0,
        # (base, complexity weight, edge density weight) per estimator
        'coefficients': {
            'orb': [30.0, 250.0, 100.0],
            'fast': [80.0, 400.0, 150.0],
            'sift': [20.0, 180.0, 80.0],
        },
    },
    'texture': {
        'hog_cell_size': 8,
        'hog_bins': 9,
        'hog_max_length': 100,
        'lbp_radius': 1,
        'glcm_levels': 256,
        'glcm_distance': 1,
    },
    'fusion': {
        'hog_slice': 20,
        'lbp_slice': 20,
    },
    'detection': {
        'confidence_threshold': 0.10,
        'device': None,
    },
    'pipeline': {
        'output_dir': None,
        'weights': {
            'keypoints': 0.3,
            'texture': 0.2,
            'quality': 0.2,
            'detection_map': 0.3,
        },
    },
}

# Environment overrides: variable name -> (section, key, converter)
_ENV_OVERRIDES = {
    'LOWLIGHT_OUTPUT_DIR': ('pipeline', 'output_dir', str),
    'LOWLIGHT_DETECTION_CONFIDENCE': ('detection', 'confidence_threshold', float),
    'LOWLIGHT_DETECTION_DEVICE': ('detection', 'device', str),
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Build the effective configuration.

    Args:
        path: Optional JSON file whose content is merged over DEFAULT_CONFIG

    Returns:
        Complete configuration dictionary (a fresh copy on every call)

    Raises:
        FileNotFoundError: If ``path`` is given but does not exist

    Example:
        >>> cfg = load_config("experiment.json")
        >>> cfg['enhancement']['gamma']
        1.8
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            config = _deep_merge(config, json.load(f))

    for env_name, (section, key, convert) in _ENV_OVERRIDES.items():
        raw = os.getenv(env_name, "").strip()
        if raw:
            config[section][key] = convert(raw)

    return config


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for command-line entry points."""
    level = level or os.getenv("LOWLIGHT_LOG_LEVEL", "INFO")
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
