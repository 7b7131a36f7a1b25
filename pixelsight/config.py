"""
Configuration management for PixelSight

Settings live in a YAML file. Anything the file leaves out falls back to
:func:`get_default_config`, and ``${VAR}`` references are filled in from
the environment.
"""

import yaml
import os
import re
from pathlib import Path
from typing import Dict, Any, Optional, Union
import logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"

_ENV_VAR = re.compile(r'\$\{([^}]+)\}')


def _expand_env_vars(obj: Union[Dict, Any]) -> Union[Dict, Any]:
    """Substitute ``${NAME}`` in every string; unknown names are left as written."""
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    if isinstance(obj, str):
        return _ENV_VAR.sub(lambda match: os.getenv(match.group(1), match.group(0)), obj)
    return obj


def _merge_defaults(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay a loaded config on the defaults so missing keys keep working."""
    merged = dict(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_defaults(merged[key], value)
        else:
            merged[key] = value
    return merged

def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file

    Args:
        config_path: Path to config file. If None, uses the packaged config.yaml

    Returns:
        Configuration dictionary
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    config_path = Path(config_path)

    if not config_path.exists():
        logger.warning(f"Config file not found: {config_path}. Using defaults.")
        return get_default_config()

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}
        logger.info(f"Loaded configuration from {config_path}")
        config = _expand_env_vars(config)
        return _merge_defaults(get_default_config(), config)
    except Exception as e:
        logger.error(f"Failed to load config from {config_path}: {e}")
        return get_default_config()

def get_default_config() -> Dict[str, Any]:
    """
    Get default configuration values

    Returns:
        Default configuration dictionary
    """
    return {
        'editor': {
            'ops_extension': 'ops',
            'allowed_extensions': ['png', 'jpg', 'jpeg', 'bmp', 'gif', 'tif', 'tiff', 'webp'],
            'default_extension': 'png',
            'export_background': [255, 255, 255],
        },
        'macros': {
            'directory': str(Path.home() / '.pixelsight' / 'macros'),
        },
        'filters': {
            'mean_radius': 1,
            'gaussian_radius': 1,
            'median_radius': 1,
        },
        'selection': {
            'highlight_brightness': 25,
        },
        'draw': {
            'tool': 'selection',
            'stroke_width': 2,
            'primary': [0, 0, 0, 255],
            'secondary': [0, 0, 0, 255],
            'shape': 'rectangle',
            'fill': 'border',
        },
        'logging': {
            'level': 'INFO',
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        },
    }

def save_config(config: Dict[str, Any], config_path: Path) -> bool:
    """
    Save configuration to YAML file

    Args:
        config: Configuration dictionary to save
        config_path: Path where to save the config

    Returns:
        True if successful, False otherwise
    """
    try:
        with open(config_path, 'w') as f:
            yaml.dump(config, f, default_flow_style=False, indent=2)
        logger.info(f"Saved configuration to {config_path}")
        return True
    except Exception as e:
        logger.error(f"Failed to save config to {config_path}: {e}")
        return False

def get_config_value(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """
    Look up a dotted key such as ``'editor.ops_extension'``.

    Returns ``default`` when any part of the path is missing.
    """
    value = config
    try:
        for key in key_path.split('.'):
            value = value[key]
    except (KeyError, TypeError):
        return default
    return value

def update_config_value(config: Dict[str, Any], key_path: str, value: Any) -> None:
    """Set a dotted key in place, creating intermediate sections."""
    *parents, leaf = key_path.split('.')
    section = config
    for key in parents:
        section = section.setdefault(key, {})
    section[leaf] = value
