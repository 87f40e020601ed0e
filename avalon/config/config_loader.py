"""
Read game settings from YAML and layer command-line overrides on top.
"""

import logging
from dataclasses import fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .game_config import GameConfig, default_config
from ..core.exceptions import InvalidConfigError

logger = logging.getLogger(__name__)

CONFIG_KEYS = frozenset(f.name for f in fields(GameConfig))


def _known_settings(settings: Dict[str, Any], source: str) -> Dict[str, Any]:
    known = {}
    for key, value in settings.items():
        if key in CONFIG_KEYS:
            known[key] = value
        else:
            logger.warning("Unknown config key '%s' in %s", key, source)
    return known


def load_config_from_yaml(config_path: str,
                          overrides: Optional[Dict[str, Any]] = None) -> GameConfig:
    """
    Load game configuration from a YAML file.

    Keys missing from the file keep their GameConfig defaults; unknown keys are
    logged and ignored. ``overrides`` entries that are not None win over the file.

    Raises:
        FileNotFoundError: If the config file doesn't exist
        yaml.YAMLError: If the YAML file is invalid
        InvalidConfigError: If the file does not hold a mapping of settings
    """
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_file, 'r') as f:
        settings = yaml.safe_load(f) or {}
    if not isinstance(settings, dict):
        raise InvalidConfigError(
            f"{config_path} must hold a mapping of settings, got {type(settings).__name__}"
        )

    return apply_overrides(GameConfig(**_known_settings(settings, str(config_path))), overrides)


def apply_overrides(config: GameConfig, overrides: Optional[Dict[str, Any]] = None) -> GameConfig:
    """Copy of ``config`` with every non-None override applied."""
    if not overrides:
        return config
    changes = {key: value for key, value in overrides.items() if value is not None}
    return replace(config, **_known_settings(changes, "overrides"))


def load_config(config_path: Optional[str] = None,
                overrides: Optional[Dict[str, Any]] = None) -> GameConfig:
    """
    Load configuration from a YAML file, or start from the defaults without one.
    """
    if config_path is None:
        return apply_overrides(default_config, overrides)
    return load_config_from_yaml(config_path, overrides)
