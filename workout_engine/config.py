"""
Runtime configuration loaded from config.yaml.
"""

import copy
import os

import yaml


ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_CONFIG_PATH = os.path.join(ROOT_DIR, "config.yaml")

DEFAULT_CONFIG = {
    "generator": {
        "name": "workout-engine",
        "registry_path": None,
        "min_minutes": 10,
        "max_minutes": 120,
        "default_minutes": 45,
        "default_intensity": 6,
    },
    "output": {
        "folder": "output",
        "format": "markdown",
    },
}


def _merge(base, override):
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path=None):
    """
    Load config.yaml merged over the built-in defaults.

    A missing file yields the defaults. WORKOUT_ENGINE_CONFIG overrides the path
    and WORKOUT_ENGINE_REGISTRY the movement registry path.
    """
    config_path = path or os.getenv("WORKOUT_ENGINE_CONFIG") or DEFAULT_CONFIG_PATH
    loaded = {}
    if os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping")

    config = _merge(DEFAULT_CONFIG, loaded)

    registry_env = os.getenv("WORKOUT_ENGINE_REGISTRY")
    if registry_env:
        config["generator"]["registry_path"] = registry_env

    registry_path = config["generator"].get("registry_path")
    if registry_path and not os.path.isabs(registry_path):
        config["generator"]["registry_path"] = os.path.join(os.path.dirname(os.path.abspath(config_path)), registry_path)

    return config
