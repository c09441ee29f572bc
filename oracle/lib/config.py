import os
import shutil
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from . import paths

ENV_PREFIX = "ORACLE_"


def get_default_config_path() -> Path:
    return paths.package_root() / "config.yaml"


def config_file() -> Path:
    """Return config file path in the oracle home."""
    return paths.oracle_home() / "config.yaml"


def clear_cache():
    load_config.cache_clear()


def _read(path: Path) -> dict:
    if not path.exists():
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _merge(base: dict, override: dict) -> dict:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _apply_env(config: dict) -> dict:
    """Override top-level scalar keys from ORACLE_* environment variables."""
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        config_key = key[len(ENV_PREFIX) :].lower()
        if config_key not in config or isinstance(config[config_key], dict):
            continue
        original = config[config_key]
        if isinstance(original, bool):
            config[config_key] = value.lower() in ("true", "1", "t", "y", "yes")
        elif isinstance(original, int):
            try:
                config[config_key] = int(value)
            except ValueError:
                pass
        elif isinstance(original, float):
            try:
                config[config_key] = float(value)
            except ValueError:
                pass
        else:
            config[config_key] = value
    return config


@lru_cache(maxsize=1)
def load_config() -> dict:
    """Packaged defaults, overlaid by the user config file, overlaid by the environment."""
    config = _merge(_read(get_default_config_path()), _read(config_file()))
    return _apply_env(config)


def get(key: str, default: Any = None) -> Any:
    return load_config().get(key, default)


def init_config() -> Path:
    """Initialize $ORACLE_HOME/config.yaml from defaults if missing."""
    target = config_file()
    if target.exists():
        return target

    target.parent.mkdir(parents=True, exist_ok=True)

    default_config_path = get_default_config_path()
    if not default_config_path.exists():
        raise FileNotFoundError(f"Default config not found at {default_config_path}")

    shutil.copy(default_config_path, target)
    clear_cache()
    return target
