"""Configuration hierarchy — merges sources in priority order.

Precedence (later overrides earlier):
  1. Package defaults
  2. Global config    (~/.offlinegate/config.yaml)
  3. Project config   (./offlinegate.yaml, searched upward)
  4. Environment variables (OFFLINEGATE_*)
  5. Runtime arguments
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from offlinegate.config.defaults import get_defaults
from offlinegate.config.schema import ProxyConfig

logger = logging.getLogger(__name__)

_GLOBAL_CONFIG_PATH = Path.home() / ".offlinegate" / "config.yaml"
_PROJECT_CONFIG_NAME = "offlinegate.yaml"

# Map of environment variables to config keys
_ENV_MAP: dict[str, str] = {
    "OFFLINEGATE_ORIGIN": "origin",
    "OFFLINEGATE_CACHE_PREFIX": "cache_prefix",
    "OFFLINEGATE_VERSION": "version",
    "OFFLINEGATE_PERSIST_PREFIX": "persist_prefix",
    "OFFLINEGATE_SKIP_WAITING": "skip_waiting",
    "OFFLINEGATE_MAX_IMAGE_ENTRIES": "max_image_entries",
    "OFFLINEGATE_MAX_RUNTIME_ENTRIES": "max_runtime_entries",
    "OFFLINEGATE_FETCH_ATTEMPTS": "fetch_attempts",
    "OFFLINEGATE_NETWORK_TIMEOUT": "network_timeout",
    "OFFLINEGATE_MAX_CONCURRENCY": "max_concurrency",
    "OFFLINEGATE_STORE_PATH": "store_path",
    "OFFLINEGATE_LOG_LEVEL": "log_level",
}

# Keys that should be parsed as specific types
_TYPE_MAP: dict[str, type] = {
    "max_image_entries": int,
    "max_runtime_entries": int,
    "fetch_attempts": int,
    "network_timeout": float,
    "max_concurrency": int,
}

_BOOL_KEYS = {"skip_waiting"}

# Boolean env var values
_TRUTHY = {"1", "true", "yes", "on"}


def load_config_hierarchy(**runtime_overrides: Any) -> dict[str, Any]:
    """Load and merge configuration from all sources.

    Returns a merged dict with the final resolved values.
    """
    config = get_defaults()

    # Layer 2: Global config
    global_cfg = _load_yaml_config(_GLOBAL_CONFIG_PATH)
    if global_cfg:
        config.update(global_cfg)

    # Layer 3: Project config (search from cwd upward)
    project_path = _find_project_config()
    if project_path:
        project_cfg = _load_yaml_config(project_path)
        if project_cfg:
            config.update(project_cfg)

    # Layer 4: Environment variables
    config.update(_load_env_vars())

    # Layer 5: Runtime arguments (highest priority)
    # None means "not set"; only explicit values override
    for key, value in runtime_overrides.items():
        if value is not None:
            config[key] = value

    return config


def build_config(**runtime_overrides: Any) -> ProxyConfig:
    """Resolve the hierarchy and validate it into a ProxyConfig."""
    return ProxyConfig(**load_config_hierarchy(**runtime_overrides))


def _load_yaml_config(path: Path) -> dict[str, Any] | None:
    """Load a YAML config file if it exists.

    Accepts either a flat mapping or one nested under a top-level 'proxy' key.
    """
    if not path.exists() or not path.is_file():
        return None
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
        if isinstance(data, dict):
            nested = data.get("proxy")
            return nested if isinstance(nested, dict) else data
        logger.warning("Config file %s is not a mapping, ignoring", path)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to load config %s: %s", path, e)
    return None


def _find_project_config() -> Path | None:
    """Search for offlinegate.yaml from cwd upward."""
    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents]:
        candidate = parent / _PROJECT_CONFIG_NAME
        if candidate.exists():
            return candidate
    return None


def _load_env_vars() -> dict[str, Any]:
    """Read OFFLINEGATE_* environment variables."""
    result: dict[str, Any] = {}
    for env_key, config_key in _ENV_MAP.items():
        value = os.environ.get(env_key)
        if value is None:
            continue
        result[config_key] = _coerce_env_value(config_key, value)
    return result


def _coerce_env_value(key: str, value: str) -> Any:
    """Coerce an environment variable string to the appropriate type."""
    if key in _BOOL_KEYS:
        return value.lower() in _TRUTHY

    target_type = _TYPE_MAP.get(key)
    if target_type:
        try:
            return target_type(value)
        except (ValueError, TypeError):
            logger.warning(
                "Cannot convert env var for '%s' to %s: %s", key, target_type.__name__, value
            )
            return value

    return value
