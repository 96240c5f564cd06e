"""YAML config loading and validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from offlinegate.config.schema import ProxyConfig


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Load any YAML file safely."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Expected YAML mapping, got {type(raw).__name__} in {path}")

    return raw


def load_proxy_yaml(path: str | Path, **overrides: Any) -> ProxyConfig:
    """Load a proxy YAML file and return a validated ProxyConfig."""
    raw = load_yaml(path)
    if "proxy" not in raw or not isinstance(raw["proxy"], dict):
        raise ValueError(f"Invalid proxy YAML: missing top-level 'proxy' key in {path}")

    data = dict(raw["proxy"])
    data.update({k: v for k, v in overrides.items() if v is not None})
    return ProxyConfig(**data)
