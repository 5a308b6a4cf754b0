"""Runtime configuration for brewpkg.

Precedence, lowest to highest:

1. Built-in defaults from ``Constants``.
2. Config file: ``$BREWPKG_CONFIG`` or the first existing default location
   (YAML or JSON, chosen by extension).
3. Environment variables ``BREWPKG_BREW_PATH`` and ``BREWPKG_LOG_LEVEL``.
4. Explicit overrides (CLI flags), applied by the caller via ``with_overrides``.

A missing config file is normal. An unreadable or malformed one is logged and
ignored so that a bad file never prevents brew from being driven.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional

import yaml

from brewpkg.constants import Constants

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BrewConfig:
    """Resolved settings used to build the default runner."""

    brew_path: str = Constants.BREW_BINARY
    auto_update: bool = False
    env: Dict[str, str] = field(default_factory=dict)
    log_level: Optional[str] = None
    source: Optional[str] = None

    def with_overrides(self, **overrides: Any) -> "BrewConfig":
        """Return a copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values)


def _candidate_paths() -> list:
    explicit = os.environ.get(Constants.ENV_CONFIG)
    if explicit and explicit.strip():
        return [explicit.strip()]
    return [os.path.expanduser(p) for p in Constants.DEFAULT_CONFIG_PATHS]


def _read_config_file(path: str) -> Dict[str, Any]:
    """Load one config file; return {} on any read or decode failure."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            if path.lower().endswith(".json"):
                data = json.load(fh)
            else:
                data = yaml.safe_load(fh)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        logger.warning("Failed to load config %s: %s", path, exc)
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config %s: top level must be a mapping", path)
        return {}
    return data


def load_config_file(path: Optional[str] = None) -> Dict[str, Any]:
    """Return the raw mapping from ``path`` or the first existing default file."""
    paths = [path] if path else _candidate_paths()
    for candidate in paths:
        if os.path.isfile(candidate):
            logger.debug("Loading config from %s", candidate)
            data = _read_config_file(candidate)
            data.setdefault("_source", candidate)
            return data
        if path:
            logger.warning("Config file not found: %s", candidate)
    return {}


def _coerce_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("1", "true", "yes", "on"):
            return True
        if lowered in ("0", "false", "no", "off"):
            return False
    return default


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def build_config(data: Mapping[str, Any]) -> BrewConfig:
    """Build a ``BrewConfig`` from a raw mapping, then apply the environment."""
    brew = _section(data, "brew")
    log = _section(data, "logging")

    cfg = BrewConfig()
    brew_path = brew.get("path")
    if isinstance(brew_path, str) and brew_path.strip():
        cfg = replace(cfg, brew_path=os.path.expanduser(brew_path.strip()))
    if "auto_update" in brew:
        cfg = replace(cfg, auto_update=_coerce_bool(brew["auto_update"], cfg.auto_update))
    env = brew.get("env")
    if isinstance(env, dict):
        cfg = replace(cfg, env={str(k): str(v) for k, v in env.items()})
    level = log.get("level")
    if isinstance(level, str) and level.strip():
        cfg = replace(cfg, log_level=level.strip().upper())
    source = data.get("_source")
    if isinstance(source, str):
        cfg = replace(cfg, source=source)

    env_path = os.environ.get(Constants.ENV_BREW_PATH)
    if env_path and env_path.strip():
        cfg = replace(cfg, brew_path=env_path.strip())
    env_level = os.environ.get(Constants.ENV_LOG_LEVEL)
    if env_level and env_level.strip():
        cfg = replace(cfg, log_level=env_level.strip().upper())
    return cfg


def load_config(path: Optional[str] = None) -> BrewConfig:
    """Resolve configuration from file and environment."""
    return build_config(load_config_file(path))
