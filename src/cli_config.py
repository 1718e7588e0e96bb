"""Runtime settings for the CLI.

Settings come from, in decreasing precedence: CLI flags, DEPQUEUE_*
environment variables, the ``depqueue`` section of a YAML/JSON config file,
and built-in defaults.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml

from constants import Constants

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """Effective settings for one CLI run."""
    catalog: Optional[str] = None
    maxdepth: int = 0
    static: bool = False


def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    """Load the ``depqueue`` section of a config file.

    Args:
        config_path: Path to YAML/JSON config file.

    Returns:
        Config dict; empty when there is no usable file.
    """
    if not config_path:
        return {}

    if not os.path.isfile(config_path):
        logger.warning("Config file not found: %s", config_path)
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            if config_path.lower().endswith(".json"):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error("Failed to load config: %s", e)
        return {}

    if not isinstance(data, dict):
        return {}
    section = data.get(Constants.CONFIG_SECTION, data)
    return section if isinstance(section, dict) else {}


def _coerce_int(value: Any, source: str) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-integer maxdepth %r from %s", value, source)
        return None


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def resolve_settings(args) -> Settings:
    """Merge CLI args, environment and config file into Settings."""
    settings = Settings()
    config = load_config(getattr(args, "CONFIG", None))

    # config file
    if config.get("catalog"):
        settings.catalog = str(config["catalog"])
    if config.get("maxdepth") is not None:
        depth = _coerce_int(config["maxdepth"], "config")
        if depth is not None:
            settings.maxdepth = depth
    if config.get("static") is not None:
        settings.static = _coerce_bool(config["static"])

    # environment
    env_catalog = os.environ.get(Constants.ENV_CATALOG)
    if env_catalog:
        settings.catalog = env_catalog
    env_depth = os.environ.get(Constants.ENV_MAXDEPTH)
    if env_depth:
        depth = _coerce_int(env_depth, Constants.ENV_MAXDEPTH)
        if depth is not None:
            settings.maxdepth = depth
    env_static = os.environ.get(Constants.ENV_STATIC)
    if env_static:
        settings.static = _coerce_bool(env_static)

    # command line
    if getattr(args, "CATALOG", None):
        settings.catalog = args.CATALOG
    if getattr(args, "MAXDEPTH", None) is not None:
        settings.maxdepth = int(args.MAXDEPTH)
    if getattr(args, "STATIC", False):
        settings.static = True

    if settings.catalog is None and os.path.isfile(Constants.CATALOG_FILE):
        settings.catalog = Constants.CATALOG_FILE
    return settings
