"""
Logging setup.

The handler/formatter layout comes from the packaged `logging.yaml`; only the
level is decided at runtime (explicit argument, else `app.log_level`, which
`NEARSHOP_LOG_LEVEL` overrides).
"""

from __future__ import annotations

import copy
import logging.config
from typing import Any

from nearshop.config.settings import Settings, get_logging_config, get_settings


def _with_level(config: dict[str, Any], level: str) -> dict[str, Any]:
    # Work on a copy: the YAML mapping is cached and shared.
    config = copy.deepcopy(config)
    config.setdefault("root", {})["level"] = level
    for handler in config.get("handlers", {}).values():
        if isinstance(handler, dict):
            handler["level"] = level
    return config


def configure_logging(settings: Settings | None = None, *, level: str | None = None) -> None:
    """Apply the packaged logging config at `level` (defaults to the settings value)."""
    settings = settings or get_settings()
    effective = (level or settings.app.log_level).upper()
    logging.config.dictConfig(_with_level(get_logging_config(), effective))
