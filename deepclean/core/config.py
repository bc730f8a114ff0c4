#!/usr/bin/env python3
"""Configuration for mac-deepclean."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

HOME = str(Path.home())
CONFIG_PATHS = [
    os.path.join(HOME, ".deepcleanrc"),
    os.path.join(HOME, ".config", "mac-deepclean", "config.json"),
]

DEFAULTS: dict[str, Any] = {
    "exclude_sections": [],
    "exclude_targets": [],
    "trace_days_old": 3,
    "preflight_threshold_mb": 1,
    "use_sudo": True,
    "log_level": "WARNING",
}

VALID_KEYS = frozenset(DEFAULTS.keys())
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

logger = logging.getLogger(__name__)


def config_path() -> str:
    """Preferred config file path."""
    return CONFIG_PATHS[0]


def config_exists(paths: list[str] | None = None) -> bool:
    """True if any known config file exists."""
    for p in paths or CONFIG_PATHS:
        if os.path.isfile(p):
            return True
    return False


def _apply(out: dict[str, Any], raw: dict[str, Any]) -> None:
    for k, v in raw.items():
        if k not in VALID_KEYS:
            logger.debug("ignoring unknown config key %r", k)
            continue
        if k in ("exclude_sections", "exclude_targets") and isinstance(v, list):
            out[k] = [str(x) for x in v if isinstance(x, str)][:200]
        elif k == "trace_days_old" and isinstance(v, (int, float)) and not isinstance(v, bool):
            val = int(v)
            if 1 <= val <= 365:
                out[k] = val
        elif k == "preflight_threshold_mb" and isinstance(v, (int, float)) and not isinstance(v, bool):
            val = int(v)
            if 0 <= val <= 10 * 1024:
                out[k] = val
        elif k == "use_sudo" and isinstance(v, bool):
            out[k] = v
        elif k == "log_level" and isinstance(v, str) and v.upper() in LOG_LEVELS:
            out[k] = v.upper()


def load(paths: list[str] | None = None) -> dict[str, Any]:
    """Load config from first existing file. Returns defaults + overrides."""
    out = dict(DEFAULTS)
    for p in paths or CONFIG_PATHS:
        if not os.path.isfile(p):
            continue
        try:
            with open(p, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("could not read config %s: %s", p, e)
            continue
        if not isinstance(raw, dict):
            continue
        _apply(out, raw)
        return out
    return out


def save(cfg: dict[str, Any], path: str | None = None) -> None:
    """Write config to path (default: config_path()). Creates parent dirs."""
    p = path or config_path()
    dirname = os.path.dirname(p)
    if dirname:
        os.makedirs(dirname, exist_ok=True)
    to_write = {k: cfg.get(k, DEFAULTS[k]) for k in sorted(VALID_KEYS)}
    with open(p, "w", encoding="utf-8") as f:
        json.dump(to_write, f, indent=2)


def init_config(path: str | None = None) -> str:
    """Create default config file. Returns path used."""
    p = path or config_path()
    save(DEFAULTS, p)
    return p
