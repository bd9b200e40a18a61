from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Dict


DEFAULT_CONFIG_PATH = Path("config.toml")
CONFIG_PATH_ENV = "VATSIM_LISTING_CONFIG"


def load_raw_config(path: str | Path | None = None) -> Dict[str, Any]:
    """
    Load the unified application config (config.toml by default).

    The path may be overridden with the ``VATSIM_LISTING_CONFIG`` environment
    variable. Returns an empty dict when the file is missing so callers can
    fall back to environment variables.
    """
    if path is None:
        path = os.getenv(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH
    target = Path(path)
    if not target.is_file():
        return {}

    with target.open("rb") as handle:
        return tomllib.load(handle)


def section(config: Dict[str, Any] | None, name: str) -> Dict[str, Any]:
    """Return the ``[vatsim_listing.<name>]`` table, or an empty dict."""
    return (config or {}).get("vatsim_listing", {}).get(name, {}) or {}


__all__ = ["load_raw_config", "section", "DEFAULT_CONFIG_PATH", "CONFIG_PATH_ENV"]
