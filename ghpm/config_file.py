"""Utilities for loading the local (gitignored) ghpm JSON config file."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from ghpm.errors import ConfigurationError

DEFAULT_CONFIG_FILENAME = "ghpm.json"


def _default_config_path() -> Path:
    return Path.cwd() / DEFAULT_CONFIG_FILENAME


def load_config_file(path: Optional[str | Path] = None) -> Dict[str, Any]:
    """Load settings from a JSON file; return {} when the default file is absent.

    An explicitly requested file (argument or GHPM_CONFIG) must exist and hold a
    JSON object, otherwise ConfigurationError is raised.
    """

    explicit = path or os.getenv("GHPM_CONFIG")
    config_path = Path(explicit or _default_config_path()).expanduser()
    if not config_path.exists():
        if explicit:
            raise ConfigurationError(f"config file not found: {config_path}")
        return {}
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, ValueError) as exc:
        raise ConfigurationError(f"unable to read config file {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"config file {config_path} must contain a JSON object")
    return data


__all__ = ["load_config_file", "DEFAULT_CONFIG_FILENAME"]
