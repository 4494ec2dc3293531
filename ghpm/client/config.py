"""Central constants for talking to the GitHub REST API."""

from __future__ import annotations

import os

USER_AGENT = "ghpm"
BASE_URL = "https://api.github.com"
ACCEPT = "application/vnd.github+json"
API_VERSION = "2022-11-28"
PER_PAGE = 100
REQUEST_TIMEOUT = float(os.getenv("GHPM_REQUEST_TIMEOUT", "10"))

__all__ = [
    "USER_AGENT",
    "BASE_URL",
    "ACCEPT",
    "API_VERSION",
    "PER_PAGE",
    "REQUEST_TIMEOUT",
]
