"""Exception taxonomy shared by the client, gateway, and command layers."""

from __future__ import annotations

from typing import Optional


class GhpmError(Exception):
    """Base class for every error raised deliberately by ghpm."""


class ConfigurationError(GhpmError):
    """Configuration has the wrong shape; raised before any remote call."""


class ValidationError(GhpmError):
    """A milestone request is malformed and was not sent."""


class RemoteError(GhpmError):
    """GitHub answered with a non-2xx status."""

    def __init__(self, status: int, message: Optional[str] = None, url: Optional[str] = None) -> None:
        self.status = status
        self.message = message or ""
        self.url = url
        detail = f"HTTP {status}"
        if self.message:
            detail = f"{detail}: {self.message}"
        super().__init__(detail)


class NotFoundError(RemoteError):
    """GitHub answered 404 (unknown repository, owner, or milestone number)."""

    def __init__(self, message: Optional[str] = None, url: Optional[str] = None) -> None:
        super().__init__(404, message or "Not Found", url)


__all__ = [
    "GhpmError",
    "ConfigurationError",
    "ValidationError",
    "RemoteError",
    "NotFoundError",
]
