"""Custom exceptions for the teams_callflow package.

Single source of truth for call-flow specific exception types.
"""

from __future__ import annotations

from typing import Optional


class CallFlowError(Exception):
    """Base class for every error raised by the call-flow builder."""


class NotFoundError(CallFlowError, LookupError):
    """Raised when a voice app, user, group or channel does not exist in the tenant."""

    def __init__(self, kind: str, reference: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"{kind} '{reference}' was not found")
        self.kind = kind
        self.reference = reference


class ResolutionError(CallFlowError):
    """Raised when a call target cannot be mapped to anything the tenant knows about."""

    def __init__(self, reference: str, target_type: Optional[str] = None, message: Optional[str] = None) -> None:
        details = [message or f"Could not resolve call target '{reference}'"]
        if target_type is not None:
            details.append(f"Target type: {target_type}")
        super().__init__("\n".join(details))
        self.reference = reference
        self.target_type = target_type


class ExportError(CallFlowError):
    """Raised when a greeting asset cannot be written or downloaded."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(f"{key}: {message}")
        self.key = key


class ConfigurationAmbiguityError(CallFlowError, ValueError):
    """Raised when tenant configuration cannot be read into the expected shape."""


class DirectoryError(CallFlowError):
    """Raised when a directory request fails for reasons other than a missing object."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None) -> None:
        details = [message, f"URL: {url}"]
        if status_code is not None:
            details.append(f"HTTP status: {status_code}")
        super().__init__("\n".join(details))
        self.url = url
        self.status_code = status_code


class SnapshotError(CallFlowError):
    """Raised when a tenant snapshot file cannot be loaded."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{message}\nSnapshot: {path}")
        self.path = path


__all__ = [
    "CallFlowError",
    "NotFoundError",
    "ResolutionError",
    "ExportError",
    "ConfigurationAmbiguityError",
    "DirectoryError",
    "SnapshotError",
]
