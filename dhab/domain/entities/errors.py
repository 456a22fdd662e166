"""
Domain Errors

This module defines custom error classes for domain-specific exceptions.
"""

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base class for domain errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidRequestError(DomainError):
    """Raised when caller supplied parameters are out of range or unknown."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class PriceSourceUnavailableError(DomainError):
    """Raised by a price source that cannot produce a usable snapshot."""

    def __init__(
        self, source: str, reason: str, details: Optional[Dict[str, Any]] = None
    ):
        self.source = source
        super().__init__(f"Price source '{source}' unavailable: {reason}", details)


class StoreDecodeError(DomainError):
    """Raised when a stored value does not match its data contract."""

    def __init__(self, key: str, reason: str, details: Optional[Dict[str, Any]] = None):
        self.key = key
        super().__init__(f"Stored value at '{key}' is invalid: {reason}", details)


class PriceUnavailableError(DomainError):
    """Raised when no snapshot can be served, cached or fresh."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
