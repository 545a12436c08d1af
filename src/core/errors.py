from __future__ import annotations


class CacheServiceError(Exception):
    """Base error for the cache service."""


class ValidationError(CacheServiceError):
    """Raised when user input or configuration is invalid."""


class ExternalServiceError(CacheServiceError):
    """Raised when an upstream HTTP service fails."""
