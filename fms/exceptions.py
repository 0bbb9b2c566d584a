"""Exceptions raised outside the processing core (storage, configuration)."""
from typing import Any, Dict, Optional


class FmsError(Exception):
    """Base error carrying a message and optional details for API responses."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(FmsError):
    """Missing or invalid configuration."""


class StorageError(FmsError):
    """A storage backend failed to read, write or delete an object."""
