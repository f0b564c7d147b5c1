"""
Exception hierarchy for the encounter persistence layer.

All errors raised by this package inherit from EncounterStoreError so callers
can catch them with a single except clause. A lookup that finds nothing is
not an error: it returns None.

    EncounterStoreError
    ├── StoreUnavailableError   the store could not run the request
    ├── InvalidCriteriaError    a predicate the store cannot compile
    └── AmbiguousResultError    a unique lookup matched several rows
"""

from typing import Any, Dict, Optional


class EncounterStoreError(Exception):
    """Base class for all persistence errors in this package."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        extra = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        return f"{self.message} ({extra})"


class StoreUnavailableError(EncounterStoreError):
    """
    The underlying store could not execute the request.

    Raised for connectivity problems, timeouts, locked or missing tables.
    The original driver exception is chained as __cause__.
    """


class InvalidCriteriaError(EncounterStoreError):
    """A predicate names an unknown field or operator."""


class AmbiguousResultError(EncounterStoreError):
    """A lookup declared unique returned more than one row."""
