"""Core constants and exceptions."""

from emr.core.constants import Operator
from emr.core.exceptions import (
    EncounterStoreError,
    StoreUnavailableError,
    InvalidCriteriaError,
    AmbiguousResultError,
)

__all__ = [
    "Operator",
    "EncounterStoreError",
    "StoreUnavailableError",
    "InvalidCriteriaError",
    "AmbiguousResultError",
]
