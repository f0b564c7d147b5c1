"""
Application-wide constants.

Centralize magic strings and default values here.
"""

from enum import Enum


# ========================================
# Predicate Operators
# ========================================

class Operator(str, Enum):
    """
    Comparison operators understood by record stores.

    Usage:
        Predicate("voided", Operator.EQ, False)
    """

    EQ = "eq"
    """Field equals value."""

    GE = "ge"
    """Field is greater than or equal to value (inclusive lower bound)."""

    LE = "le"
    """Field is less than or equal to value (inclusive upper bound)."""

    IN = "in"
    """Field is one of the values in a collection."""

    ISTARTSWITH = "istartswith"
    """Field starts with value, ignoring case."""


# ========================================
# Field Names
# ========================================

ENCOUNTER_DATETIME = "encounter_datetime"
"""Sole sort key for encounter retrieval."""

# ========================================
# Seed Data
# ========================================

DEFAULT_ENCOUNTER_TYPES = (
    ("Adult Initial", "Outpatient adult initial visit"),
    ("Adult Return", "Outpatient adult return visit"),
    ("Pediatric Initial", "Outpatient pediatric initial visit"),
    ("Pediatric Return", "Outpatient pediatric return visit"),
)

DEFAULT_LOCATION_NAME = "Unknown Location"
