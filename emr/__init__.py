"""Encounter persistence for an electronic medical record system."""

__version__ = "0.1.0"
