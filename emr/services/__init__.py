"""
Services Package
================

Business logic layer on top of the repositories.

Available services:
- EncounterService: Encounter and encounter type lifecycle (void, retire)
"""

from emr.services.encounter import EncounterService, get_encounter_service

__all__ = [
    "EncounterService",
    "get_encounter_service",
]
