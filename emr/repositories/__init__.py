"""
Data access layer (Repository pattern).

Repositories handle all database queries,
isolating business logic from SQL.
"""

from emr.repositories.criteria import (
    Criteria,
    EncounterFilter,
    Predicate,
    SortOrder,
    encounter_search_criteria,
    encounters_for_patient_criteria,
)
from emr.repositories.store import RecordStore, SqlAlchemyRecordStore
from emr.repositories.encounter import EncounterRepository, get_encounter_repository

__all__ = [
    "Criteria",
    "EncounterFilter",
    "Predicate",
    "SortOrder",
    "encounter_search_criteria",
    "encounters_for_patient_criteria",
    "RecordStore",
    "SqlAlchemyRecordStore",
    "EncounterRepository",
    "get_encounter_repository",
]
