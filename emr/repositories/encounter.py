"""
Encounter repository.

Data access for encounters and encounter types. Every method is a thin layer
over a RecordStore; the only logic of substance is the search criteria, which
lives in emr.repositories.criteria.

Lookups that find nothing return None. Store failures surface as
StoreUnavailableError and are never retried here.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import DateTime, text

from emr.models import Encounter, EncounterType, Form, Location, Patient
from emr.repositories.criteria import (
    EncounterFilter,
    all_encounter_types_criteria,
    by_guid_criteria,
    encounter_search_criteria,
    encounter_type_by_name_criteria,
    encounter_type_prefix_criteria,
    encounters_for_patient_criteria,
)
from emr.repositories.store import RecordStore, SqlAlchemyRecordStore

logger = logging.getLogger(__name__)

# Reads the row directly so pending in-memory changes are not seen
_SAVED_DATETIME_SQL = text(
    "SELECT encounter_datetime FROM encounters WHERE id = :encounter_id"
).columns(encounter_datetime=DateTime)


class EncounterRepository:
    """
    Repository for Encounter and EncounterType records.

    Example:
        with get_db_context() as db:
            repo = EncounterRepository(SqlAlchemyRecordStore(db))
            visits = repo.get_encounters(patient=patient, from_date=start)
    """

    def __init__(self, store: RecordStore):
        self.store = store

    # ========================================
    # Encounters
    # ========================================

    def save_encounter(self, encounter: Encounter) -> Encounter:
        return self.store.save(encounter)

    def delete_encounter(self, encounter: Encounter) -> None:
        self.store.delete(encounter)

    def get_encounter(self, encounter_id: int) -> Optional[Encounter]:
        return self.store.get(Encounter, encounter_id)

    def get_encounter_by_guid(self, guid: str) -> Optional[Encounter]:
        return self.store.unique(by_guid_criteria(Encounter, guid))

    def get_encounters_by_patient_id(self, patient_id: int) -> List[Encounter]:
        """
        Non-voided encounters of a patient, newest first.

        Note the direction: get_encounters() sorts oldest first.
        """
        return self.store.query(encounters_for_patient_criteria(patient_id))

    def search(self, filters: EncounterFilter) -> List[Encounter]:
        """
        Encounters matching every active filter, oldest first.

        Returns:
            Possibly empty list; an empty result is not an error
        """
        criteria = encounter_search_criteria(filters)
        results = self.store.query(criteria)
        logger.debug(
            "Encounter search on %s returned %d rows",
            criteria.fields(), len(results)
        )
        return results

    def get_encounters(
        self,
        patient: Optional[Patient] = None,
        location: Optional[Location] = None,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None,
        entered_via_forms: Optional[Iterable[Form]] = None,
        encounter_types: Optional[Iterable[EncounterType]] = None,
        include_voided: bool = False,
    ) -> List[Encounter]:
        """
        Search encounters by any combination of filters.

        Args:
            patient: Restrict to this patient (ignored if patient.id is None)
            location: Restrict to this location (ignored if location.id is None)
            from_date: Inclusive lower bound on encounter_datetime
            to_date: Inclusive upper bound on encounter_datetime
            entered_via_forms: Restrict to these forms (empty means any)
            encounter_types: Restrict to these types (empty means any)
            include_voided: Also return voided encounters

        Returns:
            Matching encounters sorted ascending by encounter_datetime
        """
        return self.search(EncounterFilter(
            patient=patient,
            location=location,
            from_date=from_date,
            to_date=to_date,
            forms=entered_via_forms,
            encounter_types=encounter_types,
            include_voided=include_voided,
        ))

    def get_saved_encounter_datetime(self, encounter: Encounter) -> Optional[datetime]:
        """
        The encounter_datetime currently stored for this encounter's row.

        Useful for detecting a changed datetime before it is flushed.
        """
        return self.store.scalar(_SAVED_DATETIME_SQL, {"encounter_id": encounter.id})

    # ========================================
    # Encounter Types
    # ========================================

    def save_encounter_type(self, encounter_type: EncounterType) -> EncounterType:
        return self.store.save(encounter_type)

    def delete_encounter_type(self, encounter_type: EncounterType) -> None:
        self.store.delete(encounter_type)

    def get_encounter_type(self, encounter_type_id: int) -> Optional[EncounterType]:
        return self.store.get(EncounterType, encounter_type_id)

    def get_encounter_type_by_name(self, name: str) -> Optional[EncounterType]:
        """
        Non-retired encounter type with exactly this name.

        Raises:
            AmbiguousResultError: If several non-retired types share the name
        """
        return self.store.unique(encounter_type_by_name_criteria(name))

    def get_encounter_type_by_guid(self, guid: str) -> Optional[EncounterType]:
        return self.store.unique(by_guid_criteria(EncounterType, guid))

    def get_all_encounter_types(self, include_retired: bool = True) -> List[EncounterType]:
        return self.store.query(all_encounter_types_criteria(include_retired))

    def find_encounter_types(self, name: str) -> List[EncounterType]:
        """Encounter types whose name starts with `name`, ignoring case."""
        return self.store.query(encounter_type_prefix_criteria(name))

    # ========================================
    # Locations
    # ========================================

    def get_location_by_guid(self, guid: str) -> Optional[Location]:
        return self.store.unique(by_guid_criteria(Location, guid))


# ========================================
# Convenience Functions
# ========================================

def get_encounter_repository(db) -> EncounterRepository:
    """
    Factory for a repository bound to a session.

    Usage:
        with get_db_context() as db:
            repo = get_encounter_repository(db)
    """
    return EncounterRepository(SqlAlchemyRecordStore(db))
