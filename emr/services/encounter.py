"""
Encounter service.

Lifecycle operations on encounters and encounter types:
- Save encounters (requires an encounter_datetime)
- Void / unvoid encounters
- Retire / unretire encounter types
- Read access through the encounter repository

The service works inside the caller's unit of work. It flushes so that ids
and timestamps are populated, but it never commits; wrap calls in
get_db_context() to get commit/rollback.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from emr.models import Encounter, EncounterType, Form, Location, Patient
from emr.repositories.criteria import EncounterFilter
from emr.repositories.encounter import EncounterRepository
from emr.repositories.store import SqlAlchemyRecordStore

logger = logging.getLogger(__name__)


class EncounterService:
    """
    Service for managing encounters.

    Handles:
    - Validating encounters before they are saved
    - Voiding and retiring with a recorded reason
    - Delegating reads to EncounterRepository
    """

    def __init__(self, db: Session):
        """
        Initialize encounter service.

        Args:
            db: Database session (the caller controls commits)
        """
        self.db = db
        self.repository = EncounterRepository(SqlAlchemyRecordStore(db))

    # ========================================
    # Encounters
    # ========================================

    def save_encounter(self, encounter: Encounter) -> Encounter:
        """
        Save a new or changed encounter.

        Raises:
            ValueError: If encounter_datetime is not set
        """
        if encounter.encounter_datetime is None:
            raise ValueError("Encounter must have an encounter_datetime")
        return self.repository.save_encounter(encounter)

    def void_encounter(self, encounter: Encounter, reason: str) -> Encounter:
        """
        Void an encounter so normal retrieval no longer returns it.

        Args:
            encounter: Encounter to void
            reason: Why it is being voided (required)

        Raises:
            ValueError: If reason is blank
        """
        if not reason or not reason.strip():
            raise ValueError("A reason is required to void an encounter")

        encounter.void(reason.strip())
        self.repository.save_encounter(encounter)
        logger.info("Voided encounter %s: %s", encounter.id, encounter.void_reason)
        return encounter

    def unvoid_encounter(self, encounter: Encounter) -> Encounter:
        encounter.unvoid()
        self.repository.save_encounter(encounter)
        logger.info("Unvoided encounter %s", encounter.id)
        return encounter

    def purge_encounter(self, encounter: Encounter) -> None:
        """Delete an encounter row outright."""
        self.repository.delete_encounter(encounter)
        logger.info("Purged encounter %s", encounter.id)

    def get_encounter(self, encounter_id: int) -> Optional[Encounter]:
        return self.repository.get_encounter(encounter_id)

    def get_encounter_by_guid(self, guid: str) -> Optional[Encounter]:
        return self.repository.get_encounter_by_guid(guid)

    def get_encounters_by_patient_id(self, patient_id: int) -> List[Encounter]:
        return self.repository.get_encounters_by_patient_id(patient_id)

    def search(self, filters: EncounterFilter) -> List[Encounter]:
        return self.repository.search(filters)

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
        return self.repository.get_encounters(
            patient=patient,
            location=location,
            from_date=from_date,
            to_date=to_date,
            entered_via_forms=entered_via_forms,
            encounter_types=encounter_types,
            include_voided=include_voided,
        )

    # ========================================
    # Encounter Types
    # ========================================

    def save_encounter_type(self, encounter_type: EncounterType) -> EncounterType:
        return self.repository.save_encounter_type(encounter_type)

    def retire_encounter_type(self, encounter_type: EncounterType, reason: str) -> EncounterType:
        """
        Retire an encounter type.

        Retired types are skipped by get_encounter_type_by_name() but remain
        attached to existing encounters.

        Raises:
            ValueError: If reason is blank
        """
        if not reason or not reason.strip():
            raise ValueError("A reason is required to retire an encounter type")

        encounter_type.retire(reason.strip())
        self.repository.save_encounter_type(encounter_type)
        logger.info("Retired encounter type '%s': %s", encounter_type.name, encounter_type.retire_reason)
        return encounter_type

    def unretire_encounter_type(self, encounter_type: EncounterType) -> EncounterType:
        encounter_type.unretire()
        self.repository.save_encounter_type(encounter_type)
        logger.info("Unretired encounter type '%s'", encounter_type.name)
        return encounter_type

    def get_encounter_type(self, encounter_type_id: int) -> Optional[EncounterType]:
        return self.repository.get_encounter_type(encounter_type_id)

    def get_encounter_type_by_name(self, name: str) -> Optional[EncounterType]:
        return self.repository.get_encounter_type_by_name(name)

    def get_all_encounter_types(self, include_retired: bool = True) -> List[EncounterType]:
        return self.repository.get_all_encounter_types(include_retired)

    def find_encounter_types(self, name: str) -> List[EncounterType]:
        return self.repository.find_encounter_types(name)


# ========================================
# Convenience Functions
# ========================================

def get_encounter_service(db: Session) -> EncounterService:
    """
    Factory function for creating EncounterService.

    Usage:
        from emr.database import get_db_context
        from emr.services.encounter import get_encounter_service

        with get_db_context() as db:
            service = get_encounter_service(db)
            service.void_encounter(encounter, "Entered in error")
    """
    return EncounterService(db)
