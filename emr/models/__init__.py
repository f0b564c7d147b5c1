"""
Database models package.

Contains all SQLAlchemy ORM models.
"""

from emr.models.base import Base, BaseModel, create_all_tables, drop_all_tables, new_guid
from emr.models.patient import Patient, Location, Form
from emr.models.encounter import Encounter, EncounterType

__all__ = [
    "Base",
    "BaseModel",
    "Patient",
    "Location",
    "Form",
    "Encounter",
    "EncounterType",
    "create_all_tables",
    "drop_all_tables",
    "new_guid",
]
