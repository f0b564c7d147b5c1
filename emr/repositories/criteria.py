"""
Encounter search criteria.

Turns an EncounterFilter into a Criteria value: the predicates a record store
must AND together plus the sort order to apply. Building criteria is pure and
needs no database, so the composition rules can be checked on their own.

Two retrieval paths are defined here and they sort in opposite directions:

- encounter_search_criteria(): ascending by encounter_datetime
- encounters_for_patient_criteria(): descending by encounter_datetime

Callers depend on each direction, so they are kept as they are.

No secondary sort key is applied. Encounters sharing an encounter_datetime
come back in whatever order the backend produces; do not rely on it.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Optional, Tuple

from emr.core.constants import ENCOUNTER_DATETIME, Operator
from emr.models import Encounter, EncounterType, Form, Location, Patient


# ========================================
# Value Objects
# ========================================

@dataclass(frozen=True)
class Predicate:
    """A single condition: ``<field> <operator> <value>``."""

    field: str
    operator: Operator
    value: Any


@dataclass(frozen=True)
class SortOrder:
    """Sort on one field."""

    field: str
    descending: bool = False

    @classmethod
    def asc(cls, field_name: str) -> "SortOrder":
        return cls(field_name, descending=False)

    @classmethod
    def desc(cls, field_name: str) -> "SortOrder":
        return cls(field_name, descending=True)


@dataclass(frozen=True)
class Criteria:
    """
    What a record store executes: the entity to load, the predicates that
    must all hold, and the ordering of the result.
    """

    entity: type
    predicates: Tuple[Predicate, ...] = ()
    order_by: Tuple[SortOrder, ...] = ()

    def fields(self) -> Tuple[str, ...]:
        """Names of the fields constrained by this criteria."""
        return tuple(p.field for p in self.predicates)


@dataclass(frozen=True)
class EncounterFilter:
    """
    Optional filters for encounter search.

    Attributes:
        patient: Only this patient's encounters (ignored if its id is unset)
        location: Only encounters at this location (ignored if its id is unset)
        from_date: Inclusive lower bound on encounter_datetime
        to_date: Inclusive upper bound on encounter_datetime
        forms: Only encounters entered via one of these forms (empty = any)
        encounter_types: Only encounters of one of these types (empty = any)
        include_voided: Also return voided encounters

    Forms and encounter types without an id are skipped, like an unsaved
    patient or location. A collection holding only such members counts as
    empty.
    """

    patient: Optional[Patient] = None
    location: Optional[Location] = None
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None
    forms: Optional[Iterable[Form]] = ()
    encounter_types: Optional[Iterable[EncounterType]] = ()
    include_voided: bool = False

    def __post_init__(self):
        # Accept any iterable (or None) but store tuples
        object.__setattr__(self, "forms", _as_tuple(self.forms))
        object.__setattr__(self, "encounter_types", _as_tuple(self.encounter_types))


def _as_tuple(items: Optional[Iterable[Any]]) -> Tuple[Any, ...]:
    if items is None:
        return ()
    return tuple(items)


def _has_identity(entity: Optional[Any]) -> bool:
    return entity is not None and getattr(entity, "id", None) is not None


def _ids(entities: Iterable[Any]) -> Tuple[Any, ...]:
    return tuple(e.id for e in entities if _has_identity(e))


# ========================================
# Builders
# ========================================

def encounter_search_criteria(filters: EncounterFilter) -> Criteria:
    """
    Compose the criteria for a general encounter search.

    Every filter that is present adds one predicate; absent filters add
    nothing. The result is always sorted ascending by encounter_datetime.

    Example:
        criteria = encounter_search_criteria(
            EncounterFilter(patient=patient, from_date=datetime(2020, 1, 1))
        )
        # patient_id == patient.id AND encounter_datetime >= 2020-01-01
        # AND voided == False, ordered by encounter_datetime ASC
    """
    predicates = []

    if _has_identity(filters.patient):
        predicates.append(Predicate("patient_id", Operator.EQ, filters.patient.id))
    if _has_identity(filters.location):
        predicates.append(Predicate("location_id", Operator.EQ, filters.location.id))
    if filters.from_date is not None:
        predicates.append(Predicate(ENCOUNTER_DATETIME, Operator.GE, filters.from_date))
    if filters.to_date is not None:
        predicates.append(Predicate(ENCOUNTER_DATETIME, Operator.LE, filters.to_date))
    form_ids = _ids(filters.forms)
    if form_ids:
        predicates.append(Predicate("form_id", Operator.IN, form_ids))
    type_ids = _ids(filters.encounter_types)
    if type_ids:
        predicates.append(Predicate("encounter_type_id", Operator.IN, type_ids))
    if not filters.include_voided:
        predicates.append(Predicate("voided", Operator.EQ, False))

    return Criteria(
        entity=Encounter,
        predicates=tuple(predicates),
        order_by=(SortOrder.asc(ENCOUNTER_DATETIME),),
    )


def encounters_for_patient_criteria(patient_id: int) -> Criteria:
    """Non-voided encounters of one patient, newest first."""
    return Criteria(
        entity=Encounter,
        predicates=(
            Predicate("patient_id", Operator.EQ, patient_id),
            Predicate("voided", Operator.EQ, False),
        ),
        order_by=(SortOrder.desc(ENCOUNTER_DATETIME),),
    )


def encounter_type_by_name_criteria(name: str) -> Criteria:
    """Exact, non-retired name match."""
    return Criteria(
        entity=EncounterType,
        predicates=(
            Predicate("retired", Operator.EQ, False),
            Predicate("name", Operator.EQ, name),
        ),
    )


def encounter_type_prefix_criteria(prefix: str) -> Criteria:
    """Case-insensitive starts-with match on name, ordered by name."""
    return Criteria(
        entity=EncounterType,
        predicates=(Predicate("name", Operator.ISTARTSWITH, prefix),),
        order_by=(SortOrder.asc("name"),),
    )


def all_encounter_types_criteria(include_retired: bool = True) -> Criteria:
    """All encounter types ordered by name, optionally without retired ones."""
    predicates = () if include_retired else (Predicate("retired", Operator.EQ, False),)
    return Criteria(
        entity=EncounterType,
        predicates=predicates,
        order_by=(SortOrder.asc("name"),),
    )


def by_guid_criteria(entity: type, guid: str) -> Criteria:
    """Equality match on an entity's external identifier."""
    return Criteria(entity=entity, predicates=(Predicate("guid", Operator.EQ, guid),))
