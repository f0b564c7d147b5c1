"""Encounter criteria composition, checked without a database."""

import dataclasses
from datetime import datetime

import pytest

from emr.core.constants import Operator
from emr.models import Encounter, EncounterType, Form, Location, Patient
from emr.repositories.criteria import (
    EncounterFilter,
    Predicate,
    SortOrder,
    all_encounter_types_criteria,
    by_guid_criteria,
    encounter_search_criteria,
    encounter_type_by_name_criteria,
    encounter_type_prefix_criteria,
    encounters_for_patient_criteria,
)

VOIDED_FALSE = Predicate("voided", Operator.EQ, False)
ASCENDING = (SortOrder("encounter_datetime", descending=False),)


@pytest.fixture
def patient():
    return Patient(id=7, given_name="Amina", family_name="Njeri")


@pytest.fixture
def location():
    return Location(id=3, name="Eldoret Clinic")


def test_no_filters_only_excludes_voided():
    criteria = encounter_search_criteria(EncounterFilter())

    assert criteria.entity is Encounter
    assert criteria.predicates == (VOIDED_FALSE,)
    assert criteria.order_by == ASCENDING


def test_include_voided_with_no_filters_has_no_predicates():
    criteria = encounter_search_criteria(EncounterFilter(include_voided=True))

    assert criteria.predicates == ()
    assert criteria.order_by == ASCENDING


def test_every_filter_adds_one_predicate(patient, location):
    start, end = datetime(2020, 1, 1), datetime(2020, 12, 31)
    forms = [Form(id=1, name="A"), Form(id=2, name="B")]
    types = [EncounterType(id=9, name="Adult Initial")]

    criteria = encounter_search_criteria(EncounterFilter(
        patient=patient,
        location=location,
        from_date=start,
        to_date=end,
        forms=forms,
        encounter_types=types,
    ))

    assert criteria.predicates == (
        Predicate("patient_id", Operator.EQ, 7),
        Predicate("location_id", Operator.EQ, 3),
        Predicate("encounter_datetime", Operator.GE, start),
        Predicate("encounter_datetime", Operator.LE, end),
        Predicate("form_id", Operator.IN, (1, 2)),
        Predicate("encounter_type_id", Operator.IN, (9,)),
        VOIDED_FALSE,
    )
    assert criteria.order_by == ASCENDING


def test_patient_and_location_without_id_are_ignored():
    unsaved_patient = Patient(given_name="New", family_name="Patient")
    unsaved_location = Location(name="Unsaved")

    with_unsaved = encounter_search_criteria(
        EncounterFilter(patient=unsaved_patient, location=unsaved_location)
    )

    assert with_unsaved == encounter_search_criteria(EncounterFilter())


@pytest.mark.parametrize("empty", [None, [], (), set()])
def test_empty_collections_are_treated_as_absent(empty):
    criteria = encounter_search_criteria(
        EncounterFilter(forms=empty, encounter_types=empty)
    )

    assert criteria.fields() == ("voided",)


def test_date_bounds_are_independent():
    start = datetime(2021, 6, 1)

    criteria = encounter_search_criteria(EncounterFilter(from_date=start))

    assert Predicate("encounter_datetime", Operator.GE, start) in criteria.predicates
    assert Operator.LE not in {p.operator for p in criteria.predicates}


def test_filter_is_immutable_and_normalizes_collections():
    forms = [Form(id=1, name="A")]
    filters = EncounterFilter(forms=forms)
    forms.append(Form(id=2, name="B"))

    assert isinstance(filters.forms, tuple)
    assert len(filters.forms) == 1
    with pytest.raises(dataclasses.FrozenInstanceError):
        filters.include_voided = True


def test_patient_path_sorts_newest_first():
    criteria = encounters_for_patient_criteria(42)

    assert criteria.entity is Encounter
    assert criteria.predicates == (
        Predicate("patient_id", Operator.EQ, 42),
        VOIDED_FALSE,
    )
    assert criteria.order_by == (SortOrder("encounter_datetime", descending=True),)


def test_encounter_type_name_lookup_excludes_retired():
    criteria = encounter_type_by_name_criteria("Adult Initial")

    assert criteria.entity is EncounterType
    assert set(criteria.predicates) == {
        Predicate("retired", Operator.EQ, False),
        Predicate("name", Operator.EQ, "Adult Initial"),
    }
    assert criteria.order_by == ()


def test_encounter_type_prefix_search_is_ordered_by_name():
    criteria = encounter_type_prefix_criteria("adu")

    assert criteria.predicates == (Predicate("name", Operator.ISTARTSWITH, "adu"),)
    assert criteria.order_by == (SortOrder.asc("name"),)


@pytest.mark.parametrize("include_retired,fields", [(True, ()), (False, ("retired",))])
def test_all_encounter_types(include_retired, fields):
    assert all_encounter_types_criteria(include_retired).fields() == fields


def test_guid_lookup():
    criteria = by_guid_criteria(Location, "abc")

    assert criteria.entity is Location
    assert criteria.predicates == (Predicate("guid", Operator.EQ, "abc"),)


def test_forms_and_types_without_id_are_skipped():
    saved_form = Form(id=4, name="Adult Intake")
    unsaved_form = Form(name="Draft")
    unsaved_type = EncounterType(name="Not Yet Saved")

    criteria = encounter_search_criteria(EncounterFilter(
        forms=[unsaved_form, saved_form],
        encounter_types=[unsaved_type],
    ))

    assert criteria.predicates == (
        Predicate("form_id", Operator.IN, (4,)),
        VOIDED_FALSE,
    )


def test_filter_accepts_generators():
    forms = (Form(id=n, name=f"Form {n}") for n in (1, 2))

    criteria = encounter_search_criteria(EncounterFilter(forms=forms))

    assert Predicate("form_id", Operator.IN, (1, 2)) in criteria.predicates
