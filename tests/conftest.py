"""Shared fixtures: an in-memory SQLite database per test and a small clinic."""

import os

# Must be set before emr.config is imported
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from datetime import datetime
from types import SimpleNamespace

import pytest

from emr.database import create_db_engine, create_session_factory
from emr.models import (
    Encounter,
    EncounterType,
    Form,
    Location,
    Patient,
    create_all_tables,
)
from emr.repositories import EncounterRepository, SqlAlchemyRecordStore


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite:///:memory:", echo=False)
    create_all_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def store(db):
    return SqlAlchemyRecordStore(db)


@pytest.fixture
def repo(store):
    return EncounterRepository(store)


@pytest.fixture
def clinic(db):
    """
    Two patients, two locations, two forms, two types and six encounters.

    Encounter datetimes are all distinct so ordering is fully determined.

        e1  P  L1  F1  T1  2020-01-01
        e2  P  L1  F2  T2  2020-02-01  voided
        e3  P  L2  --  T1  2020-03-01
        e4  Q  L2  F1  T2  2020-01-15
        e5  Q  --  F2  --  2020-02-20
        e6  Q  L1  F1  T1  2020-03-10  voided
    """
    p = Patient(given_name="Amina", family_name="Njeri")
    q = Patient(given_name="Joseph", family_name="Kamau")
    l1 = Location(name="Eldoret Clinic")
    l2 = Location(name="Turbo Health Centre")
    f1 = Form(name="Adult Intake")
    f2 = Form(name="Adult Return")
    t1 = EncounterType(name="Adult Initial")
    t2 = EncounterType(name="Adult Return")

    e1 = Encounter(patient=p, location=l1, form=f1, encounter_type=t1,
                   encounter_datetime=datetime(2020, 1, 1))
    e2 = Encounter(patient=p, location=l1, form=f2, encounter_type=t2,
                   encounter_datetime=datetime(2020, 2, 1), voided=True)
    e3 = Encounter(patient=p, location=l2, encounter_type=t1,
                   encounter_datetime=datetime(2020, 3, 1))
    e4 = Encounter(patient=q, location=l2, form=f1, encounter_type=t2,
                   encounter_datetime=datetime(2020, 1, 15))
    e5 = Encounter(patient=q, form=f2,
                   encounter_datetime=datetime(2020, 2, 20))
    e6 = Encounter(patient=q, location=l1, form=f1, encounter_type=t1,
                   encounter_datetime=datetime(2020, 3, 10), voided=True)

    encounters = [e1, e2, e3, e4, e5, e6]
    db.add_all([p, q, l1, l2, f1, f2, t1, t2, *encounters])
    db.flush()

    return SimpleNamespace(
        p=p, q=q, l1=l1, l2=l2, f1=f1, f2=f2, t1=t1, t2=t2,
        e1=e1, e2=e2, e3=e3, e4=e4, e5=e5, e6=e6,
        encounters=encounters,
    )
