"""
Database initialization and seeding.

This script:
- Creates all database tables
- Seeds the default encounter types and location
- Optionally adds sample patients and encounters for development/testing
- Can reset the database (drop and recreate)

Usage:
    # Initialize with seed data
    python -m emr.database.init_db

    # Reset database (drops all tables and recreates)
    python -m emr.database.init_db --reset

    # Add sample data for testing
    python -m emr.database.init_db --sample-data
"""

import argparse
import logging
from datetime import date, datetime

from sqlalchemy import func, select

from emr.config import settings
from emr.core.constants import DEFAULT_ENCOUNTER_TYPES, DEFAULT_LOCATION_NAME
from emr.database.session import engine, get_db_context
from emr.models import (
    Encounter,
    EncounterType,
    Form,
    Location,
    Patient,
    create_all_tables,
    drop_all_tables,
)
from emr.repositories import get_encounter_repository
from emr.services import get_encounter_service

logger = logging.getLogger(__name__)


def create_tables(reset: bool = False) -> None:
    """
    Create all database tables.

    Args:
        reset: If True, drop existing tables first
    """
    if reset:
        print("🗑️  Dropping existing tables...")
        drop_all_tables(engine)
        print("✅ Tables dropped")

    print("📊 Creating database tables...")
    create_all_tables(engine)
    print("✅ Tables created")


def seed_encounter_types() -> None:
    """Seed the default encounter types, skipping names that already exist."""
    print("\n🌱 Seeding encounter types...")

    with get_db_context() as db:
        repo = get_encounter_repository(db)
        for name, description in DEFAULT_ENCOUNTER_TYPES:
            if repo.get_encounter_type_by_name(name):
                print(f"  ⏭️  Encounter type '{name}' already exists (skipping)")
                continue
            encounter_type = repo.save_encounter_type(
                EncounterType(name=name, description=description)
            )
            print(f"  ✅ Created: {encounter_type!r}")

        existing = db.scalars(
            select(Location).filter_by(name=DEFAULT_LOCATION_NAME)
        ).first()
        if existing is None:
            db.add(Location(name=DEFAULT_LOCATION_NAME))
            print(f"  ✅ Created location: {DEFAULT_LOCATION_NAME}")

    print("✅ Encounter types seeded")


def seed_sample_data() -> None:
    """
    Seed sample data for development and testing.

    This creates two patients, an intake form and a handful of encounters
    (one of them voided).
    """
    print("\n🌱 Seeding sample data...")

    with get_db_context() as db:
        service = get_encounter_service(db)
        adult_initial = service.get_encounter_type_by_name("Adult Initial")
        adult_return = service.get_encounter_type_by_name("Adult Return")
        clinic = db.scalars(select(Location).filter_by(name=DEFAULT_LOCATION_NAME)).first()

        print("  🧑 Creating sample patients...")
        alice = Patient(given_name="Alice", family_name="Mwangi", birthdate=date(1984, 3, 2))
        bob = Patient(given_name="Bob", family_name="Otieno", birthdate=date(1990, 11, 17))
        intake = Form(name="Adult Intake", version="1.2")
        db.add_all([alice, bob, intake])
        db.flush()

        print("  📋 Creating sample encounters...")
        samples = [
            Encounter(patient=alice, location=clinic, form=intake,
                      encounter_type=adult_initial, encounter_datetime=datetime(2020, 1, 1, 9, 0)),
            Encounter(patient=alice, location=clinic, form=intake,
                      encounter_type=adult_return, encounter_datetime=datetime(2020, 2, 1, 9, 0)),
            Encounter(patient=alice, location=clinic,
                      encounter_type=adult_return, encounter_datetime=datetime(2020, 3, 1, 9, 0)),
            Encounter(patient=bob, location=clinic, form=intake,
                      encounter_type=adult_initial, encounter_datetime=datetime(2020, 1, 15, 14, 30)),
        ]
        for encounter in samples:
            service.save_encounter(encounter)
            print(f"    ✅ {encounter!r}")

        service.void_encounter(samples[1], "Entered in error")
        print(f"    🚫 Voided: {samples[1]!r}")

    print("✅ Sample data seeded")


def print_database_status() -> None:
    """Print current database status and counts."""
    print("\n" + "=" * 60)
    print("📊 Database Status")
    print("=" * 60)

    with get_db_context() as db:
        for model in (Patient, Location, Form, EncounterType, Encounter):
            count = db.scalar(select(func.count()).select_from(model))
            print(f"  {model.__name__ + ':':<15} {count}")

        types = get_encounter_repository(db).get_all_encounter_types()
        if types:
            print("\n  Encounter Types:")
            for encounter_type in types:
                print(f"    • {encounter_type!r}")

    print("=" * 60)


def initialize_database(reset: bool = False, sample_data: bool = False) -> None:
    """
    Initialize the database.

    Args:
        reset: Drop existing tables before creating
        sample_data: Add sample data for testing
    """
    print("=" * 60)
    print("🗄️  Database Initialization")
    print("=" * 60)

    create_tables(reset=reset)
    seed_encounter_types()

    if sample_data:
        seed_sample_data()

    print_database_status()

    print("\n✅ Database initialization complete!")


def main():
    """Main entry point with CLI argument parsing."""
    parser = argparse.ArgumentParser(
        description="Initialize and seed the encounter database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Initialize with the default encounter types
  python -m emr.database.init_db

  # Reset database (drop all tables and recreate)
  python -m emr.database.init_db --reset

  # Full reset with sample data
  python -m emr.database.init_db --reset --sample-data
        """
    )

    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop existing tables before creating (WARNING: deletes all data!)"
    )

    parser.add_argument(
        "--sample-data",
        action="store_true",
        help="Add sample data for development/testing"
    )

    parser.add_argument(
        "--yes",
        action="store_true",
        help="Do not ask for confirmation before --reset"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    logger.debug("Using database %s", settings.database_url)

    if args.reset and not args.yes:
        print("⚠️  WARNING: This will DELETE ALL DATA in the database!")
        response = input("Are you sure? Type 'yes' to continue: ")
        if response.lower() != 'yes':
            print("❌ Aborted")
            return

    initialize_database(reset=args.reset, sample_data=args.sample_data)


if __name__ == "__main__":
    main()
