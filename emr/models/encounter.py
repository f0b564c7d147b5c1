"""
Encounter and EncounterType models.

An Encounter is one clinical interaction with a patient: a visit, an
admission, a form filled in at the bedside. Encounters are never edited out
of existence; they are voided, which hides them from normal retrieval while
keeping the row for audit.

EncounterTypes classify encounters ("Adult Initial", "Pediatric Return").
Types that should no longer be used are retired rather than deleted.
"""

from datetime import datetime, UTC
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from emr.models.base import Base, BaseModel
from emr.models.patient import Form, Location, Patient


class EncounterType(BaseModel, Base):
    """
    Classification of encounters.

    Attributes:
        id: Auto-incrementing primary key
        guid: External identifier (from BaseModel)
        name: Display name, looked up exactly or by prefix
        description: Free-text description
        retired: Whether the type is withdrawn from use
        retire_reason: Why it was retired
        date_retired: When it was retired

    Example:
        visit = EncounterType(name="Adult Initial", description="First visit")
        db.add(visit)
        db.commit()
    """

    __tablename__ = "encounter_types"

    # ========================================
    # Primary Key
    # ========================================

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Auto-incrementing primary key"
    )

    # ========================================
    # Type Details
    # ========================================

    # Not unique: duplicates are reported by lookups, not prevented here
    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
        comment="Encounter type name"
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Free-text description"
    )

    # ========================================
    # Retirement
    # ========================================

    retired: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Withdrawn from use"
    )

    retire_reason: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Why the type was retired"
    )

    date_retired: Mapped[Optional[datetime]] = mapped_column(
        DateTime,
        nullable=True,
        comment="When the type was retired"
    )

    __table_args__ = (
        Index("ix_encounter_types_name_retired", "name", "retired"),
        {"comment": "Encounter classifications"}
    )

    def __init__(self, **kwargs):
        """
        Initialize an EncounterType with validation.

        Raises:
            ValueError: If name is empty
        """
        kwargs.setdefault("retired", False)
        super().__init__(**kwargs)

        if not self.name or not self.name.strip():
            raise ValueError("Encounter type name cannot be empty")

    def retire(self, reason: str) -> None:
        """Withdraw this type from use."""
        self.retired = True
        self.retire_reason = reason
        self.date_retired = datetime.now(UTC).replace(tzinfo=None)

    def unretire(self) -> None:
        """Put a retired type back into use."""
        self.retired = False
        self.retire_reason = None
        self.date_retired = None

    def __repr__(self) -> str:
        status = "retired" if self.retired else "active"
        return f"<EncounterType(id={self.id}, name='{self.name}', {status})>"

    def __str__(self) -> str:
        return self.name


class Encounter(BaseModel, Base):
    """
    A clinical encounter.

    Attributes:
        id: Auto-incrementing primary key
        guid: External identifier (from BaseModel)
        patient_id: Patient seen
        location_id: Where it happened
        form_id: Form the encounter was entered via
        encounter_type_id: Classification
        encounter_datetime: When it happened; set at creation
        voided: Hidden from normal retrieval
        void_reason: Why it was voided
        date_voided: When it was voided

    Example:
        encounter = Encounter(
            patient=patient,
            location=clinic,
            encounter_type=adult_initial,
            encounter_datetime=datetime(2020, 1, 1, 9, 30),
        )
        db.add(encounter)
    """

    __tablename__ = "encounters"

    # ========================================
    # Primary Key
    # ========================================

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Auto-incrementing primary key"
    )

    # ========================================
    # References
    # ========================================

    patient_id: Mapped[int] = mapped_column(
        ForeignKey("patients.id"),
        nullable=False,
        index=True,
        comment="Patient seen in this encounter"
    )

    location_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("locations.id"),
        nullable=True,
        index=True,
        comment="Where the encounter took place"
    )

    form_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("forms.id"),
        nullable=True,
        comment="Form the encounter was entered via"
    )

    encounter_type_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("encounter_types.id"),
        nullable=True,
        comment="Encounter classification"
    )

    patient: Mapped[Patient] = relationship()
    location: Mapped[Optional[Location]] = relationship()
    form: Mapped[Optional[Form]] = relationship()
    encounter_type: Mapped[Optional[EncounterType]] = relationship()

    # ========================================
    # Encounter Details
    # ========================================

    encounter_datetime: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        index=True,
        comment="When the encounter happened (sort key)"
    )

    # ========================================
    # Voiding
    # ========================================

    voided: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Hidden from normal retrieval"
    )

    void_reason: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Why the encounter was voided"
    )

    date_voided: Mapped[Optional[datetime]] = mapped_column(
        DateTime,
        nullable=True,
        comment="When the encounter was voided"
    )

    __table_args__ = (
        Index("ix_encounters_patient_datetime", "patient_id", "encounter_datetime"),
        {"comment": "Clinical encounters"}
    )

    def __init__(self, **kwargs):
        kwargs.setdefault("voided", False)
        super().__init__(**kwargs)

    # ========================================
    # Business Logic Methods
    # ========================================

    def void(self, reason: str) -> None:
        """
        Hide this encounter from normal retrieval.

        Note: Remember to commit the transaction!
        """
        self.voided = True
        self.void_reason = reason
        self.date_voided = datetime.now(UTC).replace(tzinfo=None)

    def unvoid(self) -> None:
        """Restore a voided encounter."""
        self.voided = False
        self.void_reason = None
        self.date_voided = None

    def __repr__(self) -> str:
        return (
            f"<Encounter(id={self.id}, patient_id={self.patient_id}, "
            f"encounter_datetime={self.encounter_datetime}, voided={self.voided})>"
        )
