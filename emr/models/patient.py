"""
Patient, Location and Form models.

These are the entities an Encounter points at. The encounter search treats
them as opaque keys and only ever looks at their primary key.
"""

from datetime import date
from typing import Optional

from sqlalchemy import Date, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from emr.models.base import Base, BaseModel


class Patient(BaseModel, Base):
    """
    A person receiving care.

    Attributes:
        id: Auto-incrementing primary key
        guid: External identifier (from BaseModel)
        given_name: First name
        family_name: Last name
        birthdate: Date of birth, if known
    """

    __tablename__ = "patients"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Auto-incrementing primary key"
    )

    given_name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Given (first) name"
    )

    family_name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
        comment="Family (last) name"
    )

    birthdate: Mapped[Optional[date]] = mapped_column(
        Date,
        nullable=True,
        comment="Date of birth"
    )

    @property
    def full_name(self) -> str:
        return f"{self.given_name} {self.family_name}"

    def __repr__(self) -> str:
        return f"<Patient(id={self.id}, name='{self.full_name}')>"


class Location(BaseModel, Base):
    """A place where encounters happen (clinic, ward, village post)."""

    __tablename__ = "locations"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Auto-incrementing primary key"
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Display name"
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Free-text description"
    )

    def __repr__(self) -> str:
        return f"<Location(id={self.id}, name='{self.name}')>"


class Form(BaseModel, Base):
    """A data entry form that encounters can be entered through."""

    __tablename__ = "forms"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Auto-incrementing primary key"
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Form name"
    )

    version: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="1.0",
        comment="Form version label"
    )

    def __repr__(self) -> str:
        return f"<Form(id={self.id}, name='{self.name}', version='{self.version}')>"
