"""
Base Model
==========

Provides common functionality for all database models.
"""

import uuid
from datetime import date, datetime
from typing import Any, Dict

from sqlalchemy import DateTime, String
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


def new_guid() -> str:
    """Generate a fresh external identifier."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )


class GuidMixin:
    """Mixin that adds a unique external identifier."""

    guid: Mapped[str] = mapped_column(
        String(38),
        unique=True,
        nullable=False,
        index=True,
        default=new_guid,
        comment="Globally unique external identifier"
    )


class SerializationMixin:
    """Mixin that adds to_dict() serialization method."""

    def to_dict(self, exclude: set = None) -> Dict[str, Any]:
        """Convert model instance to dictionary."""
        exclude = exclude or set()
        result = {}
        for column in self.__table__.columns:
            if column.name in exclude:
                continue
            value = getattr(self, column.name)
            if isinstance(value, (datetime, date)):
                result[column.name] = value.isoformat()
            else:
                result[column.name] = value
        return result


class BaseModel(TimestampMixin, GuidMixin, SerializationMixin):
    """Base model combining timestamp, guid and serialization mixins."""
    pass


def create_all_tables(engine: Engine) -> None:
    """Create all tables known to the model metadata."""
    Base.metadata.create_all(bind=engine)


def drop_all_tables(engine: Engine) -> None:
    """Drop all tables known to the model metadata."""
    Base.metadata.drop_all(bind=engine)
