"""
Record stores.

A RecordStore is everything the encounter repository needs from persistence:
load by primary key, save, delete, run a Criteria, and run one raw scalar
query. SqlAlchemyRecordStore implements it on top of a Session that the
caller owns; the store never commits or closes that session.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import (
    DisconnectionError,
    InterfaceError,
    MultipleResultsFound,
    OperationalError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.orm import Session

from emr.core.constants import Operator
from emr.core.exceptions import (
    AmbiguousResultError,
    InvalidCriteriaError,
    StoreUnavailableError,
)
from emr.repositories.criteria import Criteria, Predicate

logger = logging.getLogger(__name__)

# Driver and pool errors that mean "the store could not run this", as opposed
# to integrity violations, which propagate unchanged. Pool checkout timeouts
# and pool-level disconnects are not DBAPIErrors, so they are listed too.
_UNAVAILABLE_ERRORS = (
    OperationalError,
    InterfaceError,
    PoolTimeoutError,
    DisconnectionError,
)


class RecordStore(ABC):
    """Persistence capability consumed by repositories."""

    @abstractmethod
    def get(self, entity: type, record_id: Any) -> Optional[Any]:
        raise NotImplementedError

    @abstractmethod
    def save(self, record: Any) -> Any:
        raise NotImplementedError

    @abstractmethod
    def delete(self, record: Any) -> None:
        raise NotImplementedError

    @abstractmethod
    def query(self, criteria: Criteria) -> List[Any]:
        """All records matching every predicate, in criteria order."""
        raise NotImplementedError

    @abstractmethod
    def unique(self, criteria: Criteria) -> Optional[Any]:
        """
        The single record matching criteria, or None.

        Raises:
            AmbiguousResultError: If more than one record matches
        """
        raise NotImplementedError

    @abstractmethod
    def scalar(self, statement: Any, params: Optional[Dict[str, Any]] = None) -> Any:
        """Run a raw query returning one value."""
        raise NotImplementedError


class SqlAlchemyRecordStore(RecordStore):
    """
    RecordStore backed by a SQLAlchemy Session.

    Example:
        with get_db_context() as db:
            store = SqlAlchemyRecordStore(db)
            encounters = store.query(encounter_search_criteria(filters))
    """

    def __init__(self, session: Session):
        self.session = session

    # ========================================
    # CRUD
    # ========================================

    def get(self, entity: type, record_id: Any) -> Optional[Any]:
        if record_id is None:
            return None
        try:
            return self.session.get(entity, record_id)
        except _UNAVAILABLE_ERRORS as exc:
            raise self._unavailable("get", exc, entity=entity.__name__) from exc

    def save(self, record: Any) -> Any:
        try:
            self.session.add(record)
            self.session.flush()
        except _UNAVAILABLE_ERRORS as exc:
            raise self._unavailable("save", exc, entity=type(record).__name__) from exc
        return record

    def delete(self, record: Any) -> None:
        try:
            self.session.delete(record)
            self.session.flush()
        except _UNAVAILABLE_ERRORS as exc:
            raise self._unavailable("delete", exc, entity=type(record).__name__) from exc

    # ========================================
    # Queries
    # ========================================

    def query(self, criteria: Criteria) -> List[Any]:
        stmt = self._compile(criteria)
        logger.debug("Querying %s where %s", criteria.entity.__name__, criteria.fields())
        try:
            return list(self.session.scalars(stmt))
        except _UNAVAILABLE_ERRORS as exc:
            raise self._unavailable("query", exc, entity=criteria.entity.__name__) from exc

    def unique(self, criteria: Criteria) -> Optional[Any]:
        stmt = self._compile(criteria)
        try:
            return self.session.scalars(stmt).one_or_none()
        except MultipleResultsFound as exc:
            raise AmbiguousResultError(
                f"More than one {criteria.entity.__name__} matched a unique lookup",
                details={"fields": criteria.fields()},
            ) from exc
        except _UNAVAILABLE_ERRORS as exc:
            raise self._unavailable("unique", exc, entity=criteria.entity.__name__) from exc

    def scalar(self, statement: Any, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            return self.session.scalar(statement, params or {})
        except _UNAVAILABLE_ERRORS as exc:
            raise self._unavailable("scalar", exc) from exc

    # ========================================
    # Helpers
    # ========================================

    def _compile(self, criteria: Criteria):
        """Translate a Criteria into a SELECT statement."""
        stmt = select(criteria.entity)
        for predicate in criteria.predicates:
            stmt = stmt.where(self._clause(criteria.entity, predicate))
        for order in criteria.order_by:
            column = self._column(criteria.entity, order.field)
            stmt = stmt.order_by(column.desc() if order.descending else column.asc())
        return stmt

    def _clause(self, entity: type, predicate: Predicate):
        column = self._column(entity, predicate.field)
        op = predicate.operator

        if op == Operator.EQ:
            return column == predicate.value
        if op == Operator.GE:
            return column >= predicate.value
        if op == Operator.LE:
            return column <= predicate.value
        if op == Operator.IN:
            return column.in_(list(predicate.value))
        if op == Operator.ISTARTSWITH:
            return column.istartswith(predicate.value, autoescape=True)

        raise InvalidCriteriaError(
            f"Unsupported operator: {op!r}",
            details={"field": predicate.field},
        )

    @staticmethod
    def _column(entity: type, field_name: str):
        if field_name not in entity.__table__.columns:
            raise InvalidCriteriaError(
                f"{entity.__name__} has no field '{field_name}'",
                details={"field": field_name},
            )
        return getattr(entity, field_name)

    @staticmethod
    def _unavailable(action: str, exc: Exception, **details) -> StoreUnavailableError:
        logger.error("Record store %s failed: %s", action, exc)
        return StoreUnavailableError(
            f"Record store could not complete {action}",
            details={"action": action, **details},
        )
