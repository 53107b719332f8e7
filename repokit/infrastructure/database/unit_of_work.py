"""Unit of Work handle over a single SQLAlchemy session."""
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

from sqlalchemy import inspect
from sqlalchemy.sql.expression import Executable
from sqlalchemy.orm import Session, SessionTransaction

from repokit.infrastructure.exceptions import UnitOfWorkClosedError
from repokit.infrastructure.logging import get_logger

logger = get_logger(__name__)

E = TypeVar('E')


class UnitOfWorkState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class UnitOfWork:
    """One open session with the database.

    A unit of work is created open and closed exactly once; once closed it is
    never reused, every primitive raises ``UnitOfWorkClosedError``.
    """

    def __init__(self, session: Session, unit_name: str = "default"):
        self._session = session
        self.unit_name = unit_name
        self._state = UnitOfWorkState.OPEN
        self._transaction: Optional[SessionTransaction] = None

    @property
    def state(self) -> UnitOfWorkState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is UnitOfWorkState.OPEN

    @property
    def session(self) -> Session:
        """Underlying session, for entity-specific queries."""
        self._ensure_open()
        return self._session

    def _ensure_open(self) -> None:
        if self._state is UnitOfWorkState.CLOSED:
            raise UnitOfWorkClosedError(
                f"Unit of work for '{self.unit_name}' is closed"
            )

    # Transaction control

    @property
    def transaction(self) -> Optional[SessionTransaction]:
        """Transaction started with ``begin()``, if any."""
        return self._transaction

    @property
    def is_active(self) -> bool:
        """True from ``begin()`` until the transaction is committed or rolled back.

        A transaction deactivated by a failed flush still counts as active,
        it must be rolled back.
        """
        return self._transaction is not None

    def begin(self) -> SessionTransaction:
        self._ensure_open()
        self._transaction = self._session.begin()
        return self._transaction

    def commit(self) -> None:
        self._ensure_open()
        if self._transaction is None:
            self._session.commit()
            return
        # A failed commit leaves the transaction active for rollback
        self._transaction.commit()
        self._transaction = None

    def rollback(self) -> None:
        self._ensure_open()
        if self._transaction is None:
            self._session.rollback()
            return
        try:
            self._transaction.rollback()
        finally:
            self._transaction = None

    # Persistence primitives

    def insert(self, entity: E) -> E:
        self._ensure_open()
        self._session.add(entity)
        self._session.flush()
        self._load_generated(entity)
        return entity

    def update(self, entity: E) -> E:
        self._ensure_open()
        merged = self._session.merge(entity)
        self._session.flush()
        self._load_generated(merged)
        return merged

    def _load_generated(self, entity: Any) -> None:
        """Load values the database generated during the flush.

        Columns with server defaults or SQL ``onupdate`` expressions are
        expired by the flush; they must be loaded while the session is open
        or the returned instance cannot read them once detached.
        """
        expired = inspect(entity).expired_attributes
        if expired:
            self._session.refresh(entity, attribute_names=list(expired))

    def delete(self, entity: Any) -> None:
        self._ensure_open()
        self._session.delete(entity)
        self._session.flush()

    def find(self, entity_type: Type[E], key: Any) -> Optional[E]:
        self._ensure_open()
        return self._session.get(entity_type, key)

    def query(
        self,
        statement: Executable,
        params: Optional[Dict[str, Any]] = None
    ) -> List[Any]:
        self._ensure_open()
        return list(self._session.scalars(statement, params or {}).all())

    def query_one(
        self,
        statement: Executable,
        params: Optional[Dict[str, Any]] = None
    ) -> Optional[Any]:
        """Single row or None; raises ``MultipleResultsFound`` on several rows."""
        self._ensure_open()
        return self._session.scalars(statement, params or {}).one_or_none()

    # Lifecycle

    def close(self) -> None:
        """Close the session. Closing twice is a no-op."""
        if self._state is UnitOfWorkState.CLOSED:
            return
        try:
            self._session.close()
        finally:
            self._transaction = None
            self._state = UnitOfWorkState.CLOSED
            logger.debug("unit_of_work_closed", unit=self.unit_name)

    def __enter__(self) -> "UnitOfWork":
        self._ensure_open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None and self.is_open and self.is_active:
            self.rollback()
        self.close()

    def __repr__(self) -> str:
        return f"<UnitOfWork unit={self.unit_name!r} state={self._state.value}>"
