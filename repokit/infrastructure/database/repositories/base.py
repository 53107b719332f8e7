"""Generic repository with transaction-wrapped CRUD and named-query operations.

Usage::

    class UserRepository(BaseRepository[int, UserModel]):
        entity_type = UserModel

    users = UserRepository(connection)
    users.save(UserModel(name="ada"))
    found = users.get_by_id(1).value

Each public operation opens its own unit of work and closes it before
returning, so one repository instance can be shared between threads.
"""
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, Type

from sqlalchemy import inspect as sa_inspect, select
from sqlalchemy.orm import Mapper

from repokit.core.errors import ConfigurationError, NotFoundError, RepoKitError, ValidationError
from repokit.core.result import ErrorCode, Result
from repokit.core.types import EntityT, KeyT
from repokit.infrastructure.database.connection import DatabaseConnection
from repokit.infrastructure.database.error_translation import translate_error
from repokit.infrastructure.database.named_queries import NamedQuery
from repokit.infrastructure.database.repositories.contract import Repositoriable
from repokit.infrastructure.database.unit_of_work import UnitOfWork
from repokit.infrastructure.logging import get_logger

logger = get_logger(__name__)

# Failures caused by the caller rather than the database
CALLER_ERROR_CODES = (ErrorCode.NOT_FOUND, ErrorCode.VALIDATION_ERROR)


class BaseRepository(Repositoriable[KeyT, EntityT]):
    """Repository implementation for one mapped entity type."""

    entity_type: Optional[Type[EntityT]] = None

    def __init__(
        self,
        connection: DatabaseConnection,
        entity_type: Optional[Type[EntityT]] = None
    ):
        if not isinstance(connection, DatabaseConnection):
            raise ConfigurationError(
                f"{type(self).__name__} needs a DatabaseConnection, "
                f"got {type(connection).__name__}"
            )

        resolved = entity_type if entity_type is not None else type(self).entity_type
        if resolved is None:
            raise ConfigurationError(
                f"{type(self).__name__} does not declare an entity type",
                {"repository": type(self).__name__}
            )

        mapper = sa_inspect(resolved, raiseerr=False) if isinstance(resolved, type) else None
        if not isinstance(mapper, Mapper):
            raise ConfigurationError(
                f"{resolved!r} is not a mapped entity class",
                {"repository": type(self).__name__}
            )

        self.connection = connection
        self.entity_type = resolved
        self._mapper = mapper
        self.logger = logger.bind(
            repository=type(self).__name__,
            entity=resolved.__name__
        )

    def get_entity_type(self) -> Type[EntityT]:
        return self.entity_type

    # Unit of work handling

    def get_handle(self) -> UnitOfWork:
        """Open a new unit of work; closed ones are never handed out."""
        return self.connection.create_unit_of_work()

    def close_handle(self, handle: Optional[UnitOfWork]) -> None:
        """Release a unit of work. No-op for None or an already closed one."""
        if handle is not None:
            handle.close()

    @contextmanager
    def unit_of_work(self) -> Iterator[UnitOfWork]:
        """Scoped unit of work for entity-specific queries in subclasses."""
        handle = self.get_handle()
        try:
            yield handle
        finally:
            self.close_handle(handle)

    # Mutations

    def save(self, entity: EntityT) -> Result[EntityT]:
        return self._mutate("save", entity, lambda handle: handle.insert(entity))

    def merge(self, entity: EntityT) -> Result[EntityT]:
        return self._mutate("merge", entity, lambda handle: handle.update(entity))

    def remove(self, entity: EntityT) -> Result[EntityT]:
        def delete(handle: UnitOfWork) -> EntityT:
            key = self._identity_of(entity)
            stored = handle.find(self.entity_type, key)
            if stored is None:
                raise NotFoundError(self.entity_type.__name__, key)
            handle.delete(stored)
            return entity

        return self._mutate("remove", entity, delete)

    # Reads

    def get_by_id(self, key: KeyT) -> Result[Optional[EntityT]]:
        return self._read(
            "get_by_id",
            lambda handle: handle.find(self.entity_type, key),
            None
        )

    def get_all(self) -> Result[List[EntityT]]:
        return self._read(
            "get_all",
            lambda handle: handle.query(select(self.entity_type)),
            []
        )

    def get_all_named_query(self, named_query: str) -> Result[List[EntityT]]:
        def run(handle: UnitOfWork) -> List[EntityT]:
            query = self._named_query(named_query)
            return handle.query(query.statement_for(self.entity_type))

        return self._read("get_all_named_query", run, [], named_query)

    def get_unique_by_restriction(
        self, named_query: str, parameter: str, value: Any
    ) -> Result[Optional[EntityT]]:
        def run(handle: UnitOfWork) -> Optional[EntityT]:
            query = self._named_query(named_query)
            return handle.query_one(
                query.statement_for(self.entity_type),
                query.bind(parameter, value)
            )

        return self._read("get_unique_by_restriction", run, None, named_query)

    def get_by_restriction(
        self, named_query: str, parameter: str, value: Any
    ) -> Result[List[EntityT]]:
        def run(handle: UnitOfWork) -> List[EntityT]:
            query = self._named_query(named_query)
            return handle.query(
                query.statement_for(self.entity_type),
                query.bind(parameter, value)
            )

        return self._read("get_by_restriction", run, [], named_query)

    # Internals

    def _named_query(self, name: str) -> NamedQuery:
        query = self.connection.named_queries.get(name)
        if query.entity_type is not None and query.entity_type is not self.entity_type:
            raise ValidationError([
                f"named query '{name}' returns {query.entity_type.__name__}, "
                f"not {self.entity_type.__name__}"
            ])
        return query

    def _identity_of(self, entity: EntityT) -> Any:
        values = self._mapper.primary_key_from_instance(entity)
        if any(value is None for value in values):
            raise NotFoundError(self.entity_type.__name__, None)
        return values[0] if len(values) == 1 else tuple(values)

    def _check_entity(self, entity: Any) -> None:
        if not isinstance(entity, self.entity_type):
            raise ValidationError([
                f"expected {self.entity_type.__name__}, got {type(entity).__name__}"
            ])

    def _mutate(
        self,
        operation: str,
        entity: EntityT,
        primitive: Callable[[UnitOfWork], EntityT]
    ) -> Result[EntityT]:
        handle: Optional[UnitOfWork] = None
        try:
            self._check_entity(entity)
            handle = self.get_handle()
            handle.begin()
            persisted = primitive(handle)
            handle.commit()
        except Exception as exc:
            if handle is not None and handle.is_open and handle.is_active:
                self._rollback(handle, operation)
            error = translate_error(exc, operation, mutating=True)
            self._log_failure(operation, error)
            return Result.from_error(error)
        finally:
            self.close_handle(handle)

        self.logger.debug("repository_operation_completed", operation=operation)
        return Result.ok(persisted)

    def _read(
        self,
        operation: str,
        query: Callable[[UnitOfWork], Any],
        sentinel: Any,
        named_query: Optional[str] = None
    ) -> Result[Any]:
        handle: Optional[UnitOfWork] = None
        try:
            handle = self.get_handle()
            value = query(handle)
        except Exception as exc:
            error = translate_error(exc, operation, query_name=named_query)
            self._log_failure(operation, error, named_query)
            return Result.from_error(error, value=sentinel)
        finally:
            self.close_handle(handle)

        self.logger.debug(
            "repository_operation_completed",
            operation=operation,
            named_query=named_query
        )
        return Result.ok(value)

    def _rollback(self, handle: UnitOfWork, operation: str) -> None:
        try:
            handle.rollback()
        except Exception:
            # The original failure is reported by the caller; closing the
            # session discards whatever the rollback left behind.
            self.logger.warning(
                "repository_rollback_failed",
                operation=operation,
                exc_info=True
            )

    def _log_failure(
        self,
        operation: str,
        error: RepoKitError,
        named_query: Optional[str] = None
    ) -> None:
        if error.error_code in CALLER_ERROR_CODES:
            self.logger.warning(
                "repository_operation_failed",
                operation=operation,
                named_query=named_query,
                error_code=error.error_code.value,
                error=error.message
            )
            return

        self.logger.error(
            "repository_operation_failed",
            operation=operation,
            named_query=named_query,
            error_code=error.error_code.value,
            error=error.message,
            exc_info=error
        )
