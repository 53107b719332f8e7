"""Named query registry.

Named queries are registered once, at configuration time, and executed by
repositories by name. A query is either an ORM ``Select`` or a ``TextClause``;
parameters are declared with ``bindparam("name")`` or ``:name`` respectively.

Entity classes may declare their own queries::

    class UserModel(Base):
        __tablename__ = "users"
        ...

        @classmethod
        def __named_queries__(cls):
            return {
                "User.findByEmail": select(cls).where(cls.email == bindparam("email")),
            }

    registry.register_entity(UserModel)
"""
from dataclasses import dataclass
from threading import Lock
from typing import Any, Dict, FrozenSet, Iterator, List, Optional, Type, Union

from sqlalchemy import select
from sqlalchemy.sql.expression import Select, TextClause
from sqlalchemy.sql import visitors
from sqlalchemy.sql.elements import BindParameter

from repokit.infrastructure.exceptions import (
    DuplicateNamedQueryError,
    NamedQueryError,
    UnknownNamedQueryError,
    UnknownParameterError,
)
from repokit.infrastructure.logging import get_logger

logger = get_logger(__name__)

QueryStatement = Union[Select, TextClause]


def _bind_parameter_names(statement: QueryStatement) -> FrozenSet[str]:
    """Collect explicitly named bind parameters; literal values are skipped."""
    names = set()
    for element in visitors.iterate(statement):
        if isinstance(element, BindParameter) and not element.unique:
            names.add(element.key)
    return frozenset(names)


@dataclass(frozen=True)
class NamedQuery:
    """A query registered under a name."""
    name: str
    statement: QueryStatement
    entity_type: Optional[Type[Any]] = None

    @property
    def parameters(self) -> FrozenSet[str]:
        return _bind_parameter_names(self.statement)

    def statement_for(self, entity_type: Optional[Type[Any]] = None) -> Select:
        """Return an executable ORM statement mapping rows to entities."""
        if isinstance(self.statement, TextClause):
            target = self.entity_type or entity_type
            if target is None:
                raise NamedQueryError(
                    f"Textual named query '{self.name}' needs an entity type"
                )
            return select(target).from_statement(self.statement)
        return self.statement

    def bind(self, parameter: str, value: Any) -> Dict[str, Any]:
        """Build the parameter mapping for a single restriction."""
        if parameter not in self.parameters:
            raise UnknownParameterError(self.name, parameter)
        return {parameter: value}


class NamedQueryRegistry:
    """Registry of named queries shared by the repositories of one persistence unit."""

    def __init__(self):
        self._queries: Dict[str, NamedQuery] = {}
        self._lock = Lock()

    def register(
        self,
        name: str,
        statement: QueryStatement,
        entity_type: Optional[Type[Any]] = None
    ) -> NamedQuery:
        if not name:
            raise NamedQueryError("Named query name must not be empty")
        if not isinstance(statement, (Select, TextClause)):
            raise NamedQueryError(
                f"Named query '{name}' must be a Select or TextClause, "
                f"got {type(statement).__name__}"
            )

        query = NamedQuery(name=name, statement=statement, entity_type=entity_type)
        with self._lock:
            if name in self._queries:
                raise DuplicateNamedQueryError(name)
            self._queries[name] = query

        logger.debug(
            "named_query_registered",
            named_query=name,
            parameters=sorted(query.parameters),
        )
        return query

    def register_entity(self, entity_type: Type[Any]) -> List[NamedQuery]:
        """Register the queries an entity class declares in ``__named_queries__``."""
        declare = getattr(entity_type, "__named_queries__", None)
        if declare is None:
            return []

        return [
            self.register(name, statement, entity_type)
            for name, statement in declare().items()
        ]

    def get(self, name: str) -> NamedQuery:
        try:
            return self._queries[name]
        except KeyError:
            raise UnknownNamedQueryError(name) from None

    def names(self) -> List[str]:
        return sorted(self._queries)

    def __contains__(self, name: object) -> bool:
        return name in self._queries

    def __len__(self) -> int:
        return len(self._queries)

    def __iter__(self) -> Iterator[NamedQuery]:
        return iter(list(self._queries.values()))
