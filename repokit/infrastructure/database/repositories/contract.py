"""Capability contract every repository implements."""
from abc import ABC, abstractmethod
from typing import Any, Generic, List, Optional

from repokit.core.result import Result
from repokit.core.types import EntityT, KeyT


class Repositoriable(ABC, Generic[KeyT, EntityT]):
    """CRUD and named-query operations over entities of one type.

    None of the operations raise for data or database failures; they return
    a ``Result`` whose ``error_code`` tells what went wrong.
    """

    @abstractmethod
    def save(self, entity: EntityT) -> Result[EntityT]:
        """Insert a new entity."""
        pass

    @abstractmethod
    def merge(self, entity: EntityT) -> Result[EntityT]:
        """Update an existing entity, inserting it if its key is not stored."""
        pass

    @abstractmethod
    def remove(self, entity: EntityT) -> Result[EntityT]:
        """Delete an entity."""
        pass

    @abstractmethod
    def get_by_id(self, key: KeyT) -> Result[Optional[EntityT]]:
        """Entity with the given key, or a successful result holding None."""
        pass

    @abstractmethod
    def get_all(self) -> Result[List[EntityT]]:
        """Every stored entity of the repository's type."""
        pass

    @abstractmethod
    def get_all_named_query(self, named_query: str) -> Result[List[EntityT]]:
        """Rows of a registered named query without parameters."""
        pass

    @abstractmethod
    def get_unique_by_restriction(
        self, named_query: str, parameter: str, value: Any
    ) -> Result[Optional[EntityT]]:
        """Single row of a named query bound to one parameter.

        Zero rows is a successful None; more than one row is a
        ``NON_UNIQUE_RESULT`` failure.
        """
        pass

    @abstractmethod
    def get_by_restriction(
        self, named_query: str, parameter: str, value: Any
    ) -> Result[List[EntityT]]:
        """All rows of a named query bound to one parameter."""
        pass
