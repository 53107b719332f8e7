"""Pytest configuration and fixtures"""

from typing import Generator

import pytest
import structlog

from repokit.core.config import reset_settings
from repokit.infrastructure.database import DatabaseConnection, NamedQueryRegistry
from repokit.infrastructure.database.models import Base
from repokit.infrastructure.database.repositories import BaseRepository

from tests.entities import (
    MembershipRepository,
    Note,
    Person,
    PersonRepository,
    Team,
)


@pytest.fixture(autouse=True)
def reset_logging_and_settings() -> Generator[None, None, None]:
    """Keep structlog and settings state from leaking between tests"""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    reset_settings()


@pytest.fixture
def registry() -> NamedQueryRegistry:
    """Registry holding the Person named queries"""
    registry = NamedQueryRegistry()
    registry.register_entity(Person)
    return registry


@pytest.fixture
def connection(registry: NamedQueryRegistry) -> Generator[DatabaseConnection, None, None]:
    """Connected in-memory database with the test schema"""
    connection = DatabaseConnection(
        "sqlite:///:memory:",
        unit_name="test",
        named_queries=registry
    )
    connection.connect()
    connection.create_schema(Base.metadata)

    yield connection

    connection.disconnect()


@pytest.fixture
def people(connection: DatabaseConnection) -> PersonRepository:
    return PersonRepository(connection)


@pytest.fixture
def memberships(connection: DatabaseConnection) -> MembershipRepository:
    return MembershipRepository(connection)


@pytest.fixture
def teams(connection: DatabaseConnection) -> BaseRepository:
    return BaseRepository(connection, Team)


@pytest.fixture
def notes(connection: DatabaseConnection) -> BaseRepository:
    return BaseRepository(connection, Note)


@pytest.fixture
def seeded_people(people: PersonRepository) -> PersonRepository:
    """Repository with three stored people"""
    for person in (
        Person(id=1, name="ada", email="ada@example.com", city="london"),
        Person(id=2, name="grace", email="grace@example.com", city="arlington"),
        Person(id=3, name="alan", email="alan@example.com", city="london"),
    ):
        assert people.save(person).success
    return people
