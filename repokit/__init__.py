"""Generic repositories with transaction-wrapped CRUD over SQLAlchemy."""
from repokit.core.errors import (
    RepoKitError,
    ConfigurationError,
    ValidationError,
    NotFoundError,
    QueryError,
    NonUniqueResultError,
    TransactionError,
    ConflictError,
    ConnectivityError,
)
from repokit.core.result import ErrorCode, Result
from repokit.infrastructure.database import (
    DatabaseConnection,
    NamedQuery,
    NamedQueryRegistry,
    UnitOfWork,
    UnitOfWorkState,
)
from repokit.infrastructure.database.repositories import BaseRepository, Repositoriable

__version__ = "0.1.0"

__all__ = [
    'BaseRepository',
    'Repositoriable',
    'DatabaseConnection',
    'NamedQuery',
    'NamedQueryRegistry',
    'UnitOfWork',
    'UnitOfWorkState',
    'Result',
    'ErrorCode',
    'RepoKitError',
    'ConfigurationError',
    'ValidationError',
    'NotFoundError',
    'QueryError',
    'NonUniqueResultError',
    'TransactionError',
    'ConflictError',
    'ConnectivityError',
]
