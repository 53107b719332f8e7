"""Core types, errors, results and configuration."""
from .errors import (
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
from .result import ErrorCode, Result

__all__ = [
    'RepoKitError',
    'ConfigurationError',
    'ValidationError',
    'NotFoundError',
    'QueryError',
    'NonUniqueResultError',
    'TransactionError',
    'ConflictError',
    'ConnectivityError',
    'ErrorCode',
    'Result',
]
