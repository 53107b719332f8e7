"""Translation of engine and infrastructure exceptions into repository errors."""
from typing import Optional

from sqlalchemy import exc as sa_exc

from repokit.core.errors import (
    ConflictError,
    ConnectivityError,
    NonUniqueResultError,
    QueryError,
    RepoKitError,
    TransactionError,
    ValidationError,
)
from repokit.infrastructure.exceptions import (
    DatabaseConnectionError,
    NamedQueryError,
)

CONNECTIVITY_ERRORS = (
    DatabaseConnectionError,
    sa_exc.OperationalError,
    sa_exc.InterfaceError,
    sa_exc.DisconnectionError,
    sa_exc.TimeoutError,
)


def _reason(exc: BaseException) -> str:
    if isinstance(exc, sa_exc.DBAPIError) and exc.orig is not None:
        return str(exc.orig)
    return str(exc) or type(exc).__name__


def translate_error(
    exc: BaseException,
    operation: str,
    mutating: bool = False,
    query_name: Optional[str] = None
) -> RepoKitError:
    """Map ``exc`` raised during ``operation`` to the repository error taxonomy."""
    if isinstance(exc, RepoKitError):
        return exc

    if isinstance(exc, NamedQueryError):
        return ValidationError([str(exc)])

    if isinstance(exc, CONNECTIVITY_ERRORS) or (
        isinstance(exc, sa_exc.DBAPIError) and exc.connection_invalidated
    ):
        error = ConnectivityError(
            f"Database unavailable during '{operation}': {_reason(exc)}",
            {"operation": operation}
        )
    elif isinstance(exc, sa_exc.MultipleResultsFound):
        error = NonUniqueResultError(query_name or operation)
    elif isinstance(exc, sa_exc.IntegrityError):
        error = ConflictError(operation, _reason(exc))
    elif mutating:
        error = TransactionError(operation, _reason(exc))
    else:
        details = {"operation": operation}
        if query_name:
            details["query"] = query_name
        error = QueryError(f"Query for '{operation}' failed: {_reason(exc)}", details)

    error.__cause__ = exc
    return error
