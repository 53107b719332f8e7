"""Base exception classes for repokit"""

from typing import Any, Dict, List, Optional

from .result import ErrorCode


class RepoKitError(Exception):
    """Base exception for all repokit errors"""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "error_code": self.error_code.value,
            "details": self.details
        }


class ConfigurationError(RepoKitError):
    """Raised when a repository is wired up incorrectly"""

    error_code = ErrorCode.CONFIGURATION_ERROR


class ValidationError(RepoKitError):
    """Raised when the arguments of an operation are invalid"""

    error_code = ErrorCode.VALIDATION_ERROR

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(
            f"Validation failed: {', '.join(errors)}",
            {"errors": errors}
        )


class NotFoundError(RepoKitError):
    """Raised when the targeted entity is not stored"""

    error_code = ErrorCode.NOT_FOUND

    def __init__(self, resource_type: str, resource_id: Any):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            {
                "resource_type": resource_type,
                "resource_id": str(resource_id)
            }
        )


class QueryError(RepoKitError):
    """Raised when a read query fails"""

    error_code = ErrorCode.QUERY_ERROR


class NonUniqueResultError(QueryError):
    """Raised when a single-result query matches more than one row"""

    error_code = ErrorCode.NON_UNIQUE_RESULT

    def __init__(self, query_name: str):
        self.query_name = query_name
        super().__init__(
            f"Query '{query_name}' returned more than one result",
            {"query": query_name}
        )


class TransactionError(RepoKitError):
    """Raised when a mutating operation fails and is rolled back"""

    error_code = ErrorCode.TRANSACTION_ERROR

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(
            f"Transaction for '{operation}' rolled back: {reason}",
            {
                "operation": operation,
                "reason": reason
            }
        )


class ConflictError(TransactionError):
    """Raised when a mutation violates an integrity constraint"""

    error_code = ErrorCode.CONFLICT


class ConnectivityError(RepoKitError):
    """Raised when the database cannot be reached"""

    error_code = ErrorCode.CONNECTIVITY_ERROR
