"""Result types returned by repository operations.

Every repository operation returns a ``Result`` instead of raising, so that
callers can tell a truly absent entity apart from a failed operation and
inspect why it failed through the ``error_code``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Generic, List, Optional, TypeVar

if TYPE_CHECKING:
    from .errors import RepoKitError

T = TypeVar('T')


class ErrorCode(str, Enum):
    """Standard error codes for repository operations."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    NON_UNIQUE_RESULT = "NON_UNIQUE_RESULT"
    QUERY_ERROR = "QUERY_ERROR"
    CONFLICT = "CONFLICT"
    TRANSACTION_ERROR = "TRANSACTION_ERROR"
    CONNECTIVITY_ERROR = "CONNECTIVITY_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass
class Result(Generic[T]):
    """Result wrapper for repository operations.

    A failed read still carries the sentinel value of the operation
    (``None`` for single lookups, an empty list for collections) so callers
    that only look at ``value`` keep working.
    """
    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    errors: List[str] = field(default_factory=list)
    exception: Optional["RepoKitError"] = field(default=None, repr=False, compare=False)

    @classmethod
    def ok(cls, value: T = None) -> "Result[T]":
        """Create a successful result.

        Args:
            value: The successful result value

        Returns:
            Successful Result instance
        """
        return cls(success=True, value=value)

    @classmethod
    def fail(
        cls,
        error: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        errors: Optional[List[str]] = None,
        value: Optional[T] = None,
    ) -> "Result[T]":
        """Create a failed result.

        Args:
            error: Error message
            error_code: Error code for categorization
            errors: Optional list of detailed errors
            value: Sentinel value handed back with the failure

        Returns:
            Failed Result instance
        """
        return cls(
            success=False,
            value=value,
            error=error,
            error_code=error_code,
            errors=errors or [],
        )

    @classmethod
    def from_error(cls, exc: "RepoKitError", value: Optional[T] = None) -> "Result[T]":
        """Create a failed result carrying a typed repository error."""
        result = cls.fail(
            exc.message,
            exc.error_code,
            list(exc.details.get("errors", [])),
            value=value,
        )
        result.exception = exc
        return result

    @property
    def failed(self) -> bool:
        return not self.success

    @property
    def is_not_found(self) -> bool:
        """True when the failure means the entity does not exist."""
        return self.error_code is ErrorCode.NOT_FOUND

    def unwrap(self) -> Optional[T]:
        """Return the value, raising the typed error if the operation failed."""
        if self.success:
            return self.value
        if self.exception is not None:
            raise self.exception
        # Imported here, errors.py depends on this module
        from .errors import RepoKitError
        raise RepoKitError(self.error or "Operation failed")

    def value_or(self, default: Any) -> Any:
        """Return the value on success, ``default`` otherwise."""
        return self.value if self.success else default

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"success": self.success}
        if self.success:
            data["value"] = self.value
        else:
            data["error"] = self.error
            data["error_code"] = self.error_code.value if self.error_code else None
            data["errors"] = list(self.errors)
        return data

    def __bool__(self) -> bool:
        return self.success
