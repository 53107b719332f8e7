"""Tests for error translation and result types"""

import pytest
from sqlalchemy import exc as sa_exc

from repokit.core.errors import (
    ConflictError,
    ConnectivityError,
    NonUniqueResultError,
    NotFoundError,
    QueryError,
    RepoKitError,
    TransactionError,
    ValidationError,
)
from repokit.core.result import ErrorCode, Result
from repokit.infrastructure.database.error_translation import translate_error
from repokit.infrastructure.exceptions import (
    DatabaseConnectionError,
    UnknownNamedQueryError,
    UnknownParameterError,
)


class TestTranslateError:
    """Test engine exceptions map to the repository taxonomy"""

    def test_repository_errors_pass_through(self):
        """Test typed errors are returned unchanged"""
        error = NotFoundError("Person", 1)
        assert translate_error(error, "remove") is error

    @pytest.mark.parametrize("exc", [
        UnknownNamedQueryError("Person.nope"),
        UnknownParameterError("Person.findByName", "nickname"),
    ])
    def test_registry_errors_are_validation_errors(self, exc):
        """Test caller mistakes with named queries"""
        error = translate_error(exc, "get_by_restriction")

        assert isinstance(error, ValidationError)
        assert str(exc) in error.errors[0]

    @pytest.mark.parametrize("exc", [
        DatabaseConnectionError("Database not connected"),
        sa_exc.OperationalError("SELECT 1", {}, Exception("server closed the connection")),
        sa_exc.InterfaceError("SELECT 1", {}, Exception("connection already closed")),
        sa_exc.DisconnectionError("gone"),
        sa_exc.TimeoutError("QueuePool limit reached"),
    ])
    def test_connectivity_errors(self, exc):
        """Test unavailable databases"""
        error = translate_error(exc, "get_all")

        assert isinstance(error, ConnectivityError)
        assert error.error_code is ErrorCode.CONNECTIVITY_ERROR
        assert error.__cause__ is exc

    def test_invalidated_connection(self):
        """Test any driver error that invalidated the connection"""
        exc = sa_exc.DBAPIError("SELECT 1", {}, Exception("reset"), connection_invalidated=True)

        assert isinstance(translate_error(exc, "get_all"), ConnectivityError)

    def test_multiple_results(self):
        """Test non-unique results name the query"""
        error = translate_error(
            sa_exc.MultipleResultsFound("Multiple rows were found"),
            "get_unique_by_restriction",
            query_name="Person.findByCity"
        )

        assert isinstance(error, NonUniqueResultError)
        assert isinstance(error, QueryError)
        assert error.query_name == "Person.findByCity"

    def test_integrity_error(self):
        """Test constraint violations are conflicts"""
        exc = sa_exc.IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: people.id"))
        error = translate_error(exc, "save", mutating=True)

        assert isinstance(error, ConflictError)
        assert isinstance(error, TransactionError)
        assert error.reason == "UNIQUE constraint failed: people.id"

    def test_other_mutation_failure(self):
        """Test unexpected failures during mutations"""
        error = translate_error(RuntimeError("boom"), "merge", mutating=True)

        assert isinstance(error, TransactionError)
        assert error.operation == "merge"
        assert error.details == {"operation": "merge", "reason": "boom"}

    def test_other_read_failure(self):
        """Test unexpected failures during reads"""
        error = translate_error(
            sa_exc.InvalidRequestError("bad query"),
            "get_all_named_query",
            query_name="Person.findAll"
        )

        assert type(error) is QueryError
        assert error.details["query"] == "Person.findAll"


class TestResult:
    """Test the result wrapper"""

    def test_ok(self):
        """Test a successful result"""
        result = Result.ok(42)

        assert result
        assert result.success
        assert not result.failed
        assert result.unwrap() == 42
        assert result.value_or(0) == 42
        assert result.to_dict() == {"success": True, "value": 42}

    def test_ok_without_value(self):
        """Test a successful result holding nothing"""
        result = Result.ok()

        assert result.success
        assert result.value is None
        assert result.unwrap() is None

    def test_from_error(self):
        """Test a failure built from a typed error"""
        error = ValidationError(["expected Person, got Team"])
        result = Result.from_error(error, value=[])

        assert not result
        assert result.value == []
        assert result.error_code is ErrorCode.VALIDATION_ERROR
        assert result.errors == ["expected Person, got Team"]
        assert result.exception is error
        assert result.value_or(None) is None

        with pytest.raises(ValidationError):
            result.unwrap()

    def test_fail_without_exception(self):
        """Test unwrap of a plain failure"""
        result = Result.fail("something broke", ErrorCode.QUERY_ERROR)

        with pytest.raises(RepoKitError) as exc_info:
            result.unwrap()

        assert exc_info.value.message == "something broke"

    def test_is_not_found(self):
        """Test the not-found shortcut"""
        assert Result.from_error(NotFoundError("Person", 7)).is_not_found
        assert not Result.ok(None).is_not_found

    def test_to_dict_failure(self):
        """Test the failure representation"""
        result = Result.from_error(NotFoundError("Person", 7))

        assert result.to_dict() == {
            "success": False,
            "error": "Person not found: 7",
            "error_code": "NOT_FOUND",
            "errors": [],
        }


class TestErrors:
    """Test the error hierarchy"""

    def test_to_dict(self):
        """Test error serialization"""
        error = NotFoundError("Person", 7)

        assert error.to_dict() == {
            "error": "Person not found: 7",
            "error_code": "NOT_FOUND",
            "details": {"resource_type": "Person", "resource_id": "7"},
        }

    def test_error_codes(self):
        """Test every error carries its code"""
        assert ConflictError("save", "dup").error_code is ErrorCode.CONFLICT
        assert NonUniqueResultError("q").error_code is ErrorCode.NON_UNIQUE_RESULT
        assert ConnectivityError("down").error_code is ErrorCode.CONNECTIVITY_ERROR
        assert RepoKitError("x").error_code is ErrorCode.INTERNAL_ERROR
