"""
Unit tests for custom exceptions.

Tests exception hierarchy and error messages.
"""

from mdb_txn.exceptions import (
    ConfigurationError,
    InitializationError,
    PermanentTransactionError,
    TransactionError,
    TransactionRetryExhaustedError,
    TransactionStateError,
    TransientTransactionError,
    UnknownTransactionCommitResult,
)


class TestExceptionHierarchy:
    """Test exception inheritance hierarchy."""

    def test_transaction_error_is_runtime_error(self):
        assert isinstance(TransactionError("test error"), RuntimeError)

    def test_subclasses_inherit_from_transaction_error(self):
        errors = [
            TransientTransactionError("a"),
            UnknownTransactionCommitResult("b"),
            PermanentTransactionError("c"),
            TransactionStateError("d"),
            ConfigurationError("e"),
            InitializationError("f"),
            TransactionRetryExhaustedError("g", last_error=ValueError(), attempts=1, elapsed_s=0),
        ]
        for error in errors:
            assert isinstance(error, TransactionError)
            assert isinstance(error, RuntimeError)


class TestExceptionMessages:
    """Test exception message formatting."""

    def test_message_without_context(self):
        error = TransactionError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.context == {}

    def test_message_with_context(self):
        error = TransactionError("Something went wrong", context={"attempt": 3})
        assert "context:" in str(error)
        assert "attempt=3" in str(error)

    def test_permanent_error_keeps_original(self):
        cause = KeyError("name")
        error = PermanentTransactionError("validation failed", original_error=cause)
        assert error.original_error is cause
        assert error.context["error_type"] == "KeyError"

    def test_retry_exhausted_carries_last_error(self):
        last = TransientTransactionError("write conflict")
        error = TransactionRetryExhaustedError(
            "gave up", last_error=last, attempts=7, elapsed_s=120.4567
        )
        assert error.last_error is last
        assert error.__cause__ is last
        assert error.attempts == 7
        assert error.context["elapsed_s"] == 120.457
        assert error.context["last_error_type"] == "TransientTransactionError"

    def test_configuration_error_context(self):
        error = ConfigurationError("bad", config_key="read_concern", config_value="eventual")
        assert error.config_key == "read_concern"
        assert error.context["config_value"] == "eventual"

    def test_initialization_error_context(self):
        error = InitializationError(
            "Connection failed", mongo_uri="mongodb://localhost:27017", db_name="test_db"
        )
        assert error.mongo_uri == "mongodb://localhost:27017"
        assert error.db_name == "test_db"
        assert "mongo_uri" in error.context
