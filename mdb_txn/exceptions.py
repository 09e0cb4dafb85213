"""
Custom exceptions for MDB_TXN.

These exceptions provide specific error types for the transaction runner
while maintaining compatibility with RuntimeError.
"""

from typing import Any, Dict, Optional


class TransactionError(RuntimeError):
    """
    Base exception for MDB_TXN errors.

    Attributes:
        message: Error message
        context: Optional dictionary with additional context (attempt,
                 session_id, etc.)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            context: Optional dictionary with additional context information
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class TransientTransactionError(TransactionError):
    """
    Raised when a transaction attempt failed but is safe to retry as a whole.

    Units of work can raise this directly to request a retry; errors from
    the driver carrying the ``TransientTransactionError`` label are treated
    the same way.
    """


class UnknownTransactionCommitResult(TransactionError):
    """
    Raised when the outcome of a commit is indeterminate.

    Only the commit step is retried for this error, never the body.
    """


class PermanentTransactionError(TransactionError):
    """
    Raised for failures that will not succeed on retry.

    Attributes:
        message: Error message
        original_error: The underlying exception (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        original_error: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if original_error is not None:
            context["error_type"] = type(original_error).__name__
        super().__init__(message, context=context)
        self.original_error = original_error


class TransactionRetryExhaustedError(TransactionError):
    """
    Raised when the retry deadline elapses before a transaction succeeds.

    Attributes:
        message: Error message
        last_error: The last error observed before giving up
        attempts: Number of transaction attempts made
        elapsed_s: Wall-clock seconds spent retrying
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        last_error: BaseException,
        attempts: int,
        elapsed_s: float,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize the retry exhausted error.

        Args:
            message: Error message
            last_error: The last error observed before giving up
            attempts: Number of transaction attempts made
            elapsed_s: Wall-clock seconds spent retrying
            context: Additional context information
        """
        context = context or {}
        context["attempts"] = attempts
        context["elapsed_s"] = round(elapsed_s, 3)
        context["last_error_type"] = type(last_error).__name__
        super().__init__(message, context=context)
        self.last_error = last_error
        self.attempts = attempts
        self.elapsed_s = elapsed_s
        self.__cause__ = last_error


class TransactionStateError(TransactionError):
    """
    Raised when a session is not in a state that allows a new transaction.

    Examples: the session already has an uncommitted transaction open, the
    session has been ended, or another run is currently driving it.
    """


class ConfigurationError(TransactionError):
    """
    Raised when configuration is invalid or missing.

    Attributes:
        message: Error message
        config_key: Configuration key that caused the error (if available)
        config_value: Configuration value that caused the error (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize the configuration error.

        Args:
            message: Error message
            config_key: Configuration key that caused the error (if available)
            config_value: Configuration value that caused the error (if available)
            context: Additional context information
        """
        context = context or {}
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = config_value
        super().__init__(message, context=context)
        self.config_key = config_key
        self.config_value = config_value


class InitializationError(TransactionError):
    """
    Raised when the MongoDB connection cannot be initialized.

    Attributes:
        message: Error message
        mongo_uri: MongoDB connection URI (if available)
        db_name: Database name (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        mongo_uri: Optional[str] = None,
        db_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if mongo_uri:
            context["mongo_uri"] = mongo_uri
        if db_name:
            context["db_name"] = db_name
        super().__init__(message, context=context)
        self.mongo_uri = mongo_uri
        self.db_name = db_name
