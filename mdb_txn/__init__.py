"""
MDB_TXN - MongoDB transaction runner

Runs units of work inside session-scoped MongoDB transactions, retrying
transient failures until a wall-clock deadline.
"""

from .config import TransactionConfig
from .core import ConnectionManager
from .exceptions import (
    ConfigurationError,
    InitializationError,
    PermanentTransactionError,
    TransactionError,
    TransactionRetryExhaustedError,
    TransactionStateError,
    TransientTransactionError,
    UnknownTransactionCommitResult,
)
from .transactions import (
    ErrorKind,
    OutcomeStatus,
    TransactionOptions,
    TransactionOutcome,
    TransactionRunner,
    TransactionState,
    classify_error,
    transactional,
)

__version__ = "0.1.0"

__all__ = [
    # Runner
    "TransactionRunner",
    "TransactionState",
    "TransactionOptions",
    "TransactionOutcome",
    "OutcomeStatus",
    "ErrorKind",
    "classify_error",
    "transactional",
    # Connection
    "ConnectionManager",
    # Config
    "TransactionConfig",
    # Exceptions
    "TransactionError",
    "TransientTransactionError",
    "UnknownTransactionCommitResult",
    "PermanentTransactionError",
    "TransactionRetryExhaustedError",
    "TransactionStateError",
    "ConfigurationError",
    "InitializationError",
]
