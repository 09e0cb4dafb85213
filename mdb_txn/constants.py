"""
Constants for MDB_TXN.

This module contains all shared constants used across the codebase to avoid
magic numbers and improve maintainability.
"""

from typing import Final

# ============================================================================
# TRANSACTION RETRY CONSTANTS
# ============================================================================

# Twice the 60 second default of the server's transactionLifetimeLimitSeconds.
DEFAULT_RETRY_TIME_LIMIT_S: Final[float] = 120.0
"""Default wall-clock budget for retrying a transaction (seconds)."""

DEFAULT_BACKOFF_BASE_S: Final[float] = 0.0
"""Default base delay between transaction attempts (seconds, 0 disables)."""

DEFAULT_BACKOFF_MAX_S: Final[float] = 1.0
"""Upper bound for a single backoff sleep (seconds)."""

# ============================================================================
# ERROR LABELS AND CODES
# ============================================================================

TRANSIENT_TRANSACTION_ERROR_LABEL: Final[str] = "TransientTransactionError"
"""Server/driver label marking an error as safe to retry the whole transaction."""

UNKNOWN_COMMIT_RESULT_LABEL: Final[str] = "UnknownTransactionCommitResult"
"""Server/driver label marking a commit whose outcome is indeterminate."""

WRITE_CONFLICT_CODE: Final[int] = 112
"""Server error code for WriteConflict."""

MAX_TIME_MS_EXPIRED_CODE: Final[int] = 50
"""Server error code for MaxTimeMSExpired."""

# ============================================================================
# TRANSACTION OPTION CONSTANTS
# ============================================================================

VALID_READ_CONCERN_LEVELS: Final[frozenset] = frozenset(["local", "majority", "snapshot"])
"""Read concern levels accepted by the server inside transactions."""

DEFAULT_READ_CONCERN: Final[str] = "local"
"""Default read concern level for transactions."""

DEFAULT_WRITE_CONCERN: Final[str] = "majority"
"""Default write concern for transactions."""

# ============================================================================
# DATABASE CONSTANTS
# ============================================================================

DEFAULT_MAX_POOL_SIZE: Final[int] = 50
"""Default maximum MongoDB connection pool size."""

DEFAULT_MIN_POOL_SIZE: Final[int] = 10
"""Default minimum MongoDB connection pool size."""

DEFAULT_SERVER_SELECTION_TIMEOUT_MS: Final[int] = 5000
"""Default server selection timeout in milliseconds."""

DEFAULT_MAX_IDLE_TIME_MS: Final[int] = 45000
"""Default maximum idle time before closing connections (milliseconds)."""
