"""
Error classification for transaction retries.

Maps exceptions raised by a unit of work or by a commit to the retry
taxonomy used by the runner. Anything not recognised is PERMANENT.
"""

from enum import Enum

from pymongo.errors import ConnectionFailure, OperationFailure, PyMongoError

from ..constants import (
    MAX_TIME_MS_EXPIRED_CODE,
    TRANSIENT_TRANSACTION_ERROR_LABEL,
    UNKNOWN_COMMIT_RESULT_LABEL,
    WRITE_CONFLICT_CODE,
)
from ..exceptions import TransientTransactionError, UnknownTransactionCommitResult


class ErrorKind(str, Enum):
    TRANSIENT = "transient"
    UNKNOWN_COMMIT_RESULT = "unknown_commit_result"
    PERMANENT = "permanent"


class Phase(str, Enum):
    BODY = "body"
    COMMIT = "commit"


def _has_label(exc: BaseException, label: str) -> bool:
    return isinstance(exc, PyMongoError) and exc.has_error_label(label)


def _is_max_time_expired(exc: BaseException) -> bool:
    return isinstance(exc, OperationFailure) and exc.code == MAX_TIME_MS_EXPIRED_CODE


def is_transient(exc: BaseException) -> bool:
    """Return True if the whole transaction may be retried after ``exc``."""
    if isinstance(exc, TransientTransactionError):
        return True
    if _has_label(exc, TRANSIENT_TRANSACTION_ERROR_LABEL):
        return True
    if isinstance(exc, OperationFailure) and exc.code == WRITE_CONFLICT_CODE:
        return True
    return isinstance(exc, ConnectionFailure)


def is_unknown_commit_result(exc: BaseException) -> bool:
    """Return True if ``exc`` leaves the outcome of a commit indeterminate."""
    if _is_max_time_expired(exc):
        return False
    if isinstance(exc, UnknownTransactionCommitResult):
        return True
    return _has_label(exc, UNKNOWN_COMMIT_RESULT_LABEL)


def classify_error(exc: BaseException, phase: Phase = Phase.BODY) -> ErrorKind:
    """
    Classify an error raised while running a transaction.

    During the body only TRANSIENT and PERMANENT are possible. During commit
    an indeterminate result takes precedence, and a dropped connection means
    the server may or may not have applied the commit.

    Args:
        exc: The raised exception
        phase: Whether the error came from the unit of work or from commit

    Returns:
        The ErrorKind driving the retry decision
    """
    if phase is Phase.COMMIT:
        if is_unknown_commit_result(exc):
            return ErrorKind.UNKNOWN_COMMIT_RESULT
        if isinstance(exc, ConnectionFailure) and not _has_label(
            exc, TRANSIENT_TRANSACTION_ERROR_LABEL
        ):
            return ErrorKind.UNKNOWN_COMMIT_RESULT

    if is_transient(exc):
        return ErrorKind.TRANSIENT
    return ErrorKind.PERMANENT
