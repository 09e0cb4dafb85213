"""
Result of a transaction run.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from ..exceptions import TransactionStateError
from .classification import ErrorKind

T = TypeVar("T")


class OutcomeStatus(str, Enum):
    COMMITTED = "committed"
    FAILED = "failed"
    # Commit may or may not have been applied by the server.
    INDETERMINATE = "indeterminate"


@dataclass
class TransactionOutcome(Generic[T]):
    """
    Either the unit of work's result or the error that ended the run.

    Attributes:
        status: How the run ended
        result: Value returned by the unit of work (COMMITTED only)
        error: The error surfaced to the caller, unchanged from its source
            unless the retry deadline elapsed
        error_kind: Classification of ``error``
        attempts: Number of times the transaction was started
        commit_attempts: Number of commit calls made
        duration_ms: Wall-clock duration of the run
    """

    status: OutcomeStatus
    result: Optional[T] = None
    error: Optional[BaseException] = None
    error_kind: Optional[ErrorKind] = None
    attempts: int = 0
    commit_attempts: int = 0
    duration_ms: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.COMMITTED

    def unwrap(self) -> T:
        """
        Return the result, or raise the error that ended the run.

        Raises:
            BaseException: ``error`` when the run did not commit
        """
        if self.succeeded:
            return self.result  # type: ignore[return-value]
        if self.error is None:
            raise TransactionStateError(
                f"Transaction ended {self.status.value} without recording an error"
            )
        raise self.error

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "error_type": type(self.error).__name__ if self.error else None,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "attempts": self.attempts,
            "commit_attempts": self.commit_attempts,
            "duration_ms": round(self.duration_ms, 2),
        }
