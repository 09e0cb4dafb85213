"""
Transaction options.

Immutable configuration passed to every transaction attempt of a run.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from pymongo.read_concern import ReadConcern
from pymongo.write_concern import WriteConcern

from ..constants import DEFAULT_READ_CONCERN, DEFAULT_WRITE_CONCERN, VALID_READ_CONCERN_LEVELS
from ..exceptions import ConfigurationError


@dataclass(frozen=True)
class TransactionOptions:
    """
    Read/write concern and commit time limit for a transaction.

    The runner reads these for every attempt and never mutates them.

    Example:
        options = TransactionOptions(read_concern="local", write_concern="majority")
        session.start_transaction(**options.to_kwargs())
    """

    read_concern: str = DEFAULT_READ_CONCERN
    write_concern: Union[str, int] = DEFAULT_WRITE_CONCERN
    max_commit_time_ms: Optional[int] = None
    write_concern_journal: Optional[bool] = None
    write_concern_timeout_ms: Optional[int] = None

    def __post_init__(self) -> None:
        if self.read_concern not in VALID_READ_CONCERN_LEVELS:
            raise ConfigurationError(
                f"Unsupported read concern level '{self.read_concern}'",
                config_key="read_concern",
                config_value=self.read_concern,
            )

        if isinstance(self.write_concern, bool) or not isinstance(self.write_concern, (str, int)):
            raise ConfigurationError(
                "write_concern must be a tag string or a node count",
                config_key="write_concern",
                config_value=self.write_concern,
            )
        # Transactions require an acknowledged write concern.
        if isinstance(self.write_concern, int) and self.write_concern < 1:
            raise ConfigurationError(
                f"write_concern must be >= 1 inside a transaction, got {self.write_concern}",
                config_key="write_concern",
                config_value=self.write_concern,
            )
        if isinstance(self.write_concern, str) and not self.write_concern:
            raise ConfigurationError("write_concern must not be empty", config_key="write_concern")

        if self.max_commit_time_ms is not None and self.max_commit_time_ms <= 0:
            raise ConfigurationError(
                f"max_commit_time_ms must be > 0, got {self.max_commit_time_ms}",
                config_key="max_commit_time_ms",
                config_value=self.max_commit_time_ms,
            )

        if self.write_concern_timeout_ms is not None and self.write_concern_timeout_ms < 0:
            raise ConfigurationError(
                f"write_concern_timeout_ms must be >= 0, got {self.write_concern_timeout_ms}",
                config_key="write_concern_timeout_ms",
                config_value=self.write_concern_timeout_ms,
            )

    @property
    def read_concern_obj(self) -> ReadConcern:
        return ReadConcern(self.read_concern)

    @property
    def write_concern_obj(self) -> WriteConcern:
        kwargs: Dict[str, Any] = {"w": self.write_concern}
        if self.write_concern_journal is not None:
            kwargs["j"] = self.write_concern_journal
        if self.write_concern_timeout_ms is not None:
            kwargs["wtimeout"] = self.write_concern_timeout_ms
        return WriteConcern(**kwargs)

    def to_kwargs(self) -> Dict[str, Any]:
        """
        Render keyword arguments for ``ClientSession.start_transaction``.

        Returns:
            Dictionary with read_concern, write_concern and, when set,
            max_commit_time_ms
        """
        kwargs: Dict[str, Any] = {
            "read_concern": self.read_concern_obj,
            "write_concern": self.write_concern_obj,
        }
        if self.max_commit_time_ms is not None:
            kwargs["max_commit_time_ms"] = self.max_commit_time_ms
        return kwargs

    def to_dict(self) -> Dict[str, Any]:
        """Plain representation used in log context."""
        return {
            "read_concern": self.read_concern,
            "write_concern": self.write_concern,
            "max_commit_time_ms": self.max_commit_time_ms,
        }
