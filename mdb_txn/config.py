"""
Configuration management for MDB_TXN.

Values come from direct parameters first and environment variables second,
so the runner can be configured per deployment without code changes.
"""

import os

from .constants import (
    DEFAULT_BACKOFF_BASE_S,
    DEFAULT_READ_CONCERN,
    DEFAULT_RETRY_TIME_LIMIT_S,
    DEFAULT_WRITE_CONCERN,
)
from .exceptions import ConfigurationError
from .transactions.options import TransactionOptions
from .transactions.runner import TransactionRunner


def _parse_write_concern(value: str) -> str | int:
    return int(value) if value.isdigit() else value


class TransactionConfig:
    """
    Transaction runner configuration.

    Example:
        # Using environment variables
        config = TransactionConfig()
        config.validate()
        runner = config.build_runner()

        # Or using direct parameters
        config = TransactionConfig(
            mongo_uri="mongodb://localhost:27017",
            db_name="sample_restaurants",
            retry_time_limit_s=30,
        )
    """

    def __init__(
        self,
        mongo_uri: str | None = None,
        db_name: str | None = None,
        retry_time_limit_s: float | None = None,
        read_concern: str | None = None,
        write_concern: str | int | None = None,
        max_commit_time_ms: int | None = None,
        backoff_base_s: float | None = None,
    ):
        """
        Initialize configuration.

        Args:
            mongo_uri: MongoDB connection URI (defaults to MONGO_URI env var)
            db_name: Database name (defaults to DB_NAME env var)
            retry_time_limit_s: Retry budget in seconds (defaults to 120 or
                MDB_TXN_RETRY_TIME_LIMIT_S)
            read_concern: Read concern level (defaults to "local" or MDB_TXN_READ_CONCERN)
            write_concern: Write concern (defaults to "majority" or MDB_TXN_WRITE_CONCERN)
            max_commit_time_ms: Commit time limit (defaults to MDB_TXN_MAX_COMMIT_TIME_MS,
                unset if absent)
            backoff_base_s: Base retry backoff (defaults to 0 or MDB_TXN_BACKOFF_BASE_S)
        """
        self.mongo_uri = mongo_uri or os.getenv("MONGO_URI", "")
        self.db_name = db_name or os.getenv("DB_NAME", "")

        try:
            self.retry_time_limit_s = (
                retry_time_limit_s
                if retry_time_limit_s is not None
                else float(os.getenv("MDB_TXN_RETRY_TIME_LIMIT_S", str(DEFAULT_RETRY_TIME_LIMIT_S)))
            )
            self.backoff_base_s = (
                backoff_base_s
                if backoff_base_s is not None
                else float(os.getenv("MDB_TXN_BACKOFF_BASE_S", str(DEFAULT_BACKOFF_BASE_S)))
            )
            env_commit_time = os.getenv("MDB_TXN_MAX_COMMIT_TIME_MS")
            self.max_commit_time_ms = (
                max_commit_time_ms
                if max_commit_time_ms is not None
                else (int(env_commit_time) if env_commit_time else None)
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric configuration value: {e}") from e

        self.read_concern = read_concern or os.getenv("MDB_TXN_READ_CONCERN", DEFAULT_READ_CONCERN)
        self.write_concern = (
            write_concern
            if write_concern is not None
            else _parse_write_concern(os.getenv("MDB_TXN_WRITE_CONCERN", DEFAULT_WRITE_CONCERN))
        )

    def validate(self, require_connection: bool = False) -> None:
        """
        Validate configuration values.

        Args:
            require_connection: Also require mongo_uri and db_name

        Raises:
            ConfigurationError: If configuration is missing or invalid
        """
        if require_connection:
            if not self.mongo_uri:
                raise ConfigurationError(
                    "mongo_uri is required (set MONGO_URI environment variable or pass directly)",
                    config_key="mongo_uri",
                )
            if not self.db_name:
                raise ConfigurationError(
                    "db_name is required (set DB_NAME environment variable or pass directly)",
                    config_key="db_name",
                )

        if self.retry_time_limit_s < 0:
            raise ConfigurationError(
                f"retry_time_limit_s must be >= 0, got {self.retry_time_limit_s}",
                config_key="retry_time_limit_s",
                config_value=self.retry_time_limit_s,
            )

        if self.backoff_base_s < 0:
            raise ConfigurationError(
                f"backoff_base_s must be >= 0, got {self.backoff_base_s}",
                config_key="backoff_base_s",
                config_value=self.backoff_base_s,
            )

        # Raises ConfigurationError for bad concern levels or commit time.
        self.to_options()

    def to_options(self) -> TransactionOptions:
        return TransactionOptions(
            read_concern=self.read_concern,
            write_concern=self.write_concern,
            max_commit_time_ms=self.max_commit_time_ms,
        )

    def build_runner(self) -> TransactionRunner:
        """Create a TransactionRunner using this configuration."""
        return TransactionRunner(
            retry_time_limit_s=self.retry_time_limit_s,
            default_options=self.to_options(),
            backoff_base_s=self.backoff_base_s,
        )
