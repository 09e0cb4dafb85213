"""
Unit tests for TransactionConfig.
"""

import pytest

from mdb_txn.config import TransactionConfig
from mdb_txn.exceptions import ConfigurationError
from mdb_txn.transactions import TransactionRunner


@pytest.mark.unit
@pytest.mark.usefixtures("reset_environment")
class TestTransactionConfig:
    def test_defaults(self):
        config = TransactionConfig()

        assert config.retry_time_limit_s == 120.0
        assert config.read_concern == "local"
        assert config.write_concern == "majority"
        assert config.max_commit_time_ms is None
        assert config.backoff_base_s == 0.0
        config.validate()

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("MONGO_URI", "mongodb://db:27017")
        monkeypatch.setenv("DB_NAME", "sample_restaurants")
        monkeypatch.setenv("MDB_TXN_RETRY_TIME_LIMIT_S", "30")
        monkeypatch.setenv("MDB_TXN_READ_CONCERN", "snapshot")
        monkeypatch.setenv("MDB_TXN_WRITE_CONCERN", "2")
        monkeypatch.setenv("MDB_TXN_MAX_COMMIT_TIME_MS", "1500")

        config = TransactionConfig()

        assert config.mongo_uri == "mongodb://db:27017"
        assert config.db_name == "sample_restaurants"
        assert config.retry_time_limit_s == 30.0
        assert config.read_concern == "snapshot"
        assert config.write_concern == 2
        assert config.max_commit_time_ms == 1500
        config.validate(require_connection=True)

    def test_direct_parameters_override_environment(self, monkeypatch):
        monkeypatch.setenv("MDB_TXN_RETRY_TIME_LIMIT_S", "30")

        config = TransactionConfig(retry_time_limit_s=5)

        assert config.retry_time_limit_s == 5

    def test_invalid_number_in_environment(self, monkeypatch):
        monkeypatch.setenv("MDB_TXN_RETRY_TIME_LIMIT_S", "soon")

        with pytest.raises(ConfigurationError):
            TransactionConfig()

    def test_connection_required(self):
        with pytest.raises(ConfigurationError) as exc_info:
            TransactionConfig().validate(require_connection=True)
        assert exc_info.value.config_key == "mongo_uri"

    def test_invalid_values(self):
        with pytest.raises(ConfigurationError):
            TransactionConfig(retry_time_limit_s=-1).validate()
        with pytest.raises(ConfigurationError):
            TransactionConfig(backoff_base_s=-0.5).validate()
        with pytest.raises(ConfigurationError):
            TransactionConfig(read_concern="eventual").validate()

    def test_build_runner(self):
        config = TransactionConfig(retry_time_limit_s=10, read_concern="majority")

        runner = config.build_runner()

        assert isinstance(runner, TransactionRunner)
        assert runner.retry_time_limit_s == 10
        assert runner.default_options.read_concern == "majority"
