"""
Unit tests for TransactionOptions.
"""

import dataclasses

import pytest

from mdb_txn.exceptions import ConfigurationError
from mdb_txn.transactions import TransactionOptions


@pytest.mark.unit
class TestTransactionOptions:
    def test_defaults_match_local_read_majority_write(self):
        options = TransactionOptions()

        kwargs = options.to_kwargs()
        assert kwargs["read_concern"].level == "local"
        assert kwargs["write_concern"].document == {"w": "majority"}
        assert "max_commit_time_ms" not in kwargs

    def test_full_write_concern(self):
        options = TransactionOptions(
            write_concern=2, write_concern_journal=True, write_concern_timeout_ms=1000
        )

        assert options.write_concern_obj.document == {"w": 2, "j": True, "wtimeout": 1000}

    def test_max_commit_time_included(self):
        options = TransactionOptions(max_commit_time_ms=250)
        assert options.to_kwargs()["max_commit_time_ms"] == 250

    def test_is_immutable(self):
        options = TransactionOptions()
        with pytest.raises(dataclasses.FrozenInstanceError):
            options.read_concern = "majority"

    @pytest.mark.parametrize(
        "kwargs,key",
        [
            ({"read_concern": "eventual"}, "read_concern"),
            ({"read_concern": "linearizable"}, "read_concern"),
            ({"read_concern": "available"}, "read_concern"),
            ({"write_concern": 0}, "write_concern"),
            ({"write_concern": -1}, "write_concern"),
            ({"write_concern": ""}, "write_concern"),
            ({"write_concern": True}, "write_concern"),
            ({"max_commit_time_ms": 0}, "max_commit_time_ms"),
            ({"write_concern_timeout_ms": -5}, "write_concern_timeout_ms"),
        ],
    )
    def test_invalid_values_rejected(self, kwargs, key):
        with pytest.raises(ConfigurationError) as exc_info:
            TransactionOptions(**kwargs)
        assert exc_info.value.config_key == key

    def test_to_dict(self):
        assert TransactionOptions(max_commit_time_ms=10).to_dict() == {
            "read_concern": "local",
            "write_concern": "majority",
            "max_commit_time_ms": 10,
        }
