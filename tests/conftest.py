"""
Pytest configuration and shared fixtures for MDB_TXN tests.

This module provides:
- An in-memory session/collection pair that mimics motor's transaction API
- A controllable clock for retry deadline tests
- Metrics isolation between tests
"""

from typing import Any, Dict, List, Optional

import pytest
from pymongo.errors import InvalidOperation

from mdb_txn.observability import get_metrics_collector


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests with no MongoDB server")


# ============================================================================
# FAKE MONGODB SESSION
# ============================================================================


class FakeStore:
    """Documents visible to every session, i.e. committed data."""

    def __init__(self) -> None:
        self.collections: Dict[str, List[Dict[str, Any]]] = {}

    def documents(self, name: str) -> List[Dict[str, Any]]:
        return self.collections.setdefault(name, [])


class FakeSession:
    """
    Records lifecycle calls and applies staged writes only on commit.

    Follows the driver's state rules: once commitTransaction has been called
    the transaction is no longer in progress, even if the commit failed, and
    abortTransaction is rejected until a new transaction is started.

    ``commit_errors`` and ``abort_errors`` are consumed one per call; a None
    entry means that call succeeds.
    """

    def __init__(
        self,
        store: FakeStore,
        commit_errors: Optional[List[Optional[BaseException]]] = None,
        abort_errors: Optional[List[Optional[BaseException]]] = None,
    ) -> None:
        self.store = store
        self.commit_errors = list(commit_errors or [])
        self.abort_errors = list(abort_errors or [])
        self.state = "none"
        self.has_ended = False
        self.start_calls: List[Dict[str, Any]] = []
        self.commit_calls = 0
        self.abort_calls = 0
        self._staged: List[tuple] = []

    @property
    def in_transaction(self) -> bool:
        return self.state == "in_progress"

    def start_transaction(self, **kwargs: Any) -> None:
        if self.in_transaction:
            raise InvalidOperation("Transaction already in progress")
        self.start_calls.append(kwargs)
        self.state = "in_progress"
        self._staged = []

    def stage(self, collection: str, document: Dict[str, Any]) -> None:
        if not self.in_transaction:
            raise AssertionError("write outside transaction")
        self._staged.append((collection, document))

    async def commit_transaction(self) -> None:
        if self.state not in ("in_progress", "committed"):
            raise InvalidOperation("No transaction started")
        self.commit_calls += 1
        try:
            error = self.commit_errors.pop(0) if self.commit_errors else None
            if error is not None:
                raise error
            for collection, document in self._staged:
                self.store.documents(collection).append(document)
            self._staged = []
        finally:
            self.state = "committed"

    async def abort_transaction(self) -> None:
        if self.state == "committed":
            raise InvalidOperation("Cannot call abortTransaction after calling commitTransaction")
        if self.state != "in_progress":
            raise InvalidOperation("No transaction started")
        self.abort_calls += 1
        self._staged = []
        self.state = "aborted"
        error = self.abort_errors.pop(0) if self.abort_errors else None
        if error is not None:
            raise error

    async def end_session(self) -> None:
        self.has_ended = True

    async def __aenter__(self) -> "FakeSession":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.end_session()


class FakeCollection:
    def __init__(self, name: str) -> None:
        self.name = name

    async def insert_one(self, document: Dict[str, Any], session: FakeSession) -> None:
        session.stage(self.name, dict(document))


class FakeClient:
    def __init__(self, session: FakeSession) -> None:
        self.session = session
        self.sessions_started = 0

    async def start_session(self, **kwargs: Any) -> FakeSession:
        self.sessions_started += 1
        return self.session


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def session(store: FakeStore) -> FakeSession:
    return FakeSession(store)


@pytest.fixture
def make_session(store: FakeStore):
    """Factory for sessions with scripted commit/abort failures."""

    def _make(**kwargs: Any) -> FakeSession:
        return FakeSession(store, **kwargs)

    return _make


@pytest.fixture
def make_client():
    def _make(session: FakeSession) -> FakeClient:
        return FakeClient(session)

    return _make


@pytest.fixture
def restaurants() -> FakeCollection:
    return FakeCollection("restaurants")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def reset_metrics():
    """Isolate the global metrics collector between tests."""
    get_metrics_collector().reset()
    yield
    get_metrics_collector().reset()


@pytest.fixture
def reset_environment(monkeypatch):
    """Remove MDB_TXN related environment variables."""
    for key in (
        "MONGO_URI",
        "DB_NAME",
        "MDB_TXN_RETRY_TIME_LIMIT_S",
        "MDB_TXN_READ_CONCERN",
        "MDB_TXN_WRITE_CONCERN",
        "MDB_TXN_MAX_COMMIT_TIME_MS",
        "MDB_TXN_BACKOFF_BASE_S",
    ):
        monkeypatch.delenv(key, raising=False)
