"""
Transaction runner.

Drives a MongoDB client session through the transaction lifecycle for a
caller-supplied unit of work: start, run the body, commit, and on transient
failures abort and try again until the retry deadline elapses.

This module is part of MDB_TXN.
"""

import asyncio
import logging
import random
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar

from ..constants import DEFAULT_BACKOFF_BASE_S, DEFAULT_BACKOFF_MAX_S, DEFAULT_RETRY_TIME_LIMIT_S
from ..exceptions import ConfigurationError, TransactionRetryExhaustedError, TransactionStateError
from ..observability import (
    clear_correlation_id,
    clear_transaction_context,
    get_correlation_id,
    get_logger,
    log_operation,
    record_operation,
    set_correlation_id,
    set_transaction_context,
    update_transaction_context,
)
from .classification import ErrorKind, Phase, classify_error
from .options import TransactionOptions
from .outcome import OutcomeStatus, TransactionOutcome

logger = logging.getLogger(__name__)
contextual_logger = get_logger(__name__)

T = TypeVar("T")

UnitOfWork = Callable[[Any], Awaitable[T]]


class TransactionState(str, Enum):
    IDLE = "idle"
    IN_TRANSACTION = "in_transaction"
    COMMITTING = "committing"
    COMMITTED = "committed"
    ABORTING = "aborting"
    FAILED = "failed"


@dataclass
class _Run:
    """Bookkeeping for a single call to ``TransactionRunner.run``."""

    started_at: float
    transaction_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    state: TransactionState = TransactionState.IDLE
    after_abort: TransactionState = TransactionState.FAILED
    status: OutcomeStatus = OutcomeStatus.FAILED
    attempts: int = 0
    commit_attempts: int = 0
    result: Any = None
    error: Optional[BaseException] = None
    error_kind: Optional[ErrorKind] = None

    def fail(
        self, error: BaseException, kind: ErrorKind, status: OutcomeStatus = OutcomeStatus.FAILED
    ) -> None:
        self.error, self.error_kind, self.status = error, kind, status


class TransactionRunner:
    """
    Runs units of work inside session-scoped transactions with retries.

    The unit of work receives the session as its only argument and must pass
    it to every write so the server attributes the writes to the open
    transaction. It may be invoked more than once, so it must be safe to
    re-run from the start.

    Example:
        async def insert_documents(session):
            await restaurants.insert_one({"name": "Pizza"}, session=session)
            await restaurants.insert_one({"name": "Burger"}, session=session)

        runner = TransactionRunner()
        async with await client.start_session() as session:
            outcome = await runner.run(session, TransactionOptions(), insert_documents)
        if not outcome.succeeded:
            ...
    """

    def __init__(
        self,
        retry_time_limit_s: float = DEFAULT_RETRY_TIME_LIMIT_S,
        default_options: Optional[TransactionOptions] = None,
        backoff_base_s: float = DEFAULT_BACKOFF_BASE_S,
        backoff_max_s: float = DEFAULT_BACKOFF_MAX_S,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """
        Initialize the runner.

        Args:
            retry_time_limit_s: Wall-clock budget for retries, measured from
                the start of ``run``
            default_options: Options used when ``run`` is given none
            backoff_base_s: Base delay between attempts (0 disables backoff)
            backoff_max_s: Cap for a single backoff delay
            clock: Monotonic clock, injectable for tests
            sleep: Coroutine used to wait between attempts
        """
        if retry_time_limit_s < 0:
            raise ConfigurationError(
                f"retry_time_limit_s must be >= 0, got {retry_time_limit_s}",
                config_key="retry_time_limit_s",
                config_value=retry_time_limit_s,
            )
        if backoff_base_s < 0 or backoff_max_s < 0:
            raise ConfigurationError("backoff delays must be >= 0", config_key="backoff_base_s")

        self.retry_time_limit_s = retry_time_limit_s
        self.default_options = default_options or TransactionOptions()
        self.backoff_base_s = backoff_base_s
        self.backoff_max_s = backoff_max_s
        self._clock = clock
        self._sleep = sleep
        self._active_sessions: set[int] = set()

    async def run(
        self,
        session: Any,
        options: Optional[TransactionOptions],
        unit_of_work: UnitOfWork,
    ) -> TransactionOutcome:
        """
        Run ``unit_of_work`` in a transaction on ``session``.

        Never raises for failures of start, the unit of work or the commit:
        they are reported on the returned outcome. Cancellation is re-raised
        after the open transaction has been aborted.

        Args:
            session: An open client session owned by the caller
            options: Transaction options (defaults to ``default_options``)
            unit_of_work: Coroutine function taking the session

        Returns:
            TransactionOutcome describing how the run ended
        """
        options = options or self.default_options
        run = _Run(self._clock())

        refusal = self._check_session(session)
        if refusal is not None:
            run.fail(refusal, ErrorKind.PERMANENT)
            return self._finish(run)

        self._active_sessions.add(id(session))
        owns_correlation_id = get_correlation_id() is None
        if owns_correlation_id:
            set_correlation_id()
        set_transaction_context(run.transaction_id, **options.to_dict())
        try:
            await self._drive(run, session, options, unit_of_work)
            return self._finish(run)
        except asyncio.CancelledError:
            if session.in_transaction:
                contextual_logger.warning("Transaction run cancelled, aborting open transaction")
                await self._abort(session)
            record_operation("transaction.run", self._elapsed_ms(run), success=False)
            raise
        finally:
            self._active_sessions.discard(id(session))
            clear_transaction_context()
            if owns_correlation_id:
                clear_correlation_id()

    async def execute(
        self,
        session: Any,
        unit_of_work: UnitOfWork,
        options: Optional[TransactionOptions] = None,
    ) -> Any:
        """
        Like ``run``, but return the result directly and raise on failure.
        """
        outcome = await self.run(session, options, unit_of_work)
        return outcome.unwrap()

    async def run_in_new_session(
        self,
        client: Any,
        options: Optional[TransactionOptions],
        unit_of_work: UnitOfWork,
    ) -> TransactionOutcome:
        """
        Acquire a session from ``client``, run, and end the session on every path.

        Args:
            client: AsyncIOMotorClient (or anything with ``start_session``)
            options: Transaction options
            unit_of_work: Coroutine function taking the session
        """
        async with await client.start_session() as session:
            return await self.run(session, options, unit_of_work)

    def _check_session(self, session: Any) -> Optional[TransactionStateError]:
        if id(session) in self._active_sessions:
            return TransactionStateError(
                "Session is already being driven by another transaction run"
            )
        if getattr(session, "has_ended", False) is True:
            return TransactionStateError("Cannot start a transaction on an ended session")
        if session.in_transaction:
            return TransactionStateError(
                "Session already has a transaction in progress",
                context={"session": repr(session)},
            )
        return None

    async def _drive(
        self,
        run: _Run,
        session: Any,
        options: TransactionOptions,
        unit_of_work: UnitOfWork,
    ) -> None:
        while True:
            if run.state is TransactionState.IDLE:
                run.attempts += 1
                update_transaction_context(attempt=run.attempts)
                try:
                    session.start_transaction(**options.to_kwargs())
                except Exception as exc:
                    contextual_logger.error("startTransaction rejected: %s", exc)
                    run.fail(exc, ErrorKind.PERMANENT)
                    return
                run.state = TransactionState.IN_TRANSACTION

            elif run.state is TransactionState.IN_TRANSACTION:
                try:
                    run.result = await unit_of_work(session)
                except Exception as exc:
                    self._on_failure(run, exc, Phase.BODY)
                    continue
                # A unit of work that ended the transaction itself is not committed again.
                run.state = (
                    TransactionState.COMMITTING
                    if session.in_transaction
                    else TransactionState.COMMITTED
                )

            elif run.state is TransactionState.COMMITTING:
                run.commit_attempts += 1
                try:
                    await self._timed("transaction.commit", session.commit_transaction())
                except Exception as exc:
                    self._on_failure(run, exc, Phase.COMMIT)
                    continue
                run.state = TransactionState.COMMITTED

            elif run.state is TransactionState.ABORTING:
                # A failed commit already closed the transaction client-side.
                if session.in_transaction:
                    await self._abort(session)
                run.state = run.after_abort
                if run.state is TransactionState.IDLE:
                    await self._backoff(run)

            else:
                if run.state is TransactionState.COMMITTED:
                    run.status = OutcomeStatus.COMMITTED
                return

    def _on_failure(self, run: _Run, exc: BaseException, phase: Phase) -> None:
        """Decide the next state after ``exc`` was raised in ``phase``."""
        kind = classify_error(exc, phase)
        within = self._elapsed_ms(run) < self.retry_time_limit_s * 1000
        extra = {
            "phase": phase.value,
            "error_kind": kind.value,
            "error_type": type(exc).__name__,
            "error": str(exc),
        }

        if kind is ErrorKind.UNKNOWN_COMMIT_RESULT:
            if within:
                contextual_logger.info("Commit result unknown, retrying commit", extra=extra)
                run.state = TransactionState.COMMITTING
            else:
                contextual_logger.error("Commit result unknown, retry time exhausted", extra=extra)
                run.fail(self._exhausted(run, exc), kind, OutcomeStatus.INDETERMINATE)
                run.state = TransactionState.FAILED
            return

        run.state = TransactionState.ABORTING
        if kind is ErrorKind.TRANSIENT and within:
            contextual_logger.info("Transient transaction error, retrying transaction", extra=extra)
            run.after_abort = TransactionState.IDLE
        elif kind is ErrorKind.TRANSIENT:
            contextual_logger.error("Transaction retry time exhausted", extra=extra)
            run.fail(self._exhausted(run, exc), kind)
            run.after_abort = TransactionState.FAILED
        else:
            contextual_logger.error("Transaction failed with permanent error", extra=extra)
            run.fail(exc, kind)
            run.after_abort = TransactionState.FAILED

    def _exhausted(self, run: _Run, exc: BaseException) -> TransactionRetryExhaustedError:
        return TransactionRetryExhaustedError(
            f"Transaction did not succeed within {self.retry_time_limit_s}s: {exc}",
            last_error=exc,
            attempts=run.attempts,
            elapsed_s=self._elapsed_ms(run) / 1000,
        )

    async def _timed(self, operation: str, awaitable: Awaitable[Any]) -> Any:
        start = self._clock()
        success = False
        try:
            result = await awaitable
            success = True
            return result
        finally:
            record_operation(operation, (self._clock() - start) * 1000, success=success)

    async def _abort(self, session: Any) -> None:
        """
        Tell the server to discard the current attempt.

        Abort failures are logged, not raised: the error that caused the
        abort is the one reported to the caller, and the server discards
        the transaction on its own when its lifetime expires.
        """
        try:
            await self._timed("transaction.abort", session.abort_transaction())
        except Exception as exc:
            logger.warning(
                "abortTransaction failed: %s", exc, extra={"error_type": type(exc).__name__}
            )

    async def _backoff(self, run: _Run) -> None:
        if self.backoff_base_s <= 0:
            return
        delay = min(self.backoff_base_s * (2 ** (run.attempts - 1)), self.backoff_max_s)
        remaining = self.retry_time_limit_s - self._elapsed_ms(run) / 1000
        delay = min(random.uniform(0, delay), max(remaining, 0))
        if delay > 0:
            await self._sleep(delay)

    def _elapsed_ms(self, run: _Run) -> float:
        return (self._clock() - run.started_at) * 1000

    def _finish(self, run: _Run) -> TransactionOutcome:
        committed = run.status is OutcomeStatus.COMMITTED
        outcome = TransactionOutcome(
            status=run.status,
            result=run.result if committed else None,
            error=None if committed else run.error,
            error_kind=None if committed else run.error_kind,
            attempts=run.attempts,
            commit_attempts=run.commit_attempts,
            duration_ms=self._elapsed_ms(run),
        )
        record_operation(
            "transaction.run",
            outcome.duration_ms,
            success=committed,
            status=outcome.status.value,
        )
        details = outcome.to_dict()
        details.pop("duration_ms")
        log_operation(
            logger,
            "transaction.run",
            level=logging.INFO if committed else logging.WARNING,
            success=committed,
            duration_ms=outcome.duration_ms,
            transaction_id=run.transaction_id,
            **details,
        )
        return outcome
