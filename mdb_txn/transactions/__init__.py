"""
Transactions

Retried, session-scoped MongoDB transactions.

Usage:
    from mdb_txn.transactions import TransactionOptions, TransactionRunner

    async def insert_documents(session):
        await coll.insert_one({"name": "Kotlin Sync Pizza"}, session=session)
        await coll.insert_one({"name": "Kotlin Sync Burger"}, session=session)

    runner = TransactionRunner()
    async with await client.start_session() as session:
        outcome = await runner.run(session, TransactionOptions(), insert_documents)
"""

from .classification import ErrorKind, Phase, classify_error, is_transient, is_unknown_commit_result
from .decorators import transactional
from .options import TransactionOptions
from .outcome import OutcomeStatus, TransactionOutcome
from .runner import TransactionRunner, TransactionState

__all__ = [
    "TransactionRunner",
    "TransactionState",
    "TransactionOptions",
    "TransactionOutcome",
    "OutcomeStatus",
    "ErrorKind",
    "Phase",
    "classify_error",
    "is_transient",
    "is_unknown_commit_result",
    "transactional",
]
