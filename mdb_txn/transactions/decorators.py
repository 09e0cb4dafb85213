"""
Declarative transaction decorator.
"""

import functools
from typing import Any, Callable, Optional, TypeVar

from .options import TransactionOptions
from .runner import TransactionRunner

F = TypeVar("F", bound=Callable[..., Any])


def transactional(
    client: Any,
    options: Optional[TransactionOptions] = None,
    runner: Optional[TransactionRunner] = None,
) -> Callable[[F], F]:
    """
    Run the decorated coroutine function inside a retried transaction.

    The function receives a fresh session as its first argument; the
    session is ended when the call returns. On failure the outcome error
    is raised.

    Args:
        client: AsyncIOMotorClient or ConnectionManager (anything exposing
            ``start_session``)
        options: Transaction options for every call
        runner: Runner to use (a default TransactionRunner if omitted)

    Usage:
        @transactional(motor_client, TransactionOptions(write_concern="majority"))
        async def transfer(session, from_id, to_id, amount):
            await accounts.update_one(
                {"_id": from_id}, {"$inc": {"balance": -amount}}, session=session
            )
            await accounts.update_one(
                {"_id": to_id}, {"$inc": {"balance": amount}}, session=session
            )
    """
    txn_runner = runner or TransactionRunner()

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            async def unit_of_work(session: Any) -> Any:
                return await func(session, *args, **kwargs)

            outcome = await txn_runner.run_in_new_session(client, options, unit_of_work)
            return outcome.unwrap()

        return wrapper  # type: ignore[return-value]

    return decorator
