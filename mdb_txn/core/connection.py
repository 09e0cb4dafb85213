"""
Connection management for MDB_TXN.

Owns the motor client used to open sessions for transaction runs.

This module is part of MDB_TXN.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorClientSession, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from ..constants import (
    DEFAULT_MAX_IDLE_TIME_MS,
    DEFAULT_MAX_POOL_SIZE,
    DEFAULT_MIN_POOL_SIZE,
    DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
)
from ..exceptions import InitializationError
from ..observability import get_logger as get_contextual_logger
from ..observability import record_operation

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)


class ConnectionManager:
    """
    Manages the MongoDB client lifecycle and hands out sessions.

    Example:
        manager = ConnectionManager("mongodb://localhost:27017", "sample_restaurants")
        await manager.initialize()
        async with manager.session() as session:
            outcome = await runner.run(session, options, insert_documents)
        await manager.shutdown()
    """

    def __init__(
        self,
        mongo_uri: str,
        db_name: str,
        max_pool_size: int = DEFAULT_MAX_POOL_SIZE,
        min_pool_size: int = DEFAULT_MIN_POOL_SIZE,
        client_factory: Any = AsyncIOMotorClient,
    ) -> None:
        """
        Initialize the connection manager.

        Args:
            mongo_uri: MongoDB connection URI
            db_name: Database name
            max_pool_size: Maximum MongoDB connection pool size
            min_pool_size: Minimum MongoDB connection pool size
            client_factory: Callable building the client (AsyncIOMotorClient)
        """
        self.mongo_uri = mongo_uri
        self.db_name = db_name
        self.max_pool_size = max_pool_size
        self.min_pool_size = min_pool_size
        self._client_factory = client_factory

        self._mongo_client: AsyncIOMotorClient | None = None
        self._mongo_db: AsyncIOMotorDatabase | None = None
        self._initialized: bool = False

    async def initialize(self) -> None:
        """
        Connect to MongoDB and verify the connection with a ping.

        Raises:
            InitializationError: If the server cannot be reached
        """
        start_time = time.time()

        if self._initialized:
            logger.warning("ConnectionManager already initialized. Skipping re-initialization.")
            return

        contextual_logger.info(
            "Initializing MongoDB connection",
            extra={
                "db_name": self.db_name,
                "max_pool_size": self.max_pool_size,
                "min_pool_size": self.min_pool_size,
            },
        )

        try:
            self._mongo_client = self._client_factory(
                self.mongo_uri,
                serverSelectionTimeoutMS=DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
                appname="MDB_TXN",
                maxPoolSize=self.max_pool_size,
                minPoolSize=self.min_pool_size,
                maxIdleTimeMS=DEFAULT_MAX_IDLE_TIME_MS,
                retryWrites=True,
                retryReads=True,
            )
            await self._mongo_client.admin.command("ping")
            self._mongo_db = self._mongo_client[self.db_name]
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            duration_ms = (time.time() - start_time) * 1000
            record_operation("connection.initialize", duration_ms, success=False)
            contextual_logger.critical(
                "MongoDB connection failed",
                extra={
                    "error_type": type(e).__name__,
                    "error": str(e),
                    "duration_ms": round(duration_ms, 2),
                },
                exc_info=True,
            )
            if self._mongo_client is not None:
                self._mongo_client.close()
                self._mongo_client = None
            raise InitializationError(
                f"Failed to connect to MongoDB: {e}",
                mongo_uri=self.mongo_uri,
                db_name=self.db_name,
                context={"error_type": type(e).__name__},
            ) from e

        self._initialized = True
        duration_ms = (time.time() - start_time) * 1000
        record_operation("connection.initialize", duration_ms, success=True)
        contextual_logger.info(
            "MongoDB connection initialized successfully",
            extra={
                "db_name": self.db_name,
                "pool_size": f"{self.min_pool_size}-{self.max_pool_size}",
                "duration_ms": round(duration_ms, 2),
            },
        )

    async def shutdown(self) -> None:
        """
        Close the MongoDB client.

        This method is idempotent - it's safe to call multiple times.
        """
        if not self._initialized:
            return

        if self._mongo_client:
            self._mongo_client.close()
            contextual_logger.info("MongoDB connection closed.")

        self._initialized = False
        self._mongo_client = None
        self._mongo_db = None

    async def start_session(self, **kwargs: Any) -> AsyncIOMotorClientSession:
        """
        Start a client session; the caller must end it.

        Mirrors ``AsyncIOMotorClient.start_session`` so the manager can be
        used wherever a client is expected.
        """
        return await self.mongo_client.start_session(**kwargs)

    @asynccontextmanager
    async def session(self, **kwargs: Any) -> AsyncIterator[AsyncIOMotorClientSession]:
        """
        Scoped session: ended on every exit path.

        Yields:
            An open AsyncIOMotorClientSession
        """
        client_session = await self.start_session(**kwargs)
        try:
            yield client_session
        finally:
            await client_session.end_session()

    @property
    def mongo_client(self) -> AsyncIOMotorClient:
        """
        Get the MongoDB client.

        Raises:
            RuntimeError: If connection is not initialized
        """
        if not self._initialized:
            raise RuntimeError(
                "ConnectionManager not initialized. Call initialize() first.",
            )
        assert (
            self._mongo_client is not None
        ), "MongoDB client should not be None after initialization"
        return self._mongo_client

    @property
    def mongo_db(self) -> AsyncIOMotorDatabase:
        """
        Get the MongoDB database.

        Raises:
            RuntimeError: If connection is not initialized
        """
        if not self._initialized:
            raise RuntimeError(
                "ConnectionManager not initialized. Call initialize() first.",
            )
        return self._mongo_db

    @property
    def initialized(self) -> bool:
        """Check if connection is initialized."""
        return self._initialized
