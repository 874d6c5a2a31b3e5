"""
MongoDB Client
==============

Async MongoDB client using Motor for assessments, their history and the
reference catalogues they point at.

Version: 0.1.0
"""

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorClientSession,
    AsyncIOMotorDatabase,
)
from pymongo import ASCENDING, DESCENDING

from shared.config import settings
from shared.logging import get_logger

logger = get_logger(__name__)


# Collection names
PROJECTS = "projects"
SERVICE_STANDARDS = "serviceStandards"
PROFESSIONS = "professions"
ASSESSMENTS = "projectStandards"
ASSESSMENT_HISTORY = "projectStandardsHistory"


class MongoDBClient:
    """
    Async MongoDB client wrapper.

    Manages client lifecycle and provides database access.
    """

    _client: AsyncIOMotorClient | None = None  # type: ignore[type-arg]

    @classmethod
    def get_client(cls) -> AsyncIOMotorClient:  # type: ignore[type-arg]
        """Get or create the async client."""
        if cls._client is None:
            cls._client = AsyncIOMotorClient(
                settings.mongodb.uri,
                maxPoolSize=50,
                minPoolSize=10,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=5000,
                tz_aware=True,
            )
            logger.info(
                "mongodb_client_created",
                host=settings.mongodb.host,
                database=settings.mongodb.db,
            )
        return cls._client

    @classmethod
    def get_database(cls, name: str | None = None) -> AsyncIOMotorDatabase:  # type: ignore[type-arg]
        """
        Get a database instance.

        Args:
            name: Database name (default from settings)

        Returns:
            AsyncIOMotorDatabase instance
        """
        client = cls.get_client()
        db_name = name or settings.mongodb.db
        return client[db_name]

    @classmethod
    async def close(cls) -> None:
        """Close the client and release all connections."""
        if cls._client is not None:
            cls._client.close()
            cls._client = None
            logger.info("mongodb_client_closed")

    @classmethod
    async def health_check(cls) -> dict[str, Any]:
        """
        Check database health.

        Returns:
            dict with status and server info
        """
        try:
            start = time.perf_counter()
            client = cls.get_client()
            result = await client.admin.command("ping")
            latency_ms = (time.perf_counter() - start) * 1000

            server_info = await client.server_info()

            return {
                "status": "healthy" if result.get("ok") == 1 else "unhealthy",
                "latency_ms": round(latency_ms, 2),
                "version": server_info.get("version", "unknown"),
            }
        except Exception as e:
            logger.error("mongodb_health_check_failed", error=str(e))
            return {
                "status": "unhealthy",
                "error": str(e),
            }

    @classmethod
    async def create_indexes(cls, db: AsyncIOMotorDatabase | None = None) -> None:  # type: ignore[type-arg]
        """Create indexes for all collections."""
        db = db if db is not None else cls.get_database()

        # One current assessment per (project, standard, profession)
        await db[ASSESSMENTS].create_index(
            [("projectId", ASCENDING), ("standardId", ASCENDING), ("professionId", ASCENDING)],
            unique=True,
        )
        await db[ASSESSMENTS].create_index("projectId")

        await db[ASSESSMENT_HISTORY].create_index(
            [
                ("projectId", ASCENDING),
                ("standardId", ASCENDING),
                ("professionId", ASCENDING),
                ("timestamp", DESCENDING),
            ]
        )

        await db[SERVICE_STANDARDS].create_index("isActive")
        await db[SERVICE_STANDARDS].create_index("number")
        await db[PROFESSIONS].create_index("isActive")
        await db[PROFESSIONS].create_index("name", unique=True)

        logger.info("mongodb_indexes_created")

    @classmethod
    @asynccontextmanager
    async def transaction(cls) -> AsyncGenerator[AsyncIOMotorClientSession | None, None]:
        """
        Open a client session with a running transaction.

        Yields None when transactions are disabled in settings, so callers
        can pass the value straight through as ``session=``.
        """
        if not settings.mongodb.transactions:
            yield None
            return

        async with await cls.get_client().start_session() as session:
            async with session.start_transaction():
                yield session

