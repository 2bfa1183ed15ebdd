"""
Roadmapper: Database Connection
===============================
One MongoDB client per process, opened lazily on first use.

ConnectionCache.connect() is safe to await from many requests at once: the
first caller starts the connection attempt and everyone else awaits the same
attempt. A failed attempt is forgotten, so the next caller tries again
instead of receiving the stale failure. close() drops the client.
"""

import asyncio
import logging
import re
from typing import Any, Callable, Optional

from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from roadmapper.core.config import settings
from roadmapper.core.errors import AuthConfigError

logger = logging.getLogger(__name__)

_SURROUNDING_QUOTES = re.compile(r"""^['"](.*)['"]$""")
_CREDENTIALS = re.compile(r"//([^:/@]+):[^@]+@")


def clean_uri(uri: str) -> str:
    """Strip quotes that some .env editors leave around the value."""
    return _SURROUNDING_QUOTES.sub(r"\1", uri.strip())


def sanitize_uri(uri: str) -> str:
    """Hide the credentials part of a connection string for logging."""
    return _CREDENTIALS.sub("//***:***@", uri)


class ConnectionCache:
    def __init__(
        self,
        uri: Optional[str] = None,
        db_name: Optional[str] = None,
        client_factory: Callable[..., Any] = AsyncMongoClient,
    ):
        raw_uri = uri if uri is not None else settings.mongodb_uri
        if not raw_uri:
            raise AuthConfigError(
                "Please define the MONGODB_URI or MONGO_URI environment variable inside .env"
            )
        self.uri = clean_uri(raw_uri)
        self.db_name = db_name or settings.MONGODB_DB
        self._client_factory = client_factory
        self._client: Optional[Any] = None
        self._pending: Optional[asyncio.Task] = None
        self.indexes_ready = False
        self._lock = asyncio.Lock()
        logger.info(f"[DB] Using MongoDB connection string (sanitized): {sanitize_uri(self.uri)}")

    @property
    def connected(self) -> bool:
        return self._client is not None

    async def _open(self) -> Any:
        logger.info("[DB] Establishing new MongoDB connection...")
        client = self._client_factory(
            self.uri,
            connectTimeoutMS=settings.DB_TIMEOUT_MS,
            socketTimeoutMS=settings.DB_TIMEOUT_MS,
            serverSelectionTimeoutMS=settings.DB_TIMEOUT_MS,
        )
        try:
            await client.admin.command("ping")
        except Exception:
            await client.close()
            raise
        logger.info("[DB] ✓ MongoDB connected successfully")
        return client

    async def connect(self) -> AsyncDatabase:
        """Return the database handle, connecting on first use."""
        if self._client is not None:
            return self._client[self.db_name]

        async with self._lock:
            if self._client is None and self._pending is None:
                self._pending = asyncio.create_task(self._open())
            pending = self._pending

        if pending is None:
            return self._client[self.db_name]

        try:
            client = await asyncio.shield(pending)
        except Exception as e:
            async with self._lock:
                if self._pending is pending:
                    self._pending = None
            logger.error(f"[DB] MongoDB connection error: {e}")
            raise

        async with self._lock:
            current = self._pending is pending
            if current:
                self._client = client
                self._pending = None
        if not current:
            # close() ran while this attempt was in flight
            await client.close()
            return await self.connect()
        return client[self.db_name]

    async def close(self) -> None:
        async with self._lock:
            client, self._client, self._pending = self._client, None, None
            self.indexes_ready = False
        if client is not None:
            await client.close()
            logger.info("[DB] MongoDB connection closed")
