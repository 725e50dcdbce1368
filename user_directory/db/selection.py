"""
Startup store selection.

The durable store is tried once, bounded by ``database_connect_timeout``. If it
cannot be reached the in-memory store is used for the rest of the process;
there is no switching back at runtime.
"""

import asyncio
import logging

from user_directory.config import Settings
from user_directory.core.errors import BackendUnavailable
from user_directory.db.session import create_engine
from user_directory.db.stores import MemoryUserStore, SqlUserStore, UserStore
from user_directory.db.stores.sql_store import prepare_schema

logger = logging.getLogger(__name__)


async def connect_durable_store(settings: Settings) -> SqlUserStore:
    """Connect and create the schema, or raise BackendUnavailable."""
    try:
        engine = create_engine(settings.database_url, echo=settings.debug)
    except Exception as exc:
        # Malformed URL or missing driver
        raise BackendUnavailable(f"Cannot build engine: {exc!r}") from exc
    try:
        await asyncio.wait_for(prepare_schema(engine), timeout=settings.database_connect_timeout)
    except Exception as exc:
        await engine.dispose()
        raise BackendUnavailable(f"Durable store unreachable: {exc!r}") from exc
    return SqlUserStore(engine)


async def select_user_store(settings: Settings) -> UserStore:
    """Pick the store for this process. Never raises for an unreachable database."""
    if not settings.database_url:
        logger.info("No database_url configured, using in-memory user store")
        return MemoryUserStore()
    try:
        store = await connect_durable_store(settings)
    except BackendUnavailable as exc:
        logger.warning("%s; falling back to in-memory user store", exc)
        return MemoryUserStore()
    logger.info("Connected to durable user store")
    return store
