"""
Async engine and session factory for the durable store.
Built once at startup by store selection; one session per store operation.
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _register_sqlite_functions(dbapi_connection, connection_record) -> None:
    # SQLite's built-in lower() folds ASCII only; case-insensitive matching
    # must fold every letter the way str.lower() does.
    dbapi_connection.create_function("lower", 1, _unicode_lower)


def create_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """Async engine with connection pool. SQLite URLs skip the pool sizing options."""
    options: dict = {"echo": echo, "pool_pre_ping": True}
    if not database_url.startswith("sqlite"):
        options.update(pool_size=10, max_overflow=20)
    engine = create_async_engine(database_url, **options)
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _register_sqlite_functions)
    return engine


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
