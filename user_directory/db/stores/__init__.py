# Storage backends: one interface, a durable SQL store and an in-memory fallback

from user_directory.db.stores.base_store import UserStore
from user_directory.db.stores.memory_store import MemoryUserStore
from user_directory.db.stores.sql_store import SqlUserStore

__all__ = ["UserStore", "MemoryUserStore", "SqlUserStore"]
