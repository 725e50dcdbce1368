"""
SQLAlchemy declarative base and metadata.
Single place for table definitions; the durable store creates them at startup.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass
