"""
User store interface - the capability every storage backend provides.
The directory service only talks to this interface; it never checks which store it holds.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone

from user_directory.core.errors import ResetUnavailable
from user_directory.query.spec import PageSpec, PredicateSpec, SortSpec
from user_directory.schemas.user import UserFields, UserRecord


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def touched(previous: datetime) -> datetime:
    """New updated_at value, strictly after ``previous`` even on a coarse clock."""
    return max(utcnow(), previous + timedelta(microseconds=1))


class UserStore(ABC):
    """Async CRUD plus spec-driven queries over the single user collection.

    Stores own their records: every method returns copies, and uniqueness of
    email, phone and (country_code, phone) is enforced by the store itself,
    raising ``UniquenessConflict``.
    """

    kind: str = "abstract"

    @abstractmethod
    async def insert(self, fields: UserFields) -> UserRecord:
        """Assign id and timestamps, persist, return the stored record."""

    @abstractmethod
    async def get_by_id(self, user_id: str) -> UserRecord | None: ...

    @abstractmethod
    async def get_by_email(self, email: str, exclude_id: str | None = None) -> UserRecord | None: ...

    @abstractmethod
    async def get_by_phone(self, phone: str, exclude_id: str | None = None) -> UserRecord | None: ...

    @abstractmethod
    async def find_matching(
        self, predicate: PredicateSpec, sort: SortSpec, page: PageSpec
    ) -> list[UserRecord]:
        """Filter, then sort, then skip, then limit. Ties keep insertion order."""

    @abstractmethod
    async def count_matching(self, predicate: PredicateSpec) -> int: ...

    @abstractmethod
    async def update_by_id(self, user_id: str, fields: UserFields) -> UserRecord | None:
        """Overwrite every field, refresh updated_at. None when the id is unknown."""

    @abstractmethod
    async def delete_by_id(self, user_id: str) -> UserRecord | None: ...

    async def reset(self) -> None:
        """Drop every record. Only stores that support it override this."""
        raise ResetUnavailable(f"Reset is not available for the {self.kind} store")

    async def close(self) -> None:
        """Release connections at shutdown."""
        return None
