"""
In-memory user store - used when the durable store is unreachable at startup.
Re-implements the query semantics in Python; lives for the process lifetime.
"""

import asyncio
import logging
from datetime import datetime

from user_directory.core.errors import UniquenessConflict
from user_directory.db.stores.base_store import UserStore, touched, utcnow
from user_directory.query.spec import (
    Clause,
    Disjunction,
    ExactMatch,
    Membership,
    PageSpec,
    PredicateSpec,
    SortSpec,
    SubstringMatch,
)
from user_directory.schemas.user import UserFields, UserRecord

logger = logging.getLogger(__name__)


def clause_matches(record: UserRecord, clause: Clause) -> bool:
    """Evaluate one clause against a record."""
    if isinstance(clause, SubstringMatch):
        return clause.value.lower() in getattr(record, clause.field).lower()
    if isinstance(clause, ExactMatch):
        return getattr(record, clause.field) == clause.value
    if isinstance(clause, Membership):
        return not set(clause.values).isdisjoint(getattr(record, clause.field))
    if isinstance(clause, Disjunction):
        return any(clause_matches(record, inner) for inner in clause.clauses)
    raise TypeError(f"Unsupported clause: {clause!r}")


def predicate_matches(record: UserRecord, predicate: PredicateSpec) -> bool:
    return all(clause_matches(record, clause) for clause in predicate.clauses)


class MemoryUserStore(UserStore):
    """Ordered list of records plus a monotonic id counter, behind one lock.

    The list is kept in insertion order, which is also ascending id order, so a
    stable sort leaves equal keys in the same order the SQL store produces.
    """

    kind = "volatile"

    def __init__(self) -> None:
        self._records: list[UserRecord] = []
        self._next_id = 1
        self._last_stamp: datetime | None = None
        self._lock = asyncio.Lock()

    def _stamp(self) -> datetime:
        """Timestamp strictly after every one this store has issued."""
        self._last_stamp = utcnow() if self._last_stamp is None else touched(self._last_stamp)
        return self._last_stamp

    def _index_of(self, user_id: str) -> int | None:
        for index, record in enumerate(self._records):
            if record.id == user_id:
                return index
        return None

    def _check_unique(self, fields: UserFields, exclude_id: str | None = None) -> None:
        others = [r for r in self._records if r.id != exclude_id]
        if any(r.email == fields.email for r in others):
            raise UniquenessConflict("email")
        # A unique phone also makes (country_code, phone) unique.
        if any(r.phone == fields.phone for r in others):
            raise UniquenessConflict("phone")

    def _find_first(self, attr: str, value: str, exclude_id: str | None) -> UserRecord | None:
        for record in self._records:
            if record.id != exclude_id and getattr(record, attr) == value:
                return record.model_copy(deep=True)
        return None

    async def insert(self, fields: UserFields) -> UserRecord:
        async with self._lock:
            self._check_unique(fields)
            now = self._stamp()
            record = UserRecord(
                id=str(self._next_id),
                created_at=now,
                updated_at=now,
                **fields.model_dump(),
            )
            self._next_id += 1
            self._records.append(record)
            logger.debug("In-memory insert id=%s (%d records)", record.id, len(self._records))
            return record.model_copy(deep=True)

    async def get_by_id(self, user_id: str) -> UserRecord | None:
        async with self._lock:
            index = self._index_of(user_id)
            return None if index is None else self._records[index].model_copy(deep=True)

    async def get_by_email(self, email: str, exclude_id: str | None = None) -> UserRecord | None:
        async with self._lock:
            return self._find_first("email", email, exclude_id)

    async def get_by_phone(self, phone: str, exclude_id: str | None = None) -> UserRecord | None:
        async with self._lock:
            return self._find_first("phone", phone, exclude_id)

    async def find_matching(
        self, predicate: PredicateSpec, sort: SortSpec, page: PageSpec
    ) -> list[UserRecord]:
        async with self._lock:
            matched = [r for r in self._records if predicate_matches(r, predicate)]
            ordered = sorted(
                matched, key=lambda r: getattr(r, sort.field), reverse=sort.descending
            )
            window = ordered[page.skip : page.skip + page.limit]
            return [r.model_copy(deep=True) for r in window]

    async def count_matching(self, predicate: PredicateSpec) -> int:
        async with self._lock:
            return sum(1 for r in self._records if predicate_matches(r, predicate))

    async def update_by_id(self, user_id: str, fields: UserFields) -> UserRecord | None:
        async with self._lock:
            index = self._index_of(user_id)
            if index is None:
                return None
            self._check_unique(fields, exclude_id=user_id)
            current = self._records[index]
            updated = UserRecord(
                id=current.id,
                created_at=current.created_at,
                updated_at=self._stamp(),
                **fields.model_dump(),
            )
            self._records[index] = updated
            return updated.model_copy(deep=True)

    async def delete_by_id(self, user_id: str) -> UserRecord | None:
        async with self._lock:
            index = self._index_of(user_id)
            if index is None:
                return None
            return self._records.pop(index)

    async def reset(self) -> None:
        async with self._lock:
            self._records.clear()
            self._next_id = 1
        logger.info("In-memory user store has been reset")
