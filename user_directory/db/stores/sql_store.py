"""
SQL user store - the durable backend (PostgreSQL in deployment, SQLite in tests).
Predicate clauses are compiled to SQL; the database does filter, sort, paging and count.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import String, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from user_directory.core.errors import UniquenessConflict
from user_directory.db.base import Base
from user_directory.db.models.user import UserHobby, UserRow
from user_directory.db.session import create_session_maker
from user_directory.db.stores.base_store import UserStore, touched, utcnow
from user_directory.query.spec import (
    LIST_FIELDS,
    SORT_FIELDS,
    TEXT_FIELDS,
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

# Largest OFFSET/LIMIT value SQLite and PostgreSQL accept (signed 64-bit).
MAX_ROW_COUNT = 2**63 - 1


async def prepare_schema(engine: AsyncEngine) -> None:
    """Create the user tables if missing. Also serves as the connectivity check."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def _parse_id(user_id: str | None) -> int | None:
    """Map an opaque id to the primary key. Ids the store never issued map to None."""
    try:
        pk = int(user_id)
    except (TypeError, ValueError):
        return None
    return pk if str(pk) == user_id else None


def _to_record(row: UserRow) -> UserRecord:
    return UserRecord(
        id=str(row.id),
        name=row.name,
        email=row.email,
        country_code=row.country_code,
        phone=row.phone,
        place=row.place,
        gender=row.gender,
        hobbies=[h.name for h in row.hobby_rows],
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


def _hobby_rows(hobbies: list[str]) -> list[UserHobby]:
    return [UserHobby(position=i, name=name) for i, name in enumerate(hobbies)]


def _column(field: str):
    if field not in SORT_FIELDS:
        raise ValueError(f"Unknown user field: {field!r}")
    return getattr(UserRow, field)


def _condition(clause: Clause):
    """Compile one clause to a SQL expression."""
    if isinstance(clause, SubstringMatch):
        lowered = func.lower(_column(clause.field), type_=String)
        return lowered.contains(clause.value.lower(), autoescape=True)
    if isinstance(clause, ExactMatch):
        return _column(clause.field) == clause.value
    if isinstance(clause, Membership):
        if clause.field not in LIST_FIELDS:
            raise ValueError(f"Unknown list field: {clause.field!r}")
        return UserRow.hobby_rows.any(UserHobby.name.in_(clause.values))
    if isinstance(clause, Disjunction):
        return or_(*(_condition(inner) for inner in clause.clauses))
    raise TypeError(f"Unsupported clause: {clause!r}")


def _conditions(predicate: PredicateSpec) -> list:
    return [_condition(clause) for clause in predicate.clauses]


def _conflict(exc: IntegrityError) -> UniquenessConflict:
    detail = str(exc.orig)
    return UniquenessConflict("email" if "email" in detail else "phone")


class SqlUserStore(UserStore):
    """Durable store. One session per operation; constraints close the check-then-insert race."""

    kind = "durable"

    def __init__(self, engine: AsyncEngine):
        self._engine = engine
        self._session_maker = create_session_maker(engine)

    def _order_by(self, sort: SortSpec) -> list:
        column = _column(sort.field)
        if sort.field in TEXT_FIELDS and self._engine.dialect.name == "postgresql":
            # Code-point order, same as Python string comparison
            column = column.collate("C")
        primary = column.desc() if sort.descending else column.asc()
        return [primary, UserRow.id.asc()]

    async def _commit(self, session: AsyncSession) -> None:
        try:
            await session.commit()
        except IntegrityError as exc:
            await session.rollback()
            logger.info("Uniqueness violation: %s", exc.orig)
            raise _conflict(exc) from exc

    async def _first(self, session: AsyncSession, condition, exclude_id: str | None) -> UserRow | None:
        stmt = select(UserRow).where(condition)
        excluded = _parse_id(exclude_id)
        if excluded is not None:
            stmt = stmt.where(UserRow.id != excluded)
        result = await session.execute(stmt.limit(1))
        return result.scalars().first()

    async def insert(self, fields: UserFields) -> UserRecord:
        now = utcnow()
        row = UserRow(
            **fields.model_dump(exclude={"hobbies"}),
            hobby_rows=_hobby_rows(fields.hobbies),
            created_at=now,
            updated_at=now,
        )
        async with self._session_maker() as session:
            session.add(row)
            await self._commit(session)
            return _to_record(row)

    async def get_by_id(self, user_id: str) -> UserRecord | None:
        pk = _parse_id(user_id)
        if pk is None:
            return None
        async with self._session_maker() as session:
            row = await session.get(UserRow, pk)
            return _to_record(row) if row else None

    async def get_by_email(self, email: str, exclude_id: str | None = None) -> UserRecord | None:
        async with self._session_maker() as session:
            row = await self._first(session, UserRow.email == email, exclude_id)
            return _to_record(row) if row else None

    async def get_by_phone(self, phone: str, exclude_id: str | None = None) -> UserRecord | None:
        async with self._session_maker() as session:
            row = await self._first(session, UserRow.phone == phone, exclude_id)
            return _to_record(row) if row else None

    async def find_matching(
        self, predicate: PredicateSpec, sort: SortSpec, page: PageSpec
    ) -> list[UserRecord]:
        if page.skip >= MAX_ROW_COUNT:
            # No table holds that many rows; the page is empty.
            return []
        stmt = (
            select(UserRow)
            .where(*_conditions(predicate))
            .order_by(*self._order_by(sort))
            .offset(page.skip)
            .limit(min(page.limit, MAX_ROW_COUNT))
        )
        async with self._session_maker() as session:
            result = await session.execute(stmt)
            return [_to_record(row) for row in result.scalars().all()]

    async def count_matching(self, predicate: PredicateSpec) -> int:
        stmt = select(func.count()).select_from(UserRow).where(*_conditions(predicate))
        async with self._session_maker() as session:
            result = await session.execute(stmt)
            return result.scalar_one()

    async def update_by_id(self, user_id: str, fields: UserFields) -> UserRecord | None:
        pk = _parse_id(user_id)
        if pk is None:
            return None
        async with self._session_maker() as session:
            row = await session.get(UserRow, pk)
            if row is None:
                return None
            for key, value in fields.model_dump(exclude={"hobbies"}).items():
                setattr(row, key, value)
            row.hobby_rows = _hobby_rows(fields.hobbies)
            row.updated_at = touched(_aware(row.updated_at))
            await self._commit(session)
            return _to_record(row)

    async def delete_by_id(self, user_id: str) -> UserRecord | None:
        pk = _parse_id(user_id)
        if pk is None:
            return None
        async with self._session_maker() as session:
            row = await session.get(UserRow, pk)
            if row is None:
                return None
            record = _to_record(row)
            await session.delete(row)
            await session.commit()
            return record

    async def close(self) -> None:
        await self._engine.dispose()
