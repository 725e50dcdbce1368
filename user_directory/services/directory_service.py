"""
Directory service - business logic for user records.
Orchestrates validation, uniqueness checks, query translation and the active store.
Design: depends only on the UserStore interface; the store is chosen once at startup.
"""

import logging
import math
from collections.abc import Mapping
from typing import Any

from prometheus_client import Counter

from user_directory.core.errors import InternalFailure, UniquenessConflict, UserNotFound
from user_directory.db.stores.base_store import UserStore
from user_directory.query.translator import translate
from user_directory.schemas.user import UserPage, UserQuery, UserRecord, parse_user

logger = logging.getLogger(__name__)

LIST_FAILURES = Counter(
    "user_directory_list_failures_total",
    "List queries answered with an empty page because the store failed",
)
WRITES = Counter(
    "user_directory_writes_total",
    "Successful user writes",
    ["operation"],
)


class DirectoryService:
    """Handles all user use cases: list, get, create, update, delete, reset."""

    def __init__(self, store: UserStore):
        self.store = store

    @property
    def store_kind(self) -> str:
        return self.store.kind

    async def list_users(self, query: UserQuery) -> UserPage:
        """Filtered, sorted page of users. Store failures degrade to an empty page."""
        spec = translate(query)
        try:
            users = await self.store.find_matching(spec.predicate, spec.sort, spec.page)
            total = await self.store.count_matching(spec.predicate)
        except Exception:
            logger.exception("List query failed for %r", spec)
            LIST_FAILURES.inc()
            return UserPage(
                success=False,
                count=0,
                total=0,
                total_pages=0,
                current_page=spec.page.page,
                data=[],
                message="Server Error during user filtering",
            )
        return UserPage(
            count=len(users),
            total=total,
            total_pages=math.ceil(total / spec.page.limit),
            current_page=spec.page.page,
            data=users,
        )

    async def get_user(self, user_id: str) -> UserRecord:
        user = await self._call(self.store.get_by_id(user_id))
        if user is None:
            raise UserNotFound(user_id)
        return user

    async def create_user(self, payload: Mapping[str, Any]) -> UserRecord:
        """Validate, check email then phone uniqueness, insert."""
        fields = parse_user(payload)
        await self._ensure_email_free(fields.email)
        await self._ensure_phone_free(fields.phone)
        user = await self._call(self.store.insert(fields))
        logger.info("Created user id=%s email=%s", user.id, user.email)
        WRITES.labels(operation="create").inc()
        return user

    async def update_user(self, user_id: str, payload: Mapping[str, Any]) -> UserRecord:
        """Re-validate every field; re-check uniqueness only for values that changed."""
        current = await self.get_user(user_id)
        fields = parse_user(payload, for_update=True)
        if fields.email != current.email:
            await self._ensure_email_free(fields.email, exclude_id=user_id)
        if fields.phone != current.phone or fields.country_code != current.country_code:
            await self._ensure_phone_free(fields.phone, exclude_id=user_id)
        user = await self._call(self.store.update_by_id(user_id, fields))
        if user is None:
            # Deleted between the load and the write
            raise UserNotFound(user_id)
        logger.info("Updated user id=%s", user_id)
        WRITES.labels(operation="update").inc()
        return user

    async def delete_user(self, user_id: str) -> UserRecord:
        user = await self._call(self.store.delete_by_id(user_id))
        if user is None:
            raise UserNotFound(user_id)
        logger.info("Deleted user id=%s", user_id)
        WRITES.labels(operation="delete").inc()
        return user

    async def reset(self) -> None:
        """Clear the store. Raises ResetUnavailable when the store cannot be reset."""
        await self.store.reset()
        WRITES.labels(operation="reset").inc()

    async def _ensure_email_free(self, email: str, exclude_id: str | None = None) -> None:
        if await self._call(self.store.get_by_email(email, exclude_id)) is not None:
            raise UniquenessConflict("email")

    async def _ensure_phone_free(self, phone: str, exclude_id: str | None = None) -> None:
        if await self._call(self.store.get_by_phone(phone, exclude_id)) is not None:
            raise UniquenessConflict("phone")

    async def _call(self, operation):
        """Await a store operation; unexpected errors become InternalFailure."""
        try:
            return await operation
        except (UniquenessConflict, UserNotFound):
            raise
        except Exception as exc:
            logger.exception("Store operation failed")
            raise InternalFailure(str(exc)) from exc
