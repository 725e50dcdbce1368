"""
Query translator - turns raw list parameters into a ``QuerySpec``.
Pure function: no store access, so both stores receive identical specs.
"""

import logging
import re
from typing import Any

from user_directory.query.spec import (
    Clause,
    Disjunction,
    ExactMatch,
    Membership,
    PageSpec,
    PredicateSpec,
    QuerySpec,
    SortSpec,
    SubstringMatch,
)
from user_directory.schemas.user import UserQuery

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
DEFAULT_SORT_FIELD = "created_at"

# Leading integer of a query value: "2abc" -> 2, " 7" -> 7, "1.5" -> 1.
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

SEARCH_FIELDS = ("name", "email", "place")
SUBSTRING_FIELDS = ("name", "email", "phone", "place")
EXACT_FIELDS = ("gender", "country_code")

# Wire sort names (camelCase) to record attributes.
SORTABLE = {
    "name": "name",
    "email": "email",
    "phone": "phone",
    "place": "place",
    "gender": "gender",
    "countryCode": "country_code",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}


def _text(value: str | None) -> str | None:
    """Return the value when it has non-blank content, else None."""
    if value is None or not value.strip():
        return None
    return value


def _coerce_int(value: Any, default: int) -> int:
    if isinstance(value, int):
        return max(value, 1)
    match = _LEADING_INT.match(value) if isinstance(value, str) else None
    if match is None:
        return default
    try:
        number = int(match.group(1))
    except ValueError:
        # Past the interpreter's digit limit for int()
        return default
    return max(number, 1)


def build_predicate(query: UserQuery) -> PredicateSpec:
    clauses: list[Clause] = []

    search = _text(query.search)
    if search is not None:
        clauses.append(Disjunction(tuple(SubstringMatch(f, search) for f in SEARCH_FIELDS)))

    for field in SUBSTRING_FIELDS:
        value = _text(getattr(query, field))
        if value is not None:
            clauses.append(SubstringMatch(field, value))

    for field in EXACT_FIELDS:
        value = _text(getattr(query, field))
        if value is not None:
            clauses.append(ExactMatch(field, value))

    hobbies = tuple(h for h in (query.hobbies or []) if h and h.strip())
    if hobbies:
        clauses.append(Membership("hobbies", hobbies))

    return PredicateSpec(tuple(clauses))


def parse_sort(raw: str | None) -> SortSpec:
    """Parse ``field:direction``. Only the literal ``desc`` sorts descending."""
    if raw is None or not raw.strip():
        return SortSpec(DEFAULT_SORT_FIELD, descending=False)
    name, *rest = raw.split(":")
    direction = rest[0] if rest else ""
    field = SORTABLE.get(name.strip())
    if field is None:
        logger.warning("Unknown sort field %r, falling back to %s", name, DEFAULT_SORT_FIELD)
        field = DEFAULT_SORT_FIELD
    return SortSpec(field, descending=direction == "desc")


def parse_page(page: Any, limit: Any) -> PageSpec:
    return PageSpec(page=_coerce_int(page, DEFAULT_PAGE), limit=_coerce_int(limit, DEFAULT_LIMIT))


def translate(query: UserQuery) -> QuerySpec:
    """Build the full predicate/sort/page spec for a list query."""
    spec = QuerySpec(
        predicate=build_predicate(query),
        sort=parse_sort(query.sort),
        page=parse_page(query.page, query.limit),
    )
    logger.debug("Translated %r into %r", query, spec)
    return spec
