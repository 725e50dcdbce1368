"""
Backend-agnostic query specification.

A list query becomes a ``QuerySpec``: a predicate (ANDed clauses), a single-field
sort and a skip/limit page. Every store interprets the same closed set of clause
kinds below.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ExactMatch:
    """Case-sensitive equality on a text field."""

    field: str
    value: str


@dataclass(frozen=True)
class SubstringMatch:
    """Case-insensitive literal substring containment on a text field."""

    field: str
    value: str


@dataclass(frozen=True)
class Membership:
    """Record matches when its list field shares at least one value with ``values``."""

    field: str
    values: tuple[str, ...]


@dataclass(frozen=True)
class Disjunction:
    """Record matches when any inner clause matches."""

    clauses: tuple["Clause", ...]


Clause = ExactMatch | SubstringMatch | Membership | Disjunction


@dataclass(frozen=True)
class PredicateSpec:
    clauses: tuple[Clause, ...] = ()


@dataclass(frozen=True)
class SortSpec:
    field: str = "created_at"
    descending: bool = False


@dataclass(frozen=True)
class PageSpec:
    page: int = 1
    limit: int = 10

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class QuerySpec:
    predicate: PredicateSpec = field(default_factory=PredicateSpec)
    sort: SortSpec = field(default_factory=SortSpec)
    page: PageSpec = field(default_factory=PageSpec)


# Attribute names a clause or sort may reference.
TEXT_FIELDS = frozenset({"name", "email", "phone", "place", "gender", "country_code"})
LIST_FIELDS = frozenset({"hobbies"})
SORT_FIELDS = TEXT_FIELDS | {"created_at", "updated_at"}
