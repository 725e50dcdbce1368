from user_directory.query.spec import (
    Disjunction,
    ExactMatch,
    Membership,
    PageSpec,
    PredicateSpec,
    QuerySpec,
    SortSpec,
    SubstringMatch,
)
from user_directory.query.translator import translate

__all__ = [
    "Disjunction",
    "ExactMatch",
    "Membership",
    "PageSpec",
    "PredicateSpec",
    "QuerySpec",
    "SortSpec",
    "SubstringMatch",
    "translate",
]
