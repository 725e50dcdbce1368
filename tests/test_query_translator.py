"""
Query translator tests - parameters to predicate/sort/page specs.
"""

import pytest

from user_directory.query import (
    Disjunction,
    ExactMatch,
    Membership,
    PageSpec,
    SortSpec,
    SubstringMatch,
    translate,
)
from user_directory.schemas.user import UserQuery


def test_empty_query_uses_defaults():
    spec = translate(UserQuery())
    assert spec.predicate.clauses == ()
    assert spec.sort == SortSpec("created_at", descending=False)
    assert spec.page == PageSpec(page=1, limit=10)
    assert spec.page.skip == 0


def test_blank_values_add_no_clauses():
    spec = translate(UserQuery(search="   ", name="", gender=" ", hobbies=["", "  "]))
    assert spec.predicate.clauses == ()


def test_search_is_a_disjunction_over_name_email_place():
    spec = translate(UserQuery(search="ann"))
    assert spec.predicate.clauses == (
        Disjunction(
            (
                SubstringMatch("name", "ann"),
                SubstringMatch("email", "ann"),
                SubstringMatch("place", "ann"),
            )
        ),
    )


def test_all_filters_in_fixed_order():
    query = UserQuery(
        search="a",
        name="Ann",
        email="example",
        phone="555",
        place="Ber",
        gender="female",
        country_code="+44",
        hobbies=["coding", "chess"],
    )
    clauses = translate(query).predicate.clauses
    assert clauses[1:] == (
        SubstringMatch("name", "Ann"),
        SubstringMatch("email", "example"),
        SubstringMatch("phone", "555"),
        SubstringMatch("place", "Ber"),
        ExactMatch("gender", "female"),
        ExactMatch("country_code", "+44"),
        Membership("hobbies", ("coding", "chess")),
    )


def test_camel_case_aliases_are_accepted():
    query = UserQuery.model_validate({"countryCode": "+91"})
    assert translate(query).predicate.clauses == (ExactMatch("country_code", "+91"),)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("name:asc", SortSpec("name", False)),
        ("name:desc", SortSpec("name", True)),
        ("name:DESC", SortSpec("name", False)),
        ("name:desc:extra", SortSpec("name", True)),
        ("name:asc:desc", SortSpec("name", False)),
        ("name", SortSpec("name", False)),
        ("countryCode:desc", SortSpec("country_code", True)),
        ("updatedAt:desc", SortSpec("updated_at", True)),
        ("password:desc", SortSpec("created_at", True)),
        ("", SortSpec("created_at", False)),
    ],
)
def test_sort_parsing(raw, expected):
    assert translate(UserQuery(sort=raw)).sort == expected


@pytest.mark.parametrize(
    "page, limit, expected",
    [
        ("3", "5", PageSpec(3, 5)),
        (2, 25, PageSpec(2, 25)),
        ("abc", None, PageSpec(1, 10)),
        ("-2", "0", PageSpec(1, 1)),
        ("1000", "10", PageSpec(1000, 10)),
        ("2abc", " 7", PageSpec(2, 7)),
        ("1.5", "x5", PageSpec(1, 10)),
        (str(10**19), str(10**19), PageSpec(10**19, 10**19)),
    ],
)
def test_page_coercion(page, limit, expected):
    assert translate(UserQuery(page=page, limit=limit)).page == expected


def test_skip_is_derived_from_page_and_limit():
    assert PageSpec(page=3, limit=5).skip == 10
