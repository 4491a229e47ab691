import pytest

from app.services.filters import (
    admin_package_filters,
    booking_filters,
    package_filters,
    parse_range,
    user_filters,
)
from app.services.predicates import Between, Equals, TextSearch, EMPTY


# parse_range
@pytest.mark.parametrize("text, expected", [
    ("4-7 Days", (4, 7)),
    ("1-3 Days", (1, 3)),
    ("$0-$500", (0, 500)),
    ("₹20,000 - ₹30,000", (20000, 30000)),
    ("7+ Days", (7, None)),
    ("$1000+", (1000, None)),
    ("2.5-4.5", (2.5, 4.5)),
])
def test_parse_range_shapes(text, expected):
    """Closed and open ranges, with units, currency symbols and separators"""
    assert parse_range(text) == expected


@pytest.mark.parametrize("text", [None, "", "abc", "Days 4-7", "-5", "1-2-3", "+7"])
def test_parse_range_rejects_unparseable(text):
    assert parse_range(text) is None


def test_parse_range_keeps_reversed_bounds():
    """A reversed range is not swapped; it simply matches nothing"""
    assert parse_range("9-3 Days") == (9, 3)
    clause = Between("duration", 9, 3)
    assert not any(clause.matches({"duration": d}) for d in range(0, 15))


# package_filters
def test_package_filters_empty_params_give_empty_predicate():
    assert package_filters({}) == EMPTY
    assert package_filters({"search": "   ", "featured": "false"}).is_empty


def test_package_filters_sentinels_are_ignored():
    predicate = package_filters({
        "location": "All Locations",
        "duration": "Any Duration",
        "priceRange": "Any Price",
    })
    assert predicate.is_empty


def test_package_filters_builds_all_clauses():
    predicate = package_filters({
        "search": "taj",
        "location": "Agra",
        "duration": "4-7 Days",
        "priceRange": "$1000+",
        "featured": "true",
    })
    assert predicate.clauses == (
        TextSearch(("title", "description", "shortDescription"), "taj"),
        Equals("location", "Agra"),
        Between("duration", 4, 7),
        Between("price", 1000, None),
        Equals("featured", True),
    )


def test_package_filters_drops_malformed_ranges():
    predicate = package_filters({"duration": "a week", "priceRange": "cheap"})
    assert predicate.is_empty


def test_package_predicate_matches_documents():
    predicate = package_filters({"search": "BEACH", "duration": "3-5 Days"})
    assert predicate.matches({"title": "Goa Beach Weekend", "duration": 3})
    assert predicate.matches({"title": "Goa", "shortDescription": "beach time", "duration": 5})
    assert not predicate.matches({"title": "Goa Beach Weekend", "duration": 6})
    assert not predicate.matches({"title": "Ladakh", "duration": 4})


# admin_package_filters
@pytest.mark.parametrize("featured, expected", [
    ("true", (Equals("featured", True),)),
    ("false", (Equals("featured", False),)),
    ("maybe", ()),
    (None, ()),
])
def test_admin_package_featured_flag(featured, expected):
    assert admin_package_filters({"featured": featured}).clauses == expected


def test_admin_package_search_covers_location():
    predicate = admin_package_filters({"search": "kerala"})
    assert predicate.matches({"title": "Backwaters", "location": "Kerala"})


# booking_filters
def test_booking_filters_accept_known_statuses():
    predicate = booking_filters({"status": "confirmed", "paymentStatus": "refunded"})
    assert predicate.clauses == (
        Equals("status", "confirmed"),
        Equals("paymentStatus", "refunded"),
    )


def test_booking_filters_ignore_unknown_statuses():
    predicate = booking_filters({"status": "shipped", "paymentStatus": "all"})
    assert predicate.is_empty


def test_booking_search_reaches_nested_contact_info():
    predicate = booking_filters({"search": "9876"})
    assert predicate.matches({"contactInfo": {"name": "Asha", "phone": "+91 9876543210"}})
    assert not predicate.matches({"contactInfo": {"name": "Rohan", "phone": "+91 9123"}})


# user_filters
def test_user_filters_role_sentinel_and_unknown_role():
    assert user_filters({"role": "all"}).is_empty
    assert user_filters({"role": "superuser"}).is_empty
    assert user_filters({"role": "admin"}).clauses == (Equals("role", "admin"),)


def test_user_filters_search_is_case_insensitive():
    predicate = user_filters({"search": "ASHA@"})
    assert predicate.matches({"name": "A. Verma", "email": "asha@example.com"})
