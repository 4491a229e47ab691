import pytest

from app.services.pagination import MAX_SKIP, PageRequest, PaginationSummary, coerce_positive
from app.services.sorting import (
    PACKAGE_SORTS,
    resolve_package_sort,
    resolve_user_sort,
)
from app.services.predicates import Direction


# coerce_positive / PageRequest
@pytest.mark.parametrize("raw, expected", [
    ("3", 3),
    ("2.9", 2),
    ("0", 1),
    ("-4", 1),
    ("abc", 10),
    (None, 10),
    ("", 10),
    ("1e400", 10),
])
def test_coerce_positive(raw, expected):
    assert coerce_positive(raw, 10) == expected


def test_page_request_skip_is_never_negative():
    for page in ("-3", "0", "x", None):
        request = PageRequest.from_params(page, "10")
        assert request.page == 1
        assert request.skip == 0


def test_page_request_caps_limit():
    request = PageRequest.from_params("2", "5000", default_limit=10, max_limit=100)
    assert request.limit == 100
    assert request.skip == 100


@pytest.mark.parametrize("page", ["1e30", "99999999999999999999", str(2 ** 70)])
def test_page_request_keeps_skip_within_64_bits(page):
    request = PageRequest.from_params(page, "10", max_limit=100)
    assert request.limit == 10
    assert 0 <= request.skip <= MAX_SKIP
    assert request.page == MAX_SKIP // 10 + 1


def test_page_request_bounds_uncapped_limit():
    request = PageRequest.from_params("3", "1e30")
    assert request.limit == MAX_SKIP
    assert request.skip <= MAX_SKIP


# PaginationSummary
@pytest.mark.parametrize("total, limit, pages", [
    (0, 10, 0),
    (1, 10, 1),
    (10, 10, 1),
    (11, 10, 2),
    (25, 5, 5),
])
def test_pages_is_ceiling_of_total_over_limit(total, limit, pages):
    summary = PaginationSummary.build(total, PageRequest(page=1, limit=limit))
    assert summary.pages == pages
    assert summary.as_dict() == {"total": total, "page": 1, "limit": limit, "pages": pages}


# sorting
def test_unknown_package_sort_falls_back_to_popular():
    assert resolve_package_sort("cheapest") == PACKAGE_SORTS["popular"]
    assert resolve_package_sort(None) == (("featured", Direction.DESC), ("price", Direction.ASC))


def test_named_package_sorts():
    assert resolve_package_sort("price-high-low") == (("price", Direction.DESC),)
    assert resolve_package_sort("newest") == (("createdAt", Direction.DESC),)


def test_user_sort_directions():
    assert resolve_user_sort("createdAt") == (("createdAt", Direction.DESC),)
    assert resolve_user_sort("email") == (("email", Direction.ASC),)
    assert resolve_user_sort("password") == (("name", Direction.ASC),)
