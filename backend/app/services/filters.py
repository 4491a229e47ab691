"""
Filter builder: query-string parameters -> Predicate.

Every builder is lenient. Sentinel values ("All Locations", "Any Price",
"all"), values outside a known enumeration and range strings that do not
parse are ignored instead of rejected, so any parameter set yields a
usable predicate (the empty predicate when nothing applies).

Range strings come straight from the UI dropdowns:
  "4-7 Days", "$0-$500", "20,000 - 30,000"  -> inclusive [min, max]
  "7+ Days", "$1000+"                        -> [min, unbounded)
A reversed range such as "9-3 Days" is passed through unchanged and
therefore matches nothing.
"""

from typing import Mapping, Optional, Tuple, Union
import re

from app.db.models import BookingStatus, PaymentStatus, UserRole
from app.services.predicates import Between, Equals, Predicate, TextSearch, EMPTY

# Sentinels meaning "do not filter on this field"
ALL_LOCATIONS = "All Locations"
ANY_DURATION = "Any Duration"
ANY_PRICE = "Any Price"
ALL = "all"

PACKAGE_SEARCH_FIELDS = ("title", "description", "shortDescription")
ADMIN_PACKAGE_SEARCH_FIELDS = ("title", "location", "description")
BOOKING_SEARCH_FIELDS = ("contactInfo.name", "contactInfo.email", "contactInfo.phone")
USER_SEARCH_FIELDS = ("name", "email")

BOOKING_STATUSES = frozenset(s.value for s in BookingStatus)
PAYMENT_STATUSES = frozenset(s.value for s in PaymentStatus)
USER_ROLES = frozenset(r.value for r in UserRole)

Number = Union[int, float]

_CURRENCY = re.compile(r"[$₹€£,]")
_NUMBER = r"(\d+(?:\.\d+)?)"
_CLOSED_RANGE = re.compile(rf"^{_NUMBER}\s*-\s*{_NUMBER}(?:\s+\S.*)?$")
_OPEN_RANGE = re.compile(rf"^{_NUMBER}\s*\+(?:\s*\S.*)?$")


def _param(params: Mapping[str, object], name: str) -> str:
    value = params.get(name)
    if value is None:
        return ""
    return str(value).strip()


def _number(text: str) -> Number:
    return float(text) if "." in text else int(text)


def parse_range(value: Optional[str]) -> Optional[Tuple[Number, Optional[Number]]]:
    """
    Parse "<min>-<max> <unit>" or "<min>+ <unit>".

    Returns (min, max) with max None for open ranges, or None when the
    text has neither shape.
    """
    if not value:
        return None
    text = _CURRENCY.sub("", str(value)).strip()

    match = _CLOSED_RANGE.match(text)
    if match:
        return _number(match.group(1)), _number(match.group(2))

    match = _OPEN_RANGE.match(text)
    if match:
        return _number(match.group(1)), None

    return None


def _with_search(predicate: Predicate, params, fields) -> Predicate:
    search = _param(params, "search")
    if search:
        return predicate.where(TextSearch(fields, search))
    return predicate


def _with_range(predicate: Predicate, params, name: str, field: str, sentinel: str) -> Predicate:
    raw = _param(params, name)
    if not raw or raw == sentinel:
        return predicate
    bounds = parse_range(raw)
    if bounds is None:
        return predicate
    minimum, maximum = bounds
    return predicate.where(Between(field, minimum, maximum))


def _with_member(predicate: Predicate, params, name: str, field: str, allowed) -> Predicate:
    value = _param(params, name)
    if value in allowed:
        return predicate.where(Equals(field, value))
    return predicate


def package_filters(params: Mapping[str, object]) -> Predicate:
    """Public catalogue: search, location, duration, priceRange, featured=true."""
    predicate = _with_search(EMPTY, params, PACKAGE_SEARCH_FIELDS)

    location = _param(params, "location")
    if location and location != ALL_LOCATIONS:
        predicate = predicate.where(Equals("location", location))

    predicate = _with_range(predicate, params, "duration", "duration", ANY_DURATION)
    predicate = _with_range(predicate, params, "priceRange", "price", ANY_PRICE)

    if _param(params, "featured") == "true":
        predicate = predicate.where(Equals("featured", True))

    return predicate


def admin_package_filters(params: Mapping[str, object]) -> Predicate:
    """Back-office package table: search and a two-way featured flag."""
    predicate = _with_search(EMPTY, params, ADMIN_PACKAGE_SEARCH_FIELDS)

    featured = _param(params, "featured")
    if featured == "true":
        predicate = predicate.where(Equals("featured", True))
    elif featured == "false":
        predicate = predicate.where(Equals("featured", False))

    return predicate


def booking_filters(params: Mapping[str, object]) -> Predicate:
    predicate = _with_member(EMPTY, params, "status", "status", BOOKING_STATUSES)
    predicate = _with_member(predicate, params, "paymentStatus", "paymentStatus", PAYMENT_STATUSES)
    return _with_search(predicate, params, BOOKING_SEARCH_FIELDS)


def user_filters(params: Mapping[str, object]) -> Predicate:
    predicate = _with_search(EMPTY, params, USER_SEARCH_FIELDS)
    # "all" is not a member of USER_ROLES, so the sentinel falls through here too
    return _with_member(predicate, params, "role", "role", USER_ROLES)
