"""
Sort resolver: named sort options -> Ordering.
Unknown names never fail; they resolve to the listing's default order.
"""

from typing import Dict, Optional

from app.services.predicates import Direction, Ordering

ASC = Direction.ASC
DESC = Direction.DESC

POPULAR = "popular"

PACKAGE_SORTS: Dict[str, Ordering] = {
    "price-low-high": (("price", ASC),),
    "price-high-low": (("price", DESC),),
    "newest": (("createdAt", DESC),),
    POPULAR: (("featured", DESC), ("price", ASC)),
}

NEWEST_FIRST: Ordering = (("createdAt", DESC),)

DEFAULT_USER_SORT = "name"
USER_SORT_FIELDS = frozenset({
    "name", "email", "phone", "role", "createdAt", "updatedAt", "lastLogin",
})


def resolve_package_sort(sort_by: Optional[str]) -> Ordering:
    return PACKAGE_SORTS.get((sort_by or "").strip(), PACKAGE_SORTS[POPULAR])


def resolve_user_sort(field: Optional[str]) -> Ordering:
    """Single-field sort: createdAt runs newest first, everything else ascending."""
    field = (field or "").strip()
    if field not in USER_SORT_FIELDS:
        field = DEFAULT_USER_SORT
    return ((field, DESC if field == "createdAt" else ASC),)
