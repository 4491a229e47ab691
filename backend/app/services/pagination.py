"""
Pagination arithmetic shared by every paginated listing.

page and limit arrive as raw query-string text. Anything that is not a
number falls back to the default and anything below 1 is clamped to 1,
so the skip handed to storage is never negative. Huge pages are clamped
so the skip still fits a signed 64-bit OFFSET.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar
import math

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_SKIP = 2 ** 63 - 1


def coerce_positive(value: Any, default: int) -> int:
    """Lenient int parse: "2" -> 2, "2.9" -> 2, "-4" -> 1, "abc"/None -> default."""
    if value is None:
        return default
    try:
        number = int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return default
    return max(number, 1)


@dataclass(frozen=True)
class PageRequest:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_params(
        cls,
        page: Any = None,
        limit: Any = None,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: Optional[int] = None,
    ) -> "PageRequest":
        page_number = coerce_positive(page, DEFAULT_PAGE)
        page_size = min(coerce_positive(limit, default_limit), MAX_SKIP)
        if max_limit is not None:
            page_size = min(page_size, max_limit)
        page_number = min(page_number, MAX_SKIP // page_size + 1)
        return cls(page=page_number, limit=page_size)


@dataclass(frozen=True)
class PaginationSummary:
    total: int
    page: int
    limit: int
    pages: int

    @classmethod
    def build(cls, total: int, request: PageRequest) -> "PaginationSummary":
        pages = math.ceil(total / request.limit) if total > 0 else 0
        return cls(total=total, page=request.page, limit=request.limit, pages=pages)

    def as_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "pages": self.pages,
        }


@dataclass
class Page(Generic[T]):
    items: List[T] = field(default_factory=list)
    pagination: PaginationSummary = field(
        default_factory=lambda: PaginationSummary.build(0, PageRequest())
    )
