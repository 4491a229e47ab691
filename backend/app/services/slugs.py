"""URL slugs for packages."""

from typing import Callable
import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    slug = _NON_ALNUM.sub("-", (title or "").lower()).strip("-")
    return slug or "package"


def unique_slug(title: str, exists: Callable[[str], bool]) -> str:
    """First of slug, slug-1, slug-2, ... for which exists() is False."""
    base = slugify(title)
    slug = base
    counter = 1
    while exists(slug):
        slug = f"{base}-{counter}"
        counter += 1
    return slug
