"""
Storage-neutral query descriptors.

A Predicate is a conjunction of clauses over document paths such as
"title" or "contactInfo.email". It says nothing about SQL; app.db.query
compiles it for the database, and Predicate.matches() evaluates it
against plain dicts.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Mapping, Optional, Tuple, Union


class Direction(IntEnum):
    ASC = 1
    DESC = -1


# Ordered (field, direction) pairs, most significant first
Ordering = Tuple[Tuple[str, Direction], ...]


def lookup(record: Mapping[str, Any], path: str) -> Any:
    """Resolve a dotted path in a nested mapping; missing parts give None."""
    value: Any = record
    for part in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


@dataclass(frozen=True)
class Equals:
    field: str
    value: Any

    def matches(self, record: Mapping[str, Any]) -> bool:
        return lookup(record, self.field) == self.value


@dataclass(frozen=True)
class Between:
    """Inclusive numeric range. A missing bound is unbounded on that side."""
    field: str
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    def matches(self, record: Mapping[str, Any]) -> bool:
        value = lookup(record, self.field)
        if value is None:
            return False
        if self.minimum is not None and value < self.minimum:
            return False
        if self.maximum is not None and value > self.maximum:
            return False
        return True


@dataclass(frozen=True)
class TextSearch:
    """Case-insensitive substring match on any of the fields."""
    fields: Tuple[str, ...]
    text: str

    def matches(self, record: Mapping[str, Any]) -> bool:
        needle = self.text.lower()
        for path in self.fields:
            value = lookup(record, path)
            if value is not None and needle in str(value).lower():
                return True
        return False


Clause = Union[Equals, Between, TextSearch]


@dataclass(frozen=True)
class Predicate:
    clauses: Tuple[Clause, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.clauses

    def where(self, clause: Clause) -> "Predicate":
        return Predicate(self.clauses + (clause,))

    def matches(self, record: Mapping[str, Any]) -> bool:
        return all(clause.matches(record) for clause in self.clauses)


EMPTY = Predicate()
