"""Store-agnostic filter predicates and sort keys.

Repositories describe *what* to match with :class:`Filter` values; each
collection adapter decides *how* to run them (SQL ``WHERE`` clauses for
:class:`~message_archive.store.sqlalchemy_collection.SQLAlchemyCollection`,
plain Python evaluation for
:class:`~message_archive.store.memory.InMemoryCollection`).

Filters are immutable and conjunctive: every builder method returns a
new :class:`Filter` with one more condition appended. The only disjunction
is :attr:`Op.CONTAINS_ANY`, which matches when any of its substrings occurs.
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

#: Field holding the tombstone timestamp on every soft-deletable document.
DELETED_AT = "deleted_at"


class Op(str, Enum):
    """Comparison operators understood by every collection adapter."""

    EQ = "eq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    IS_NULL = "is_null"
    CONTAINS = "contains"
    CONTAINS_ANY = "contains_any"


def _contains(current: Any, needle: str) -> bool:
    return str(needle).casefold() in str(current).casefold()


def _contains_any(current: Any, needles: Iterable[str]) -> bool:
    return any(_contains(current, needle) for needle in needles)


_COMPARATORS: Mapping[Op, Callable[[Any, Any], bool]] = {
    Op.EQ: operator.eq,
    Op.GT: operator.gt,
    Op.GTE: operator.ge,
    Op.LT: operator.lt,
    Op.LTE: operator.le,
    Op.CONTAINS: _contains,
    Op.CONTAINS_ANY: _contains_any,
}


@dataclass(frozen=True, slots=True)
class Condition:
    """A single ``field <op> value`` test.

    :param field: Document field name.
    :param op: Comparison operator.
    :param value: Right-hand operand (ignored for :attr:`Op.IS_NULL`).
    """

    field: str
    op: Op
    value: Any = None

    def matches(self, document: Mapping[str, Any]) -> bool:
        """Evaluate the condition against a plain document."""
        current = document.get(self.field)
        if self.op is Op.IS_NULL:
            return current is None
        if current is None:
            return False
        return _COMPARATORS[self.op](current, self.value)


@dataclass(frozen=True, slots=True)
class Filter:
    """Conjunction of :class:`Condition` values. An empty filter matches everything."""

    conditions: tuple[Condition, ...] = ()

    def where(self, field: str, op: Op, value: Any = None) -> Filter:
        return Filter(self.conditions + (Condition(field, op, value),))

    def eq(self, field: str, value: Any) -> Filter:
        return self.where(field, Op.EQ, value)

    def gt(self, field: str, value: Any) -> Filter:
        return self.where(field, Op.GT, value)

    def gte(self, field: str, value: Any) -> Filter:
        return self.where(field, Op.GTE, value)

    def lt(self, field: str, value: Any) -> Filter:
        return self.where(field, Op.LT, value)

    def lte(self, field: str, value: Any) -> Filter:
        return self.where(field, Op.LTE, value)

    def is_null(self, field: str) -> Filter:
        return self.where(field, Op.IS_NULL)

    def contains(self, field: str, text: str) -> Filter:
        """Case-insensitive substring match."""
        return self.where(field, Op.CONTAINS, text)

    def contains_any(self, field: str, texts: Iterable[str]) -> Filter:
        """Case-insensitive substring match on at least one of ``texts``."""
        return self.where(field, Op.CONTAINS_ANY, tuple(texts))

    def fields(self) -> set[str]:
        """Return the set of field names referenced by this filter."""
        return {c.field for c in self.conditions}

    def matches(self, document: Mapping[str, Any]) -> bool:
        """Return ``True`` when every condition holds for ``document``."""
        return all(c.matches(document) for c in self.conditions)


@dataclass(frozen=True, slots=True)
class SortKey:
    """Ordering on a single field.

    :param field: Document field name.
    :param descending: ``True`` for most-recent/greatest first.
    """

    field: str
    descending: bool = False


def descending(field: str) -> SortKey:
    """Shorthand for ``SortKey(field, descending=True)``."""
    return SortKey(field, descending=True)


def live(base: Filter | None = None) -> Filter:
    """Return ``base`` restricted to documents without a tombstone.

    Every read path in the repositories starts from this builder so that
    deleted records can never leak into results.
    """
    return (base or Filter()).is_null(DELETED_AT)


def sort_documents(
    documents: Iterable[Mapping[str, Any]], sort: Iterable[SortKey]
) -> list[Mapping[str, Any]]:
    """Sort plain documents by the given keys (stable, multi-key)."""
    ordered = list(documents)
    # Apply keys last-to-first so the first key has the highest precedence.
    for key in reversed(list(sort)):
        ordered.sort(key=lambda doc, f=key.field: doc.get(f), reverse=key.descending)
    return ordered


__all__ = [
    "DELETED_AT",
    "Condition",
    "Filter",
    "Op",
    "SortKey",
    "descending",
    "live",
    "sort_documents",
]
