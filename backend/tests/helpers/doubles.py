"""Hand-written test doubles for clocks and failing collections."""

from __future__ import annotations

from datetime import datetime, timedelta

from message_archive.store import CollectionError, Cursor


class MutableClock:
    """Wall clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> datetime:
        self.now = self.now + timedelta(**delta)
        return self.now


class FailingCollection:
    """Collection whose every operation fails like a broken transport."""

    name = "failing"

    def __init__(self, exc: Exception | None = None) -> None:
        self.exc = exc or CollectionError("connection refused")

    def insert_one(self, document, *, deadline=None):
        raise self.exc

    def update_one(self, filter, values, *, deadline=None):
        raise self.exc

    def find(self, filter, *, sort=(), deadline=None):
        raise self.exc

    def find_one(self, filter, *, deadline=None):
        raise self.exc


class BrokenCursorCollection(FailingCollection):
    """Collection whose ``find`` cursor fails after the first document."""

    name = "broken-cursor"

    def __init__(self, first: dict) -> None:
        super().__init__()
        self.first = first
        self.cursors: list[Cursor] = []

    def find(self, filter, *, sort=(), deadline=None):
        def rows():
            yield dict(self.first)
            raise CollectionError("cursor lost")

        cursor = Cursor(rows())
        self.cursors.append(cursor)
        return cursor
