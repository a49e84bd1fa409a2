"""Unit tests for :class:`Deadline` and :class:`Cursor`."""

from __future__ import annotations

import pytest
from message_archive.store.base import Cursor, Deadline, DeadlineExceeded, check_deadline


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestDeadline:
    def test_after_counts_from_clock(self):
        clock = FakeClock()
        deadline = Deadline.after(5, clock=clock)

        assert deadline.remaining() == pytest.approx(5)
        assert not deadline.expired()

        clock.now += 5
        assert deadline.expired()
        assert deadline.remaining() == 0.0

    def test_check_raises_once_expired(self):
        clock = FakeClock()
        deadline = Deadline.after(1, clock=clock)
        deadline.check()

        clock.now += 2
        with pytest.raises(DeadlineExceeded):
            deadline.check()

    def test_check_deadline_tolerates_none(self):
        check_deadline(None)


class TestCursor:
    def test_exhaustion_closes(self):
        closed = []
        cursor = Cursor([{"n": 1}, {"n": 2}], close=lambda: closed.append(True))

        assert cursor.to_list() == [{"n": 1}, {"n": 2}]
        assert cursor.closed
        assert closed == [True]

    def test_close_is_idempotent(self):
        closed = []
        cursor = Cursor([], close=lambda: closed.append(True))
        cursor.close()
        cursor.close()
        assert closed == [True]

    def test_with_block_closes_on_early_exit(self):
        closed = []
        with Cursor(iter([{"n": 1}, {"n": 2}]), close=lambda: closed.append(True)) as cursor:
            next(cursor)
        assert cursor.closed and closed == [True]

    def test_deadline_expiry_mid_iteration_closes(self):
        clock = FakeClock()
        closed = []
        cursor = Cursor(
            [{"n": 1}, {"n": 2}, {"n": 3}],
            close=lambda: closed.append(True),
            deadline=Deadline.after(1, clock=clock),
        )

        assert next(cursor) == {"n": 1}
        clock.now += 10
        with pytest.raises(DeadlineExceeded):
            next(cursor)
        assert cursor.closed and closed == [True]

    def test_driver_error_closes(self):
        def rows():
            yield {"n": 1}
            raise RuntimeError("connection reset")

        closed = []
        cursor = Cursor(rows(), close=lambda: closed.append(True))
        with pytest.raises(RuntimeError):
            cursor.to_list()
        assert closed == [True]

    def test_iteration_after_close_stops(self):
        cursor = Cursor([{"n": 1}])
        cursor.close()
        assert list(cursor) == []
