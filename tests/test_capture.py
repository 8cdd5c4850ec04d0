"""
test_capture.py - Unit tests for captures, the clock and time series
"""

import pytest
from dataclasses import FrozenInstanceError
from decimal import Decimal

from bookkeeper import Capture, Clock, Tick, TimeSeries, STARTING_TIME


class TestCapture:

    def test_fields(self):
        capture = Capture(entity="x", timestamp=3)
        assert capture.entity == "x"
        assert capture.timestamp == 3

    def test_negative_timestamp_rejected(self):
        with pytest.raises(ValueError):
            Capture(entity="x", timestamp=-1)

    def test_non_int_timestamp_rejected(self):
        with pytest.raises(ValueError):
            Capture(entity="x", timestamp=True)

    def test_immutable(self):
        capture = Capture(entity="x", timestamp=0)
        with pytest.raises(FrozenInstanceError):
            capture.timestamp = 1


class TestClock:

    def test_fresh_clock_starts_at_starting_time(self):
        clock = Clock()
        assert Clock.STARTING_TIME == STARTING_TIME == 0
        assert clock.next() == Tick(time=0)
        assert clock.next() == Tick(time=1)
        assert clock.time == 2

    def test_current_does_not_advance(self):
        clock = Clock()
        assert clock.current().time == 0
        assert clock.current().time == 0

    def test_reset(self):
        clock = Clock(starting_time=5)
        clock.next()
        clock.next()
        clock.reset()
        assert clock.next().time == 5

    def test_tick_duration(self):
        clock = Clock(tick_duration=7)
        clock.next()
        tick = clock.next()
        assert tick == Tick(time=7, duration=7)

    def test_capture_uses_current_time(self):
        clock = Clock()
        clock.next()
        assert clock.capture("ledger") == Capture(entity="ledger", timestamp=1)

    def test_invalid_tick(self):
        with pytest.raises(ValueError):
            Tick(time=0, duration=0)
        with pytest.raises(ValueError):
            Tick(time=-2)


class TestTimeSeries:

    def test_tick_appends(self):
        clock = Clock()
        series = TimeSeries()
        for value in ("1", "2.5", "4"):
            series = series.tick(Decimal(value), clock.next())

        assert len(series) == 3
        assert series.timestamps() == (0, 1, 2)
        assert series.values() == (Decimal("1"), Decimal("2.5"), Decimal("4"))

    def test_receiver_unchanged(self):
        series = TimeSeries()
        longer = series.appending(1, 0)
        assert len(series) == 0
        assert len(longer) == 1

    def test_quantity_at(self):
        series = TimeSeries().appending("a", 0).appending("b", 3)
        assert series.quantity_at(3) == "b"
        assert series.quantity_at(1) is None

    def test_iterates_captures(self):
        series = TimeSeries().appending("a", 2)
        assert list(series) == [Capture(entity="a", timestamp=2)]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
