"""
capture.py - Timestamped Values and the Discrete Clock

Time in the bookkeeping core is a non-negative integer period. This module
provides the primitives that tie values to periods:

1. Capture[T] - an entity paired with the period it was produced at
2. Tick - one step of the clock
3. Clock - a resettable counter handing out ticks, starting at STARTING_TIME
4. TimeSeries[T] - an immutable, append-only sequence of captures

Captures timestamp events, ledger snapshots and measurements alike.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Generic, Iterator, Optional, Tuple, TypeVar


# First period of every run. A run's opening snapshot is captured here.
STARTING_TIME = 0

T = TypeVar("T")


def _check_period(value: int, label: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{label} must be an int, got {value!r}")
    if value < 0:
        raise ValueError(f"{label} must be non-negative, got {value}")


@dataclass(frozen=True)
class Capture(Generic[T]):
    """
    A value together with the period at which it was produced.

    Attributes:
        entity: The captured value
        timestamp: Non-negative period
    """
    entity: T
    timestamp: int

    def __post_init__(self):
        _check_period(self.timestamp, "Capture timestamp")


@dataclass(frozen=True, slots=True)
class Tick:
    """One step of a Clock: the period it covers and its length in periods."""
    time: int
    duration: int = 1

    def __post_init__(self):
        _check_period(self.time, "Tick time")
        if self.duration < 1:
            raise ValueError(f"Tick duration must be positive, got {self.duration}")


class Clock:
    """
    Discrete clock handing out consecutive ticks.

    next() returns the tick for the current period and then advances, so a
    fresh clock first yields STARTING_TIME.

    Example:
        clock = Clock()
        clock.next().time  # 0
        clock.next().time  # 1
        clock.reset()
        clock.next().time  # 0
    """

    STARTING_TIME = STARTING_TIME

    def __init__(self, starting_time: int = STARTING_TIME, tick_duration: int = 1):
        _check_period(starting_time, "Clock starting time")
        self.starting_time = starting_time
        self.tick_duration = tick_duration
        self._time = starting_time

    @property
    def time(self) -> int:
        return self._time

    def next(self) -> Tick:
        tick = self.current()
        self._time += self.tick_duration
        return tick

    def current(self) -> Tick:
        return Tick(time=self._time, duration=self.tick_duration)

    def reset(self) -> None:
        self._time = self.starting_time

    def capture(self, entity: T) -> Capture[T]:
        """Timestamp `entity` with the clock's current period."""
        return Capture(entity=entity, timestamp=self._time)


@dataclass(frozen=True)
class TimeSeries(Generic[T]):
    """
    Immutable sequence of captured quantities, in the order they were added.

    tick() returns a new series; the receiver is unchanged.
    """
    captures: Tuple[Capture[T], ...] = field(default_factory=tuple)

    def tick(self, quantity: T, tick: Tick) -> TimeSeries[T]:
        return self.appending(quantity, tick.time)

    def appending(self, quantity: T, timestamp: int) -> TimeSeries[T]:
        capture = Capture(entity=quantity, timestamp=timestamp)
        return TimeSeries(captures=self.captures + (capture,))

    def quantity_at(self, timestamp: int) -> Optional[T]:
        """First quantity captured at `timestamp`, or None."""
        for capture in self.captures:
            if capture.timestamp == timestamp:
                return capture.entity
        return None

    def timestamps(self) -> Tuple[int, ...]:
        return tuple(c.timestamp for c in self.captures)

    def values(self) -> Tuple[T, ...]:
        return tuple(c.entity for c in self.captures)

    def __len__(self) -> int:
        return len(self.captures)

    def __iter__(self) -> Iterator[Capture[T]]:
        return iter(self.captures)
