"""
historian.py - Run Recording and Point-in-Time Reconstruction

The Historian sits beside a driver that advances time step by step. At each
step the driver hands over the ledgers and the events it applied to them.
The Historian buffers these captures and, when the run's final period is
processed, compacts them into a Record:

    starting snapshot (ledgers of the first capture)
  + every step's event batches, keyed by ledger id and timestamped

Any past state of the run can then be rebuilt by replaying a prefix of the
event history against the snapshot. Replay is a fold of pure functions, so
the same prefix always yields the same ledgers.

Processing order per run:
    accumulating -> (step.period == total_periods) -> finalize -> accumulating
"""

from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from itertools import groupby
from operator import attrgetter
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from .capture import STARTING_TIME, Capture, TimeSeries
from .ledger import Ledger, LedgerEvent


# Ledger id -> events applied to that ledger during one step.
EventBatches = Mapping[str, Tuple[LedgerEvent, ...]]

# What the Historian buffers per step: the ledgers and the events applied to them.
StepCapture = Capture[Tuple[Tuple[Ledger, ...], EventBatches]]


def _freeze_batches(events: Mapping[str, Iterable[LedgerEvent]]) -> Dict[str, Tuple[LedgerEvent, ...]]:
    return {ledger_id: tuple(batch) for ledger_id, batch in events.items()}


@dataclass(frozen=True)
class Step:
    """
    One period of a run as reported by the driver.

    Attributes:
        ledgers: Ledgers as they stood before this step's events were applied
        events: Ledger id -> batch of events applied at `period`
        period: The step's period
        total_periods: Declared final period of the run

    Raises:
        ValueError: If two ledgers share an id, since batches are routed by id
    """
    ledgers: Tuple[Ledger, ...]
    events: EventBatches
    period: int
    total_periods: int

    def __post_init__(self):
        object.__setattr__(self, 'ledgers', tuple(self.ledgers))
        object.__setattr__(self, 'events', _freeze_batches(self.events))
        ids = [ledger.id for ledger in self.ledgers]
        if len(set(ids)) != len(ids):
            duplicates = sorted({i for i in ids if ids.count(i) > 1})
            raise ValueError(f"Step ledgers must have unique ids, got duplicates {duplicates}")

    @property
    def is_final(self) -> bool:
        return self.period == self.total_periods

    @property
    def capture(self) -> StepCapture:
        return Capture(entity=(self.ledgers, self.events), timestamp=self.period)

    def applied(self) -> Tuple[Ledger, ...]:
        """The step's ledgers after applying their event batches at `period`."""
        return tuple(
            ledger.applying_all(self.events.get(ledger.id, ()), at=self.period)
            for ledger in self.ledgers
        )


@dataclass(frozen=True)
class Record:
    """
    Finalized history of one completed run.

    Attributes:
        id: Run handle, unique within the Historian that produced it
        period: Period at which the run completed
        starting_period: Timestamp of the run's first capture
        starting_ledgers: Snapshot of every ledger at the first capture
        events: One capture per step, each mapping ledger id to its events
    """
    id: int
    period: int
    starting_period: int
    starting_ledgers: Tuple[Ledger, ...]
    events: Tuple[Capture[EventBatches], ...] = field(default_factory=tuple)

    @property
    def ledger_ids(self) -> Tuple[str, ...]:
        return tuple(ledger.id for ledger in self.starting_ledgers)

    def replay(self) -> Iterator[Tuple[int, List[Ledger]]]:
        """
        Fold the event history over the starting snapshot.

        Yields (timestamp, ledgers) after each distinct timestamp, in
        timestamp order. Batches keyed by an id absent from the snapshot are
        skipped.
        """
        ledgers = list(self.starting_ledgers)
        positions = {ledger.id: index for index, ledger in enumerate(ledgers)}
        ordered = sorted(self.events, key=attrgetter('timestamp'))
        for timestamp, captures in groupby(ordered, key=attrgetter('timestamp')):
            for capture in captures:
                for ledger_id, batch in capture.entity.items():
                    index = positions.get(ledger_id)
                    if index is None:
                        continue
                    ledgers[index] = ledgers[index].applying_all(batch, at=timestamp)
            yield timestamp, list(ledgers)

    def ledgers_at(self, period: int) -> List[Ledger]:
        """Ledgers as they stood at `period`. See Historian.reconstructed_ledgers."""
        reconstructed = list(self.starting_ledgers)
        for timestamp, ledgers in self.replay():
            if timestamp > period:
                break
            reconstructed = ledgers
        return reconstructed


class Historian:
    """
    Records runs and reconstructs ledgers at any past period.

    The Historian holds the only mutable state in the bookkeeping core: the
    capture buffer of the run in progress and the list of finished records.
    A single Historian can record any number of runs one after another.

    Thread Safety:
        Not thread-safe. Route every process() call for one Historian
        through a single owner, or capture sequences will interleave.

    Example:
        historian = Historian()
        historian.prepare([ledger], total_periods=2)
        historian.process(Step([ledger], {ledger.id: [post_asset(debited(by=50), "1")]}, 1, 2))
        ...
        historian.reconstructed_ledgers(at=1, handle=0)
    """

    def __init__(self, verbose: bool = False):
        """
        Create a historian.

        Args:
            verbose: Print a line when runs are finalized or buffers dropped
        """
        self._captures: List[StepCapture] = []
        self._records: List[Record] = []
        self.verbose = verbose

    @property
    def captures(self) -> Tuple[StepCapture, ...]:
        """Captures buffered for the run in progress."""
        return tuple(self._captures)

    @property
    def records(self) -> Tuple[Record, ...]:
        """Finalized records, in completion order."""
        return tuple(self._records)

    # ========================================================================
    # RECORDING (Mutating)
    # ========================================================================

    def prepare(
        self,
        ledgers: Iterable[Ledger],
        total_periods: int,
        starting_period: int = STARTING_TIME,
    ) -> Step:
        """
        Open a run by processing an event-free step at `starting_period`.

        The captured ledgers become the run's starting snapshot.

        Returns:
            The opening Step that was processed
        """
        step = Step(
            ledgers=tuple(ledgers),
            events={},
            period=starting_period,
            total_periods=total_periods,
        )
        self.process(step)
        return step

    def process(self, step: Step) -> None:
        """
        Buffer the step's capture and finalize the run on its last period.

        Finalizing appends a Record whose handle is the number of records
        stored before it, then clears the buffer.
        """
        self._captures.append(step.capture)
        if step.is_final:
            self._finalize(step)

    def reset(self) -> None:
        """Drop the buffered captures. Stored records are kept."""
        if self.verbose and self._captures:
            print(f"Historian reset: dropped {len(self._captures)} buffered captures")
        self._captures.clear()

    def _finalize(self, step: Step) -> Record:
        first = self._captures[0]
        record = Record(
            id=len(self._records),
            period=step.period,
            starting_period=first.timestamp,
            starting_ledgers=first.entity[0],
            events=tuple(
                Capture(entity=capture.entity[1], timestamp=capture.timestamp)
                for capture in self._captures
            ),
        )
        self._records.append(record)
        if self.verbose:
            print(
                f"✓ Recorded run {record.id}: periods {record.starting_period}..{record.period}, "
                f"{len(record.events)} captures, {len(record.starting_ledgers)} ledgers"
            )
        self._captures.clear()
        return record

    # ========================================================================
    # QUERIES
    # ========================================================================

    def record(self, handle: int) -> Optional[Record]:
        """Return the record with id `handle`, or None."""
        for record in self._records:
            if record.id == handle:
                return record
        return None

    def reconstructed_ledgers(self, at: int, handle: int) -> Optional[List[Ledger]]:
        """
        Rebuild every ledger of run `handle` as of period `at`.

        Each step captured at or before `at` is replayed, in timestamp order,
        against the snapshot: a ledger receives exactly the batch recorded
        under its id, applied at the step's timestamp. An opening step opened
        with prepare() carries no events, so at the starting period the
        snapshot comes back unchanged. Before the first capture it does too.

        Returns:
            The reconstructed ledgers in snapshot order, or None for an
            unknown handle
        """
        record = self.record(handle)
        if record is None:
            return None
        return record.ledgers_at(at)

    def reconstructed_ledger(self, at: int, handle: int, ledger_id: str) -> Optional[Ledger]:
        """Rebuild a single ledger of run `handle` as of period `at`."""
        ledgers = self.reconstructed_ledgers(at, handle)
        if ledgers is None:
            return None
        for ledger in ledgers:
            if ledger.id == ledger_id:
                return ledger
        return None

    def balance_series(
        self,
        handle: int,
        ledger_id: str,
        account_id: Optional[str] = None,
    ) -> Optional[TimeSeries[Decimal]]:
        """
        Reconstructed balances of one ledger, one measurement per captured period.

        Measures the account `account_id` when given, otherwise the ledger's
        net balance. Periods where the ledger or account does not exist yet
        are left out.

        Returns:
            The series, or None for an unknown handle
        """
        record = self.record(handle)
        if record is None:
            return None

        series: TimeSeries[Decimal] = TimeSeries()
        for timestamp, ledgers in record.replay():
            quantity = _measure(ledgers, ledger_id, account_id)
            if quantity is not None:
                series = series.appending(quantity, timestamp)
        return series


def _measure(ledgers: Iterable[Ledger], ledger_id: str, account_id: Optional[str]) -> Optional[Decimal]:
    for ledger in ledgers:
        if ledger.id != ledger_id:
            continue
        if account_id is None:
            return ledger.current_balance()
        account = ledger.account(account_id)
        return None if account is None else account.current_balance()
    return None
