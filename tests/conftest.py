"""
conftest.py - Shared pytest fixtures for bookkeeper tests

Provides common fixtures used across unit and conformance tests:
- Basic ledgers (empty, single asset, balanced books)
- Paired ledgers for a depositor and a bank
- A minimal driver that feeds steps to a Historian
"""

import pytest
from decimal import Decimal
from typing import Iterable, List, Mapping, Tuple

from bookkeeper import (
    Ledger, Category, Historian, Step,
    LedgerEvent, open_account,
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def run_schedule(
    historian: Historian,
    ledgers: Iterable[Ledger],
    schedule: Mapping[int, Mapping[str, List[LedgerEvent]]],
    total_periods: int,
    starting_period: int = 0,
) -> Tuple[Ledger, ...]:
    """
    Drive one run through the historian and return the live end-of-run ledgers.

    The opening snapshot is captured at `starting_period`. Each following
    period applies the batches scheduled for it; unscheduled periods are
    still processed with no events.
    """
    ledgers = tuple(ledgers)
    historian.prepare(ledgers, total_periods=total_periods, starting_period=starting_period)
    for period in range(starting_period + 1, total_periods + 1):
        step = Step(
            ledgers=ledgers,
            events=schedule.get(period, {}),
            period=period,
            total_periods=total_periods,
        )
        historian.process(step)
        ledgers = step.applied()
    return ledgers


# =============================================================================
# BASIC FIXTURES
# =============================================================================

@pytest.fixture
def empty_ledger():
    """Fresh ledger with no accounts."""
    return Ledger("test")


@pytest.fixture
def asset_ledger():
    """Ledger with a single asset "A1" (id "1") holding 100."""
    return Ledger("test").applying_all(
        open_account(Category.ASSET, "A1", "1", Decimal("100")), at=0
    )


@pytest.fixture
def balanced_ledger():
    """Ledger with cash of 100 funded by a deposit liability of 100."""
    events = (
        open_account(Category.ASSET, "Cash", "cash", Decimal("100"))
        + open_account(Category.LIABILITY, "Deposits", "deposits", Decimal("100"))
    )
    return Ledger("bank").applying_all(events, at=0)


@pytest.fixture
def depositor_and_bank():
    """A depositor's ledger holding a deposit asset, and the bank's ledger owing it."""
    depositor = Ledger("depositor").applying_all(
        open_account(Category.ASSET, "Deposit at bank", "deposit", Decimal("500")), at=0
    )
    bank = Ledger("bank").applying_all(
        open_account(Category.LIABILITY, "Customer deposit", "owed", Decimal("500")), at=0
    )
    return depositor, bank


# =============================================================================
# HISTORIAN FIXTURES
# =============================================================================

@pytest.fixture
def historian():
    """Quiet historian."""
    return Historian(verbose=False)


@pytest.fixture
def drive():
    """The run_schedule driver, for tests that cannot import conftest."""
    return run_schedule
