"""
replay_example.py - Recording a Run and Rebuilding the Past

This tutorial walks a small bank and one of its depositors through a few
periods, records the run with a Historian, and then rebuilds both books as
they stood at every period by replaying the recorded events.

THE MOVING PARTS:
=================

1. Ledger - immutable books plus an append-only general journal
2. Duality - keeps the depositor's deposit asset equal to the bank's
   deposit liability
3. Historian - buffers each step, then compacts the run into a Record of
   starting snapshot plus event batches keyed by ledger id

SCENARIO: Deposit, Withdrawal, Fee
==================================

Period 0: Depositor holds 1,000 at the bank. The bank holds 1,000 reserves.
Period 1: Depositor deposits another 500 of cash.
Period 2: Depositor withdraws 200.
Period 3: Bank charges a 15 account fee.

Run:
    python replay_example.py
"""

from decimal import Decimal
from typing import Dict, List, Tuple

from bookkeeper import (
    # Ledger
    Ledger, Category, LedgerEvent, SequentialIds,
    open_account, create_revenue, create_expense,
    post_asset, post_liability, post_revenue, post_expense,
    debited, credited,

    # Pairing and history
    Duality, Historian, Step, Clock,
)


# =============================================================================
# SCENARIO SETUP
# =============================================================================

def create_books() -> Tuple[Ledger, Ledger]:
    """Opening books for the depositor and the bank."""
    ids = SequentialIds("book")
    depositor = Ledger.make(ids).applying_all(
        open_account(Category.ASSET, "Cash", "cash", Decimal("800"))
        + open_account(Category.ASSET, "Deposit at bank", "deposit", Decimal("1000"))
        + open_account(Category.EQUITY, "Net worth", "worth", Decimal("1800")),
        at=Clock.STARTING_TIME,
    )
    bank = Ledger.make(ids).applying_all(
        open_account(Category.ASSET, "Reserves", "reserves", Decimal("1000"))
        + open_account(Category.LIABILITY, "Customer deposit", "deposit", Decimal("1000")),
        at=Clock.STARTING_TIME,
    )
    return depositor, bank


def schedule_for(depositor: Ledger, bank: Ledger) -> Dict[int, Dict[str, List[LedgerEvent]]]:
    """Event batches per period, keyed by ledger id."""
    pairing = Duality(depositor.account("deposit"), bank.account("deposit"))

    # Deposit 500: cash moves into the deposit, and the bank takes reserves.
    deposit_asset, deposit_liability = pairing.asset_change_events(Decimal("500"))
    pairing = pairing.change_asset(Decimal("500"))

    withdraw_asset, withdraw_liability = pairing.liability_change_events(Decimal("-200"))

    return {
        1: {
            depositor.id: [post_asset(credited(by=500), "cash"), deposit_asset],
            bank.id: [post_asset(debited(by=500), "reserves"), deposit_liability],
        },
        2: {
            depositor.id: [post_asset(debited(by=200), "cash"), withdraw_asset],
            bank.id: [post_asset(credited(by=200), "reserves"), withdraw_liability],
        },
        3: {
            depositor.id: [
                create_expense("Bank fees", "fees"),
                post_expense(debited(by=15), "fees"),
                post_asset(credited(by=15), "deposit"),
            ],
            bank.id: [
                create_revenue("Fee income", "fees"),
                post_revenue(credited(by=15), "fees"),
                post_liability(debited(by=15), "deposit"),
            ],
        },
    }


# =============================================================================
# RUN
# =============================================================================

def run(historian: Historian, books: Tuple[Ledger, ...], total_periods: int) -> Tuple[Ledger, ...]:
    """Drive the scenario period by period, reporting every step to the historian."""
    schedule = schedule_for(*books)
    clock = Clock()

    historian.prepare(books, total_periods=total_periods, starting_period=clock.next().time)
    while clock.time <= total_periods:
        period = clock.next().time
        step = Step(books, schedule.get(period, {}), period=period, total_periods=total_periods)
        historian.process(step)
        books = step.applied()
    return books


def main() -> bool:
    print("=" * 70)
    print("    RECORDING A RUN")
    print("=" * 70)

    historian = Historian(verbose=True)
    books = create_books()
    final = run(historian, books, total_periods=3)

    for ledger in final:
        print(ledger)

    print("\n" + "=" * 70)
    print("    REBUILDING EVERY PERIOD")
    print("=" * 70)

    depositor_id, bank_id = (ledger.id for ledger in books)
    print(f"\n{'Period':<8} {'Deposit (asset)':>16} {'Deposit (liab.)':>16} {'Bank net':>10} {'Journal':>8}")
    print("-" * 62)
    for period in range(0, 4):
        depositor, bank = historian.reconstructed_ledgers(at=period, handle=0)
        asset = depositor.account("deposit").current_balance()
        liability = bank.account("deposit").current_balance()
        print(
            f"{period:<8} {asset:>16} {liability:>16} "
            f"{bank.current_balance():>10} {bank.journal_length:>8}"
        )

    # The pairing must hold at every rebuilt period, or Duality raises.
    for period in range(0, 4):
        depositor, bank = historian.reconstructed_ledgers(at=period, handle=0)
        Duality(depositor.account("deposit"), bank.account("deposit"))

    rebuilt = historian.reconstructed_ledgers(at=3, handle=0)
    matches = rebuilt == list(final)
    print(f"\nRebuilt final state matches live state: {matches}")

    series = historian.balance_series(handle=0, ledger_id=bank_id, account_id="reserves")
    print(f"Bank reserves by period: {[str(v) for v in series.values()]}")

    fees = historian.reconstructed_ledger(at=2, handle=0, ledger_id=depositor_id).account("fees")
    print(f"Depositor fee account at period 2: {fees}")

    return matches


if __name__ == "__main__":
    success = main()
    exit(0 if success else 1)
