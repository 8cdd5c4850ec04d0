"""
bookkeeper - Event-Sourced Double-Entry Ledger

Immutable double-entry books whose state is derived from an append-only
journal of events, plus a Historian that records runs and reconstructs the
ledgers as of any past period by replaying that journal.

Usage:
    from bookkeeper import (
        Ledger, Category, Historian, Step,
        open_account, post_asset, debited,
    )

    ledger = Ledger("bank").applying_all(
        open_account(Category.ASSET, "Reserves", "1", 100), at=0
    )

    historian = Historian()
    historian.prepare([ledger], total_periods=1)

    step = Step([ledger], {"bank": [post_asset(debited(by=50), "1")]}, period=1, total_periods=1)
    historian.process(step)
    ledger, = step.applied()

    historian.reconstructed_ledgers(at=0, handle=0)[0].current_balance()  # 100
    historian.reconstructed_ledgers(at=1, handle=0)[0].current_balance()  # 150
"""

# Core types
from .core import (
    Side,
    Category,
    Posting,
    Account,
    SequentialIds,
    IdSource,
    AmountLike,
    InvariantViolation,
    DualityViolation,
    debited,
    credited,
    balance_of,
    to_decimal,
    ZERO,
)

# Ledger and events
from .ledger import (
    Ledger,
    LedgerEvent,
    CreateAccount,
    Post,
    JournalEntry,
    create_account,
    create_asset,
    create_liability,
    create_equity,
    create_revenue,
    create_expense,
    post,
    post_asset,
    post_liability,
    post_equity,
    post_revenue,
    post_expense,
    open_account,
)

# Paired-posting guard
from .duality import Duality

# Time primitives
from .capture import (
    Capture,
    Tick,
    Clock,
    TimeSeries,
    STARTING_TIME,
)

# Recording and reconstruction
from .historian import (
    Historian,
    Record,
    Step,
    EventBatches,
)


__all__ = [
    # Core
    'Side', 'Category', 'Posting', 'Account',
    'SequentialIds', 'IdSource', 'AmountLike',
    'InvariantViolation', 'DualityViolation',
    'debited', 'credited', 'balance_of', 'to_decimal', 'ZERO',
    # Ledger
    'Ledger', 'LedgerEvent', 'CreateAccount', 'Post', 'JournalEntry',
    'create_account', 'create_asset', 'create_liability', 'create_equity',
    'create_revenue', 'create_expense',
    'post', 'post_asset', 'post_liability', 'post_equity',
    'post_revenue', 'post_expense',
    'open_account',
    # Duality
    'Duality',
    # Time
    'Capture', 'Tick', 'Clock', 'TimeSeries', 'STARTING_TIME',
    # Historian
    'Historian', 'Record', 'Step', 'EventBatches',
]
