"""
ledger.py - Event-Sourced Double-Entry Ledger

A Ledger is an immutable aggregate of accounts plus an append-only general
journal. Every structural or financial change arrives as a LedgerEvent and
is applied by a pure function that returns a new Ledger value.

Key properties:
    - Applying is total: events that reference a missing account, or that
      would create an account twice, are silently ignored
    - The journal grows by exactly one entry per event that changed state
    - Untouched accounts are shared between successive Ledger values
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from decimal import Decimal
from functools import reduce
from typing import Iterable, List, Optional, Tuple, Union

from .core import (
    # Types
    Account, Category, Posting,
    AmountLike, IdSource,
    # Constants
    ZERO,
    # Helpers
    render_box,
)


# ============================================================================
# EVENTS
# ============================================================================

@dataclass(frozen=True, slots=True)
class CreateAccount:
    """Open a zero-balance account of `category`, identified by `account_id`."""
    category: Category
    name: str
    account_id: str


@dataclass(frozen=True, slots=True)
class Post:
    """Append `posting` to the account matching (`category`, `account_id`)."""
    category: Category
    posting: Posting
    account_id: str


# Closed set of ledger event variants.
LedgerEvent = Union[CreateAccount, Post]


def create_account(category: Category, name: str, account_id: str) -> CreateAccount:
    return CreateAccount(category, name, account_id)


def create_asset(name: str, account_id: str) -> CreateAccount:
    return CreateAccount(Category.ASSET, name, account_id)


def create_liability(name: str, account_id: str) -> CreateAccount:
    return CreateAccount(Category.LIABILITY, name, account_id)


def create_equity(name: str, account_id: str) -> CreateAccount:
    return CreateAccount(Category.EQUITY, name, account_id)


def create_revenue(name: str, account_id: str) -> CreateAccount:
    return CreateAccount(Category.REVENUE, name, account_id)


def create_expense(name: str, account_id: str) -> CreateAccount:
    return CreateAccount(Category.EXPENSE, name, account_id)


def post(category: Category, posting: Posting, account_id: str) -> Post:
    return Post(category, posting, account_id)


def post_asset(posting: Posting, account_id: str) -> Post:
    return Post(Category.ASSET, posting, account_id)


def post_liability(posting: Posting, account_id: str) -> Post:
    return Post(Category.LIABILITY, posting, account_id)


def post_equity(posting: Posting, account_id: str) -> Post:
    return Post(Category.EQUITY, posting, account_id)


def post_revenue(posting: Posting, account_id: str) -> Post:
    return Post(Category.REVENUE, posting, account_id)


def post_expense(posting: Posting, account_id: str) -> Post:
    return Post(Category.EXPENSE, posting, account_id)


def open_account(
    category: Category,
    name: str,
    account_id: str,
    balance: AmountLike = ZERO,
) -> List[LedgerEvent]:
    """
    Events that create an account and post its signed opening balance.

    Always two events, even for a zero balance, so the opening shows up in
    the journal.
    """
    return [
        CreateAccount(category, name, account_id),
        Post(category, category.posting_for(balance), account_id),
    ]


# ============================================================================
# JOURNAL
# ============================================================================

@dataclass(frozen=True, slots=True)
class JournalEntry:
    """
    One applied event in a ledger's general journal.

    Attributes:
        event: The event as it was submitted
        timestamp: Period at which the event was applied
        sequence: Zero-based position in the journal
    """
    event: LedgerEvent
    timestamp: int
    sequence: int

    def __post_init__(self):
        _check_timestamp(self.timestamp)


def _check_timestamp(at: int) -> None:
    if isinstance(at, bool) or not isinstance(at, int):
        raise ValueError(f"Journal timestamp must be an int, got {at!r}")
    if at < 0:
        raise ValueError(f"Journal timestamp must be non-negative, got {at}")


# ============================================================================
# LEDGER
# ============================================================================

@dataclass(frozen=True, slots=True)
class Ledger:
    """
    Immutable double-entry ledger with an append-only general journal.

    Attributes:
        id: Ledger identifier
        accounts: All accounts in creation order, across every category
        journal: Every applied event with the timestamp it was applied at

    Accounts passed in directly are treated as pre-existing state, the way a
    snapshot carries balances from before its journal starts. Normal use
    begins from Ledger(id) and applies events.

    Thread Safety:
        Values are never mutated, so any number of readers may share one.

    Example:
        ledger = Ledger("bank")
        ledger = ledger.applying_all(open_account(Category.ASSET, "Cash", "1", 100), at=0)
        ledger = ledger.applying(post_asset(debited(by=50), "1"), at=0)
        assert ledger.current_balance() == Decimal("150")
    """
    id: str
    accounts: Tuple[Account, ...] = field(default_factory=tuple)
    journal: Tuple[JournalEntry, ...] = field(default_factory=tuple)

    @classmethod
    def make(cls, ids: IdSource) -> Ledger:
        """Create an empty ledger whose id is minted by `ids`."""
        return cls(ids())

    # ========================================================================
    # QUERIES
    # ========================================================================

    @property
    def assets(self) -> Tuple[Account, ...]:
        return self.accounts_in(Category.ASSET)

    @property
    def liabilities(self) -> Tuple[Account, ...]:
        return self.accounts_in(Category.LIABILITY)

    @property
    def equities(self) -> Tuple[Account, ...]:
        return self.accounts_in(Category.EQUITY)

    @property
    def revenues(self) -> Tuple[Account, ...]:
        return self.accounts_in(Category.REVENUE)

    @property
    def expenses(self) -> Tuple[Account, ...]:
        return self.accounts_in(Category.EXPENSE)

    @property
    def journal_length(self) -> int:
        return len(self.journal)

    def accounts_in(self, category: Category) -> Tuple[Account, ...]:
        return tuple(a for a in self.accounts if a.category is category)

    def account(self, account_id: str, category: Optional[Category] = None) -> Optional[Account]:
        """Look up an account by id, optionally restricted to one category."""
        index = self._index_of(account_id, category)
        return None if index is None else self.accounts[index]

    def account_named(self, name: str, category: Optional[Category] = None) -> Optional[Account]:
        """Return the first account called `name`, optionally within one category."""
        for candidate in self.accounts:
            if candidate.name == name and (category is None or candidate.category is category):
                return candidate
        return None

    def balance_of(self, category: Category) -> Decimal:
        """Sum of the balances of every account in `category`."""
        return sum((a.current_balance() for a in self.accounts_in(category)), ZERO)

    def current_balance(self) -> Decimal:
        """
        Net balance of the books.

        (assets + expenses) - (liabilities + equities + revenues). Zero means
        the books balance.
        """
        debit_normal = ZERO
        credit_normal = ZERO
        for account in self.accounts:
            if account.category.is_debit_normal:
                debit_normal += account.current_balance()
            else:
                credit_normal += account.current_balance()
        return debit_normal - credit_normal

    def _index_of(self, account_id: str, category: Optional[Category] = None) -> Optional[int]:
        for index, candidate in enumerate(self.accounts):
            if candidate.id == account_id:
                if category is not None and candidate.category is not category:
                    return None
                return index
        return None

    # ========================================================================
    # EVENT APPLICATION (pure)
    # ========================================================================

    def applying(self, event: LedgerEvent, at: int) -> Ledger:
        """
        Apply one event and return the resulting Ledger.

        CreateAccount is a no-op if any account already uses the id. Post is
        a no-op if no account matches both its category and id. A no-op
        returns this ledger unchanged, with no journal entry. Callers who
        need to know whether an event took effect compare journal_length
        before and after.

        Args:
            event: CreateAccount or Post
            at: Timestamp recorded on the journal entry

        Returns:
            A new Ledger, or self when the event was ignored

        Raises:
            TypeError: If event is not a LedgerEvent variant
            ValueError: If `at` is not a non-negative int, even for a no-op
        """
        _check_timestamp(at)
        if isinstance(event, CreateAccount):
            if self._index_of(event.account_id) is not None:
                return self
            opened = Account(event.account_id, event.name, event.category)
            return self._journaled(self.accounts + (opened,), event, at)

        if isinstance(event, Post):
            index = self._index_of(event.account_id, event.category)
            if index is None:
                return self
            accounts = list(self.accounts)
            accounts[index] = accounts[index].transacted(event.posting)
            return self._journaled(tuple(accounts), event, at)

        raise TypeError(f"Not a ledger event: {event!r}")

    def applying_all(self, events: Iterable[LedgerEvent], at: int) -> Ledger:
        """
        Apply a batch of events in order, all stamped with `at`.

        Order matters: a Post may target an account created earlier in the
        same batch.
        """
        _check_timestamp(at)
        return reduce(lambda ledger, event: ledger.applying(event, at), events, self)

    def adding(self, account: Account, at: int) -> Ledger:
        """
        Add an existing Account by replaying its creation and postings.

        Each posting becomes its own journal entry, so the journal stays the
        complete history of the ledger.
        """
        events: List[LedgerEvent] = [CreateAccount(account.category, account.name, account.id)]
        events.extend(
            Post(account.category, replace(p, id=None), account.id)
            for p in account.postings
        )
        return self.applying_all(events, at)

    def _journaled(self, accounts: Tuple[Account, ...], event: LedgerEvent, at: int) -> Ledger:
        entry = JournalEntry(event=event, timestamp=at, sequence=len(self.journal))
        return Ledger(id=self.id, accounts=accounts, journal=self.journal + (entry,))

    def __repr__(self) -> str:
        sections = [[f" Ledger: {self.id}  ({len(self.journal)} journal entries)"]]
        for category in Category:
            members = self.accounts_in(category)
            if not members:
                continue
            section = [f" {category.value.title()} ({len(members)}):"]
            section.extend(
                f"   {a.name or a.id}: {a.current_balance()}" for a in members
            )
            sections.append(section)
        sections.append([f" Net balance: {self.current_balance()}"])
        return render_box(*sections)
