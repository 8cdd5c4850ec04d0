"""
Core types and pure functions for the bookkeeping ledger.

This module provides the foundational data structures for double-entry books:
1. Enums: Side (debit/credit) and Category (the five account categories)
2. Immutable data structures: Posting, Account
3. Exceptions: InvariantViolation and DualityViolation
4. Id sources: SequentialIds for deterministic, caller-owned id minting
5. Posting factories: debited(), credited() and the per-category helpers

All functions in this module are pure. Accounts are value snapshots: every
mutation returns a new Account that shares the prior posting history plus
one more entry.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from decimal import Decimal, ROUND_HALF_EVEN, getcontext
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple, Union


# ============================================================================
# DECIMAL CONTEXT CONFIGURATION
# ============================================================================
#
# Balances are sums of Decimal postings and must be reproducible under replay.
# The global context is configured once at module load.
#
# PRECONDITION: No other code should modify the global Decimal context.
# If different settings are needed locally, use decimal.localcontext().
#
_BOOKKEEPER_DECIMAL_CONTEXT = getcontext()
_BOOKKEEPER_DECIMAL_CONTEXT.prec = 50
_BOOKKEEPER_DECIMAL_CONTEXT.rounding = ROUND_HALF_EVEN


# ============================================================================
# CONSTANTS
# ============================================================================

ZERO = Decimal("0")

# Default prefix used by SequentialIds.
DEFAULT_ID_PREFIX = "ledger"

# Width of the boxed text rendered by Account and Ledger reprs.
REPR_WIDTH = 48


# ============================================================================
# TYPE ALIASES
# ============================================================================

# Anything that can be turned into an exact Decimal amount.
AmountLike = Union[Decimal, int, str, float]

# Zero-argument callable that mints a fresh id.
IdSource = Callable[[], str]


# ============================================================================
# EXCEPTIONS
# ============================================================================

class InvariantViolation(BaseException):
    """
    Base signal for fatal breaches of a bookkeeping invariant.

    Derives from BaseException rather than Exception so that generic
    ``except Exception`` handlers cannot swallow it and carry on with books
    that are known to be out of balance. It represents a programming error
    in the caller, not a data condition.
    """
    pass


class DualityViolation(InvariantViolation):
    """Raised when a Duality is assembled from legs whose balances differ."""

    def __init__(self, asset_balance: Decimal, liability_balance: Decimal) -> None:
        self.asset_balance = asset_balance
        self.liability_balance = liability_balance
        super().__init__(
            f"Asset and liability must be equal: "
            f"{asset_balance} != {liability_balance}"
        )


# ============================================================================
# AMOUNTS
# ============================================================================

def to_decimal(value: AmountLike) -> Decimal:
    """
    Convert an amount to Decimal without binary float artifacts.

    Floats go through str() so that 0.1 becomes Decimal("0.1").

    Raises:
        TypeError: If value is a bool or not a supported numeric type.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Amount cannot be a bool")
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, (str, float)):
        return Decimal(str(value))
    raise TypeError(f"Amount must be Decimal, int, str or float, got {type(value)}")


# ============================================================================
# ENUMS
# ============================================================================

class Side(Enum):
    """The two sides of a T-account."""
    DEBIT = "debit"
    CREDIT = "credit"

    @property
    def opposite(self) -> Side:
        return Side.CREDIT if self is Side.DEBIT else Side.DEBIT


class Category(Enum):
    """
    The five account categories.

    ASSET and EXPENSE are debit-normal: a debit increases their balance.
    LIABILITY, EQUITY and REVENUE are credit-normal: a credit increases it.
    """
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"

    @property
    def normal_side(self) -> Side:
        """The posting side that increases balances in this category."""
        return Side.DEBIT if self in _DEBIT_NORMAL else Side.CREDIT

    @property
    def is_debit_normal(self) -> bool:
        return self.normal_side is Side.DEBIT

    def increasing(self, by: AmountLike) -> Posting:
        """Posting that raises a balance in this category by `by`."""
        return Posting(self.normal_side, to_decimal(by))

    def decreasing(self, by: AmountLike) -> Posting:
        """Posting that lowers a balance in this category by `by`."""
        return Posting(self.normal_side.opposite, to_decimal(by))

    def posting_for(self, signed_amount: AmountLike) -> Posting:
        """
        Normalize a signed raw amount into a Posting for this category.

        Non-negative amounts land on the increasing side, negative amounts on
        the decreasing side using their magnitude.
        """
        amount = to_decimal(signed_amount)
        if amount < 0:
            return self.decreasing(-amount)
        return self.increasing(amount)


_DEBIT_NORMAL = frozenset({Category.ASSET, Category.EXPENSE})


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True, slots=True)
class Posting:
    """
    A single debit or credit recorded against one account.

    Attributes:
        side: DEBIT or CREDIT.
        amount: Non-negative magnitude. Zero is a valid, degenerate posting.
        id: Sequence id stamped by the owning account on append. None until
            the posting has been appended to an account.

    This class is immutable (frozen=True) and memory-optimized (slots=True).
    The amount is validated in __post_init__.
    """
    side: Side
    amount: Decimal
    id: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.side, Side):
            raise ValueError(f"Posting side must be a Side, got {self.side!r}")
        amount = to_decimal(self.amount)
        if amount.is_nan() or amount.is_infinite():
            raise ValueError(f"Posting amount must be finite, got {amount}")
        if amount < 0:
            raise ValueError(f"Posting amount must be non-negative, got {amount}")
        object.__setattr__(self, 'amount', amount)

    @property
    def is_debit(self) -> bool:
        return self.side is Side.DEBIT

    @property
    def is_credit(self) -> bool:
        return self.side is Side.CREDIT

    def contribution(self, category: Category) -> Decimal:
        """Signed effect of this posting on a balance in `category`."""
        if self.side is category.normal_side:
            return self.amount
        return -self.amount

    def __repr__(self) -> str:
        label = "Dr" if self.is_debit else "Cr"
        suffix = f" #{self.id}" if self.id is not None else ""
        return f"Posting({label} {self.amount}{suffix})"


def debited(by: AmountLike) -> Posting:
    """Create a debit posting of `by`."""
    return Posting(Side.DEBIT, to_decimal(by))


def credited(by: AmountLike) -> Posting:
    """Create a credit posting of `by`."""
    return Posting(Side.CREDIT, to_decimal(by))


def balance_of(postings: Iterable[Posting], category: Category) -> Decimal:
    """Sum the contributions of `postings` to a balance in `category`."""
    return sum((p.contribution(category) for p in postings), ZERO)


@dataclass(frozen=True, slots=True)
class Account:
    """
    An immutable snapshot of one account and its posting history.

    Attributes:
        id: Opaque identifier, stable for the account's lifetime.
        name: Human-readable name.
        category: One of the five account categories.
        postings: Ordered posting history. Only ever appended to.

    Example:
        cash = Account.opening(Category.ASSET, "Cash", "1", Decimal("100"))
        cash = cash.debited(by=50)
        assert cash.current_balance() == Decimal("150")
    """
    id: str
    name: str
    category: Category
    postings: Tuple[Posting, ...] = field(default_factory=tuple)

    @classmethod
    def opening(
        cls,
        category: Category,
        name: str,
        account_id: str,
        balance: AmountLike = ZERO,
    ) -> Account:
        """Create an account whose first posting carries the signed opening balance."""
        return cls(account_id, name, category).transacted(category.posting_for(balance))

    def current_balance(self) -> Decimal:
        return balance_of(self.postings, self.category)

    def transacted(self, posting: Posting) -> Account:
        """
        Return a new Account with `posting` appended.

        The posting is stamped with its zero-based index in this account's
        history, which keeps ids unique and identical under replay.
        """
        stamped = replace(posting, id=str(len(self.postings)))
        return replace(self, postings=self.postings + (stamped,))

    def debited(self, by: AmountLike) -> Account:
        return self.transacted(debited(by))

    def credited(self, by: AmountLike) -> Account:
        return self.transacted(credited(by))

    def increased(self, by: AmountLike) -> Account:
        return self.transacted(self.category.increasing(by))

    def decreased(self, by: AmountLike) -> Account:
        return self.transacted(self.category.decreasing(by))

    def __repr__(self) -> str:
        lines = [f" {self.name} [{self.category.value}] id={self.id}"]
        rows = []
        for posting in self.postings:
            debit = str(posting.amount) if posting.is_debit else ""
            credit = str(posting.amount) if posting.is_credit else ""
            rows.append(f"   [{posting.id}] {debit:>16} | {credit:<16}")
        return render_box(
            lines,
            [f"   {'Dr':>20} | {'Cr':<16}"] + rows,
            [f" Balance: {self.current_balance()}"],
        )


# ============================================================================
# ID SOURCES
# ============================================================================

class SequentialIds:
    """
    Caller-owned id generator producing "<prefix>-<n>" ids.

    Each instance keeps its own counter, so two generators built with the
    same arguments mint the same sequence. Inject one wherever new entities
    need ids instead of relying on shared process state.

    Example:
        ids = SequentialIds("bank")
        ids()  # "bank-0"
        ids()  # "bank-1"
    """

    def __init__(self, prefix: str = DEFAULT_ID_PREFIX, start: int = 0):
        if start < 0:
            raise ValueError(f"start must be non-negative, got {start}")
        self.prefix = prefix
        self._next = start

    def __call__(self) -> str:
        value = self._next
        self._next += 1
        return f"{self.prefix}-{value}"

    def peek(self) -> str:
        """Return the id the next call will produce, without consuming it."""
        return f"{self.prefix}-{self._next}"


# ============================================================================
# RENDERING
# ============================================================================

def render_box(*sections: List[str], width: int = REPR_WIDTH) -> str:
    """Draw sections of text lines inside a single box, separated by rules."""
    bar = "─" * width

    def pad(text: str) -> str:
        if len(text) > width:
            return text[:width - 3] + "..."
        return text + " " * (width - len(text))

    out = ["", f"┌{bar}┐"]
    for index, section in enumerate(sections):
        if index:
            out.append(f"├{bar}┤")
        out.extend(f"│{pad(line)}│" for line in section)
    out.append(f"└{bar}┘")
    return "\n".join(out)
