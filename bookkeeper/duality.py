"""
duality.py - Paired-Posting Guard

A Duality couples two ledger legs that must always report equal balances,
typically an asset held in one book and the matching liability in another
(a deposit is cash for the bank's customer and a debt for the bank).

The pair can only be built when the legs balance. Every change is applied
as a debit on one leg and an equal credit on the other. Because the legs
sit on opposite normal sides, both balances move by the same signed amount
and the equality survives the change.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

from .core import Account, AmountLike, DualityViolation, Posting
from .ledger import Post


@dataclass(frozen=True, slots=True)
class Duality:
    """
    Immutable pair of mirrored legs with equal balances.

    Attributes:
        asset: The debit-normal leg (or whichever leg plays that role)
        liability: The credit-normal leg

    Raises:
        ValueError: If both legs share the same normal side
        DualityViolation: If the legs' current balances differ. This is a
            fatal InvariantViolation, not an ordinary exception.
    """
    asset: Account
    liability: Account

    def __post_init__(self):
        if self.asset.category.normal_side is self.liability.category.normal_side:
            raise ValueError(
                f"Duality legs must sit on opposite sides: "
                f"{self.asset.category.value} and {self.liability.category.value}"
            )
        asset_balance = self.asset.current_balance()
        liability_balance = self.liability.current_balance()
        if asset_balance != liability_balance:
            raise DualityViolation(asset_balance, liability_balance)

    def change_asset(self, amount: AmountLike) -> Duality:
        """Change the asset leg by the signed `amount` and mirror it on the liability."""
        asset_posting, liability_posting = self._asset_led(amount)
        return Duality(
            asset=self.asset.transacted(asset_posting),
            liability=self.liability.transacted(liability_posting),
        )

    def change_liability(self, amount: AmountLike) -> Duality:
        """Change the liability leg by the signed `amount` and mirror it on the asset."""
        liability_posting, asset_posting = self._liability_led(amount)
        return Duality(
            asset=self.asset.transacted(asset_posting),
            liability=self.liability.transacted(liability_posting),
        )

    def asset_change_events(self, amount: AmountLike) -> Tuple[Post, Post]:
        """
        Ledger events equivalent to change_asset(amount).

        Returns (asset_post, liability_post), to be applied to the ledgers
        holding each leg.
        """
        asset_posting, liability_posting = self._asset_led(amount)
        return self._events(asset_posting, liability_posting)

    def liability_change_events(self, amount: AmountLike) -> Tuple[Post, Post]:
        """Ledger events equivalent to change_liability(amount), as (asset_post, liability_post)."""
        liability_posting, asset_posting = self._liability_led(amount)
        return self._events(asset_posting, liability_posting)

    def _asset_led(self, amount: AmountLike) -> Tuple[Posting, Posting]:
        return _mirrored(self.asset, amount)

    def _liability_led(self, amount: AmountLike) -> Tuple[Posting, Posting]:
        return _mirrored(self.liability, amount)

    def _events(self, asset_posting: Posting, liability_posting: Posting) -> Tuple[Post, Post]:
        return (
            Post(self.asset.category, asset_posting, self.asset.id),
            Post(self.liability.category, liability_posting, self.liability.id),
        )


def _mirrored(lead: Account, amount: AmountLike) -> Tuple[Posting, Posting]:
    """Posting for the leading leg and its equal, opposite-side mirror."""
    leading = lead.category.posting_for(amount)
    return leading, Posting(leading.side.opposite, leading.amount)
