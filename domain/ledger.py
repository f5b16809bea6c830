"""
Domain: Contribution ledger.

Contract excerpts implemented here:
- balanceOf maps each account to the cumulative amount it contributed.
- amountRaised is the monotonically non-decreasing sum of every accepted
  credit; refundAmount is the monotonically non-decreasing sum of every refund.
- Conservation: amountRaised == sum(balanceOf) + refundAmount at all times.
- A refund zeroes the account balance and moves exactly that amount into
  refundAmount.

This is a pure domain structure; transitions return new ledgers and leave the
prior one unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping

from .errors import InvalidAmount
from .rate import checked_add


@dataclass(frozen=True, slots=True)
class Ledger:
    balances: Mapping[str, int] = field(default_factory=dict)
    amount_raised: int = 0
    refund_amount: int = 0

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    @property
    def total_balances(self) -> int:
        return sum(self.balances.values())

    def is_conserved(self) -> bool:
        return self.amount_raised == self.total_balances + self.refund_amount

    def credit(self, account: str, amount: int) -> "Ledger":
        """Add `amount` to the account balance and to amount_raised."""

        if amount < 0:
            raise InvalidAmount("credited amount must be >= 0")

        updated: Dict[str, int] = dict(self.balances)
        updated[account] = checked_add(updated.get(account, 0), amount)
        return Ledger(
            balances=updated,
            amount_raised=checked_add(self.amount_raised, amount),
            refund_amount=self.refund_amount,
        )

    def refund(self, account: str) -> tuple["Ledger", int]:
        """
        Zero the account balance and account for it as refunded.

        Returns the new ledger and the refunded amount (0 if nothing was owed,
        in which case the same ledger is returned).
        """

        amount = self.balance_of(account)
        if amount == 0:
            return self, 0

        updated: Dict[str, int] = dict(self.balances)
        updated[account] = 0
        return (
            Ledger(
                balances=updated,
                amount_raised=self.amount_raised,
                refund_amount=checked_add(self.refund_amount, amount),
            ),
            amount,
        )
