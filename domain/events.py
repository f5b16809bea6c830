"""
Domain: Sale notifications.

The sale keeps an append-only log of these records. External observers read
the log; nothing in the domain ever rewrites or removes an entry.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class EventKind(str, Enum):
    GOAL_REACHED = "GoalReached"
    CAP_REACHED = "CapReached"
    FUND_TRANSFER = "FundTransfer"


@dataclass(frozen=True, slots=True)
class SaleEvent:
    """
    One entry in the sale's event log.

    GoalReached / CapReached: account is the beneficiary, amount the total raised.
    FundTransfer: account is the payer or payee, is_contribution tells which.
    """

    kind: EventKind
    account: str
    amount: int
    is_contribution: Optional[bool] = None


def goal_reached(beneficiary: str, total_raised: int) -> SaleEvent:
    return SaleEvent(kind=EventKind.GOAL_REACHED, account=beneficiary, amount=total_raised)


def cap_reached(beneficiary: str, total_raised: int) -> SaleEvent:
    return SaleEvent(kind=EventKind.CAP_REACHED, account=beneficiary, amount=total_raised)


def fund_transfer(account: str, amount: int, is_contribution: bool) -> SaleEvent:
    return SaleEvent(
        kind=EventKind.FUND_TRANSFER,
        account=account,
        amount=amount,
        is_contribution=is_contribution,
    )
