"""
Read-only views over the sale.

None of these functions change state. They read a committed snapshot, so they
never observe a transaction that is still in flight.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from domain.events import EventKind, SaleEvent
from domain.gates import SalePhase, phase
from domain.rate import RateConverter
from services.sale_runtime import SaleRuntime

BASIS_POINTS = 10000


@dataclass(frozen=True, slots=True)
class SaleInfo:
    address: str
    beneficiary: str
    token_address: str
    funding_goal: int
    funding_cap: int
    min_contribution: int
    rate: int
    start_time: datetime
    end_time: datetime
    amount_raised: int
    refund_amount: int
    vault_balance: int
    funding_goal_reached: bool
    funding_cap_reached: bool
    sale_closed: bool
    paused: bool
    phase: SalePhase


@dataclass(frozen=True, slots=True)
class ContributorInfo:
    account: str
    balance: int
    can_refund: bool


@dataclass(frozen=True, slots=True)
class SaleProgress:
    """Progress in basis points (10000 == 100%)."""
    goal_bp: int
    cap_bp: int
    remaining_to_cap: int
    is_successful: bool


def get_sale_info(runtime: SaleRuntime) -> SaleInfo:
    sale = runtime.sale
    terms = sale.terms
    return SaleInfo(
        address=terms.address,
        beneficiary=terms.beneficiary,
        token_address=terms.token_address,
        funding_goal=terms.funding_goal,
        funding_cap=terms.funding_cap,
        min_contribution=terms.min_contribution,
        rate=sale.rate,
        start_time=terms.start_time,
        end_time=sale.end_time,
        amount_raised=sale.amount_raised,
        refund_amount=sale.refund_amount,
        vault_balance=runtime.vault.balance(),
        funding_goal_reached=sale.funding_goal_reached,
        funding_cap_reached=sale.funding_cap_reached,
        sale_closed=sale.sale_closed,
        paused=runtime.access.is_paused(),
        phase=phase(sale, runtime.current_time()),
    )


def get_contributor_info(runtime: SaleRuntime, account: str) -> ContributorInfo:
    sale = runtime.sale
    balance = sale.balance_of(account)
    after_deadline = runtime.current_time() >= sale.end_time
    return ContributorInfo(
        account=account,
        balance=balance,
        can_refund=after_deadline and not sale.funding_goal_reached and balance > 0,
    )


def _basis_points(part: int, whole: int) -> int:
    if whole == 0:
        return BASIS_POINTS
    return min(part * BASIS_POINTS // whole, BASIS_POINTS)


def get_sale_progress(runtime: SaleRuntime) -> SaleProgress:
    sale = runtime.sale
    return SaleProgress(
        goal_bp=_basis_points(sale.amount_raised, sale.terms.funding_goal),
        cap_bp=_basis_points(sale.amount_raised, sale.terms.funding_cap),
        remaining_to_cap=max(sale.terms.funding_cap - sale.amount_raised, 0),
        is_successful=sale.funding_goal_reached,
    )


def quote_tokens(runtime: SaleRuntime, amount_wei: int) -> int:
    """Tokens a contribution of `amount_wei` would receive at the current rate."""

    return RateConverter(runtime.sale.rate).tokens_for(amount_wei)


def list_events(runtime: SaleRuntime, kind: Optional[EventKind] = None) -> List[SaleEvent]:
    events = runtime.sale.events
    if kind is None:
        return list(events)
    return [event for event in events if event.kind == kind]


__all__ = [
    "SaleInfo",
    "ContributorInfo",
    "SaleProgress",
    "get_sale_info",
    "get_contributor_info",
    "get_sale_progress",
    "quote_tokens",
    "list_events",
]
