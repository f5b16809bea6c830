"""
Owner-only administrative operations.

- terminate: permanently close the sale
- set_rate: change the exchange rate for subsequent contributions
- set_end: move the deadline (never into the past)
- owner_allocate_tokens: hand out tokens outside the contribution path and
  record the matching wei amount as raised
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from domain.account import require_destination
from domain.errors import InvalidAmount, InvalidTimeUpdate, TransferFailed
from domain.events import fund_transfer
from domain.monitor import check_goal_and_cap
from domain.rate import require_rate_in_range
from domain.time import require_utc_timestamp
from services.sale_runtime import SaleRuntime

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AllocationResult:
    recipient: str
    amount_wei: int
    amount_tokens: int
    amount_raised: int


def terminate(runtime: SaleRuntime, caller: str) -> None:
    """Close the sale for good. Idempotent."""

    with runtime.transaction() as tx:
        runtime.require_owner(caller)
        if not tx.sale.sale_closed:
            tx.stage(tx.sale.closed())

    logger.info("Sale terminated by owner", extra={"caller": caller})


def set_rate(runtime: SaleRuntime, caller: str, rate: int) -> None:
    """
    Replace the exchange rate.

    Takes effect from the next contribution; no rate history is kept.

    Raises:
        AccessDenied, InvalidRateRange
    """

    with runtime.transaction() as tx:
        runtime.require_owner(caller)
        previous = tx.sale.rate
        tx.stage(tx.sale.with_rate(require_rate_in_range(rate)))

    logger.info(
        f"Rate changed from {previous} to {rate}",
        extra={"caller": caller, "previous_rate": previous, "rate": rate},
    )


def set_end(runtime: SaleRuntime, caller: str, end_time: datetime) -> None:
    """
    Move the sale deadline.

    The new end time must not be in the past and must stay after start_time.
    It may be earlier or later than the current end time.

    Raises:
        AccessDenied, InvalidTimeUpdate
    """

    with runtime.transaction() as tx:
        runtime.require_owner(caller)
        try:
            require_utc_timestamp("end_time", end_time)
        except ValueError as e:
            raise InvalidTimeUpdate(str(e)) from e

        now = runtime.current_time()
        if end_time < now:
            raise InvalidTimeUpdate(f"end time {end_time.isoformat()} is in the past")
        if end_time <= tx.sale.terms.start_time:
            raise InvalidTimeUpdate("end time must be after the sale start time")

        previous = tx.sale.end_time
        tx.stage(tx.sale.with_end_time(end_time))

    logger.info(
        f"Deadline moved from {previous.isoformat()} to {end_time.isoformat()}",
        extra={"caller": caller},
    )


def owner_allocate_tokens(
    runtime: SaleRuntime,
    caller: str,
    to: str,
    amount_wei: int,
    amount_tokens: int,
) -> AllocationResult:
    """
    Transfer `amount_tokens` straight to `to` and record `amount_wei` as raised.

    The wei amount is credited to the sale's own ledger entry, not to `to`.
    The goal/cap monitor runs afterwards exactly as for a contribution.

    Raises:
        AccessDenied: caller is not the owner
        InvalidDestination: `to` is the zero address, the sale or the token owner
        TransferFailed: the token collaborator refused the transfer
    """

    with runtime.transaction() as tx:
        runtime.require_owner(caller)
        sale = tx.sale
        supply_owner = runtime.token.owner()
        require_destination(to, sale_address=sale.terms.address, token_owner=supply_owner)
        if amount_wei < 0 or amount_tokens < 0:
            raise InvalidAmount("allocation amounts must be >= 0")

        tx.stage(sale.credited(sale.terms.address, amount_wei))

        if not runtime.token.transfer_from(supply_owner, to, amount_tokens):
            raise TransferFailed(f"token allocation of {amount_tokens} to {to} failed")

        credited = tx.sale.with_event(fund_transfer(to, amount_wei, True))
        final = tx.stage(check_goal_and_cap(credited))

    logger.info(
        f"Owner allocated {amount_tokens} tokens to {to} against {amount_wei} wei",
        extra={
            "recipient": to,
            "amount_wei": amount_wei,
            "amount_tokens": amount_tokens,
            "amount_raised": final.amount_raised,
        },
    )
    return AllocationResult(
        recipient=to,
        amount_wei=amount_wei,
        amount_tokens=amount_tokens,
        amount_raised=final.amount_raised,
    )


__all__ = [
    "AllocationResult",
    "terminate",
    "set_rate",
    "set_end",
    "owner_allocate_tokens",
]
