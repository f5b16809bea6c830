"""
Settlement service.

Three operations, all only after the deadline:
- owner_safe_withdrawal: success path, sends the whole vault balance to the
  beneficiary while the goal latch is set
- owner_unlock_fund: owner override that clears the goal latch so refunds open
- safe_withdrawal: refund path, pays a contributor back their full balance
  while the goal latch is not set

Refunds zero the ledger balance before the currency leaves the vault.
"""

from __future__ import annotations

import logging

from domain.errors import GoalNotReached
from domain.events import fund_transfer
from domain.gates import require_after_deadline
from services.sale_runtime import SaleRuntime

logger = logging.getLogger(__name__)


def owner_safe_withdrawal(runtime: SaleRuntime, caller: str) -> int:
    """
    Send everything the vault holds to the beneficiary.

    Callable repeatedly; each call drains whatever balance exists at call time.

    Returns:
        The amount sent. An empty vault returns 0 and emits no FundTransfer
        event.

    Raises:
        AccessDenied: caller is not the owner
        TimeWindowViolation: deadline has not passed
        GoalNotReached: goal latch is not set
    """

    with runtime.transaction() as tx:
        runtime.require_owner(caller)
        sale = tx.sale
        require_after_deadline(sale, runtime.current_time())
        if not sale.funding_goal_reached:
            raise GoalNotReached("funding goal has not been reached")

        amount = runtime.vault.balance()
        if amount == 0:
            return 0

        beneficiary = sale.terms.beneficiary
        tx.stage(sale.with_event(fund_transfer(beneficiary, amount, False)))
        runtime.vault.send(beneficiary, amount)

    logger.info(
        f"Withdrew {amount} wei to beneficiary {beneficiary}",
        extra={"beneficiary": beneficiary, "amount": amount},
    )
    return amount


def owner_unlock_fund(runtime: SaleRuntime, caller: str) -> None:
    """
    Clear the funding goal latch so contributors can claim refunds.

    Raises:
        AccessDenied: caller is not the owner
        TimeWindowViolation: deadline has not passed
    """

    with runtime.transaction() as tx:
        runtime.require_owner(caller)
        require_after_deadline(tx.sale, runtime.current_time())
        was_reached = tx.sale.funding_goal_reached
        tx.stage(tx.sale.goal_unlocked())

    logger.info(
        "Funding goal latch cleared by owner; refunds are open",
        extra={"caller": caller, "was_reached": was_reached},
    )


def safe_withdrawal(runtime: SaleRuntime, caller: str) -> int:
    """
    Refund the caller's full contributed balance.

    A no-op returning 0 while the goal latch is set or when the caller has
    nothing to claim, so a second call after a refund pays nothing.

    Raises:
        TimeWindowViolation: deadline has not passed
        TransferFailed: the vault could not pay; the ledger is left untouched
    """

    with runtime.transaction() as tx:
        sale = tx.sale
        require_after_deadline(sale, runtime.current_time())
        if sale.funding_goal_reached:
            return 0

        refunded, amount = sale.refunded(caller)
        if amount == 0:
            return 0

        tx.stage(refunded.with_event(fund_transfer(caller, amount, False)))
        runtime.vault.send(caller, amount)

    logger.info(
        f"Refunded {amount} wei to {caller}",
        extra={"contributor": caller, "amount": amount, "refund_amount": refunded.refund_amount},
    )
    return amount


__all__ = [
    "owner_safe_withdrawal",
    "owner_unlock_fund",
    "safe_withdrawal",
]
