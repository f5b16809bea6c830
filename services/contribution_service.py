"""
Contribution service.

The single path by which base currency enters the sale.

Order of effects (all inside one transaction):
1. Gates: not paused, before deadline, sale not closed, amount >= minimum
2. Credit the caller's ledger balance and amountRaised (staged before any
   external call)
3. numTokens = amount * rate (uint256-checked)
4. Token transfer from the token supply owner to the caller
5. Vault receives the contributed amount
6. FundTransfer(caller, amount, True) notification
7. Goal/cap monitor
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from domain.errors import BelowMinimumContribution, InvalidAmount, TransferFailed
from domain.events import fund_transfer
from domain.gates import require_before_deadline, require_sale_not_closed
from domain.monitor import check_goal_and_cap
from domain.rate import RateConverter
from services.sale_runtime import SaleRuntime

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ContributionReceipt:
    """
    Result of an accepted contribution.

    goal_reached / cap_reached report whether this contribution flipped a latch.
    """
    contributor: str
    amount: int
    tokens: int
    amount_raised: int
    goal_reached: bool
    cap_reached: bool


def contribute(runtime: SaleRuntime, caller: str, amount: int) -> ContributionReceipt:
    """
    Accept `amount` wei from `caller` and issue tokens at the current rate.

    Raises:
        SalePaused, TimeWindowViolation, SaleClosedViolation,
        BelowMinimumContribution, InvalidAmount: Gate failures
        TransferFailed: The token collaborator refused the transfer
        OverflowError: amount * rate exceeds uint256
    """

    with runtime.transaction() as tx:
        runtime.require_not_paused()
        sale = tx.sale
        require_before_deadline(sale, runtime.current_time())
        require_sale_not_closed(sale)

        if amount < 0:
            raise InvalidAmount("contribution must be >= 0")
        if amount < sale.terms.min_contribution:
            raise BelowMinimumContribution(
                f"contribution {amount} is below the minimum of {sale.terms.min_contribution}"
            )

        tx.stage(sale.credited(caller, amount))

        num_tokens = RateConverter(sale.rate).tokens_for(amount)
        supply_owner = runtime.token.owner()
        if not runtime.token.transfer_from(supply_owner, caller, num_tokens):
            raise TransferFailed(f"token transfer of {num_tokens} to {caller} failed")

        runtime.vault.receive(caller, amount)

        credited = tx.sale.with_event(fund_transfer(caller, amount, True))
        final = tx.stage(check_goal_and_cap(credited))

    goal_flipped = final.funding_goal_reached and not sale.funding_goal_reached
    cap_flipped = final.funding_cap_reached and not sale.funding_cap_reached

    logger.info(
        f"Contribution of {amount} wei from {caller} for {num_tokens} tokens",
        extra={
            "contributor": caller,
            "amount": amount,
            "tokens": num_tokens,
            "rate": sale.rate,
            "amount_raised": final.amount_raised,
        },
    )
    if goal_flipped:
        logger.info(
            f"Funding goal reached with {final.amount_raised} wei raised",
            extra={"beneficiary": final.terms.beneficiary, "amount_raised": final.amount_raised},
        )
    if cap_flipped:
        logger.info(
            f"Funding cap reached with {final.amount_raised} wei raised; sale closed",
            extra={"beneficiary": final.terms.beneficiary, "amount_raised": final.amount_raised},
        )

    return ContributionReceipt(
        contributor=caller,
        amount=amount,
        tokens=num_tokens,
        amount_raised=final.amount_raised,
        goal_reached=goal_flipped,
        cap_reached=cap_flipped,
    )


__all__ = [
    "ContributionReceipt",
    "contribute",
]
