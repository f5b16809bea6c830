"""
Domain: Goal and cap monitor.

Contract excerpts implemented here:
- If the goal latch is unset and amountRaised >= fundingGoal, set it and emit
  GoalReached(beneficiary, amountRaised).
- If the cap latch is unset and amountRaised >= fundingCap, set it, close the
  sale and emit CapReached(beneficiary, amountRaised).
- Both checks are idempotent: once a latch is set, re-evaluating emits nothing.
  The monitor never clears a latch.
"""

from __future__ import annotations

from dataclasses import replace

from .events import cap_reached, goal_reached
from .sale import Sale


def check_funding_goal(sale: Sale) -> Sale:
    if sale.funding_goal_reached or sale.amount_raised < sale.terms.funding_goal:
        return sale
    latched = replace(sale, funding_goal_reached=True)
    return latched.with_event(goal_reached(sale.terms.beneficiary, sale.amount_raised))


def check_funding_cap(sale: Sale) -> Sale:
    if sale.funding_cap_reached or sale.amount_raised < sale.terms.funding_cap:
        return sale
    latched = replace(sale, funding_cap_reached=True, sale_closed=True)
    return latched.with_event(cap_reached(sale.terms.beneficiary, sale.amount_raised))


def check_goal_and_cap(sale: Sale) -> Sale:
    return check_funding_cap(check_funding_goal(sale))
