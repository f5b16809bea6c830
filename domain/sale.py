"""
Domain: Sale state.

Contract excerpts implemented here:
- beneficiary, token address, funding goal, funding cap and minimum
  contribution are fixed at construction; fundingGoal <= fundingCap.
- endTime = startTime + duration at construction and always > startTime.
- fundingGoalReached and fundingCapReached are one-way latches; only the
  explicit owner unlock clears fundingGoalReached.
- saleClosed latches permanently once set.

The Sale is a single immutable value. Every operation builds a new Sale from
the previous one, so a caller can discard a half-built transition and keep the
snapshot it started from.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Tuple

from .account import is_zero_address
from .errors import ConstructionInvariantViolation
from .events import SaleEvent
from .ledger import Ledger
from .rate import require_rate_in_range
from .time import require_utc_timestamp


@dataclass(frozen=True, slots=True)
class SaleTerms:
    """
    Construction parameters that never change for the lifetime of the sale.

    Amounts are in the base currency's smallest unit (wei).
    """

    address: str  # the sale's own identity
    beneficiary: str
    token_address: str
    funding_goal: int
    funding_cap: int
    min_contribution: int
    start_time: datetime

    def __post_init__(self) -> None:
        require_utc_timestamp("start_time", self.start_time)

        if is_zero_address(self.address):
            raise ConstructionInvariantViolation("sale address must not be the zero address")
        if is_zero_address(self.beneficiary) or self.beneficiary == self.address:
            raise ConstructionInvariantViolation("beneficiary must be a non-zero address other than the sale")
        if is_zero_address(self.token_address) or self.token_address == self.address:
            raise ConstructionInvariantViolation("token address must be a non-zero address other than the sale")
        if self.funding_goal < 0 or self.funding_cap < 0 or self.min_contribution < 0:
            raise ConstructionInvariantViolation("goal, cap and minimum contribution must be >= 0")
        if self.funding_goal > self.funding_cap:
            raise ConstructionInvariantViolation("funding goal must not exceed funding cap")


@dataclass(frozen=True, slots=True)
class Sale:
    terms: SaleTerms
    rate: int
    end_time: datetime
    ledger: Ledger = field(default_factory=Ledger)
    funding_goal_reached: bool = False
    funding_cap_reached: bool = False
    sale_closed: bool = False
    events: Tuple[SaleEvent, ...] = ()

    def __post_init__(self) -> None:
        require_utc_timestamp("end_time", self.end_time)
        if self.end_time <= self.terms.start_time:
            raise ConstructionInvariantViolation("end_time must be after start_time")

    @staticmethod
    def open(
        *,
        address: str,
        beneficiary: str,
        token_address: str,
        funding_goal: int,
        funding_cap: int,
        min_contribution: int,
        start_time: datetime,
        duration_minutes: int,
        rate: int,
    ) -> "Sale":
        """
        Construct a fresh sale.

        Raises ConstructionInvariantViolation for invalid parties, amounts or
        duration, and InvalidRateRange for an out-of-range rate.
        """

        if duration_minutes <= 0:
            raise ConstructionInvariantViolation("duration must be > 0 minutes")

        terms = SaleTerms(
            address=address,
            beneficiary=beneficiary,
            token_address=token_address,
            funding_goal=funding_goal,
            funding_cap=funding_cap,
            min_contribution=min_contribution,
            start_time=start_time,
        )
        return Sale(
            terms=terms,
            rate=require_rate_in_range(rate),
            end_time=start_time + timedelta(minutes=duration_minutes),
        )

    @property
    def amount_raised(self) -> int:
        return self.ledger.amount_raised

    @property
    def refund_amount(self) -> int:
        return self.ledger.refund_amount

    def balance_of(self, account: str) -> int:
        return self.ledger.balance_of(account)

    def with_event(self, event: SaleEvent) -> "Sale":
        return replace(self, events=self.events + (event,))

    def credited(self, account: str, amount: int) -> "Sale":
        return replace(self, ledger=self.ledger.credit(account, amount))

    def refunded(self, account: str) -> tuple["Sale", int]:
        ledger, amount = self.ledger.refund(account)
        if amount == 0:
            return self, 0
        return replace(self, ledger=ledger), amount

    def closed(self) -> "Sale":
        return replace(self, sale_closed=True)

    def with_rate(self, rate: int) -> "Sale":
        return replace(self, rate=require_rate_in_range(rate))

    def with_end_time(self, end_time: datetime) -> "Sale":
        return replace(self, end_time=end_time)

    def goal_unlocked(self) -> "Sale":
        return replace(self, funding_goal_reached=False)
