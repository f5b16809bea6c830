"""
Sale runtime.

Owns the single Sale value for a fundraising event and serializes every
operation against it.

Handles:
- One re-entrant lock around each public operation
- All-or-nothing transactions: staged state is rolled back to the pre-call
  snapshot if anything inside the operation raises
- Commit listeners (e.g. Supabase persistence) notified once per outermost
  commit; a failing listener is logged and sees the full delta next time
- The construct operation (construct_sale)
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Dict, Iterator, List, Optional

from domain.errors import AccessDenied, ConstructionInvariantViolation, SalePaused
from domain.rate import CURRENCY_DECIMALS
from domain.sale import Sale
from domain.time import Clock, SystemClock
from services.collaborators import AccessControl, CurrencyVault, RewardToken

logger = logging.getLogger(__name__)

CommitListener = Callable[[Sale, Sale], None]


class SaleTransaction:
    """Handle given to an operation while it holds the runtime lock."""

    def __init__(self, runtime: "SaleRuntime", snapshot: Sale) -> None:
        self._runtime = runtime
        self.snapshot = snapshot

    @property
    def sale(self) -> Sale:
        return self._runtime._sale

    def stage(self, sale: Sale) -> Sale:
        """
        Make `sale` the visible state for the rest of this operation.

        Stage before calling out to a collaborator so that a re-entrant call
        observes the updated ledger, never the pre-call one.
        """

        self._runtime._sale = sale
        return sale


class SaleRuntime:
    def __init__(
        self,
        sale: Sale,
        *,
        token: RewardToken,
        vault: CurrencyVault,
        access: AccessControl,
        clock: Optional[Clock] = None,
    ) -> None:
        self._sale = sale
        self._lock = threading.RLock()
        self._depth = 0
        self._listeners: List[CommitListener] = []
        # Last state each listener accepted, keyed by position in _listeners
        self._delivered: Dict[int, Sale] = {}
        self.token = token
        self.vault = vault
        self.access = access
        self.clock = clock or SystemClock()

    @property
    def sale(self) -> Sale:
        with self._lock:
            return self._sale

    def current_time(self) -> datetime:
        return self.clock.now()

    def add_listener(self, listener: CommitListener) -> None:
        with self._lock:
            self._delivered[len(self._listeners)] = self._sale
            self._listeners.append(listener)

    def require_owner(self, caller: str) -> None:
        if not self.access.is_owner(caller):
            logger.warning(
                f"Rejected owner-only call from {caller}",
                extra={"caller": caller, "sale": self._sale.terms.address},
            )
            raise AccessDenied(f"{caller} is not the sale owner")

    def require_not_paused(self) -> None:
        if self.access.is_paused():
            raise SalePaused("sale is paused")

    @contextmanager
    def transaction(self) -> Iterator[SaleTransaction]:
        """
        Run one operation atomically.

        Example:
            with runtime.transaction() as tx:
                tx.stage(tx.sale.closed())
        """

        with self._lock:
            snapshot = self._sale
            tx = SaleTransaction(self, snapshot)
            self._depth += 1
            try:
                yield tx
            except BaseException:
                self._sale = snapshot
                raise
            finally:
                self._depth -= 1

            # Nested transactions commit into the outer one
            if self._depth == 0:
                self._notify(self._sale)

    def _notify(self, committed: Sale) -> None:
        """
        Deliver a committed state to every listener.

        The call has already taken effect on the token and the vault, so a
        listener failure cannot undo it. The failure is logged and the
        listener receives the whole undelivered delta on the next commit.
        """

        for index, listener in enumerate(self._listeners):
            delivered = self._delivered[index]
            if delivered is committed:
                continue
            try:
                listener(delivered, committed)
            except Exception:
                logger.exception(
                    f"Commit listener {listener!r} failed for sale {committed.terms.address}",
                    extra={"sale": committed.terms.address, "events": len(committed.events)},
                )
                continue
            self._delivered[index] = committed


def construct_sale(
    *,
    address: str,
    beneficiary: str,
    funding_goal: int,
    funding_cap: int,
    min_contribution: int,
    start_time: datetime,
    duration_minutes: int,
    rate: int,
    token: RewardToken,
    vault: CurrencyVault,
    access: AccessControl,
    clock: Optional[Clock] = None,
) -> SaleRuntime:
    """
    Create the sale and the runtime that guards it.

    Args:
        address: The sale's own account identity
        beneficiary: Account paid on successful settlement
        funding_goal: Minimum total raise in wei
        funding_cap: Maximum total raise in wei
        min_contribution: Smallest accepted contribution in wei
        start_time: UTC start of the sale window
        duration_minutes: Length of the sale window; end_time = start + duration
        rate: Token units per wei, within [LOW_RANGE_RATE, HIGH_RANGE_RATE]
        token: Reward token collaborator; must use CURRENCY_DECIMALS decimals

    Raises:
        ConstructionInvariantViolation: On invalid parties, amounts, duration or
            a token whose decimals do not match the base currency
        InvalidRateRange: If the rate is out of range
    """

    sale = Sale.open(
        address=address,
        beneficiary=beneficiary,
        token_address=token.address,
        funding_goal=funding_goal,
        funding_cap=funding_cap,
        min_contribution=min_contribution,
        start_time=start_time,
        duration_minutes=duration_minutes,
        rate=rate,
    )

    if token.decimals() != CURRENCY_DECIMALS:
        raise ConstructionInvariantViolation(
            f"token must use {CURRENCY_DECIMALS} decimals, got {token.decimals()}"
        )

    logger.info(
        f"Sale {address} constructed: goal={funding_goal} cap={funding_cap} rate={rate}",
        extra={
            "sale": address,
            "beneficiary": beneficiary,
            "start_time": start_time.isoformat(),
            "end_time": sale.end_time.isoformat(),
        },
    )
    return SaleRuntime(sale, token=token, vault=vault, access=access, clock=clock)


__all__ = [
    "CommitListener",
    "SaleTransaction",
    "SaleRuntime",
    "construct_sale",
]
