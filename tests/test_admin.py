"""
Tests for `services/admin_service.py` and the in-memory access control.

Covers contract rules:
- Every admin operation is owner-only.
- terminate closes the sale permanently.
- set_rate enforces [5000, 10000].
- set_end rejects past times, may shorten or lengthen the window.
- owner_allocate_tokens validates the destination, transfers tokens, credits
  the sale's own ledger entry, emits FundTransfer and runs the monitor.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from conftest import ALICE, BOB, OWNER, SALE, START
from domain.account import ZERO_ADDRESS
from domain.errors import (
    AccessDenied,
    InvalidDestination,
    InvalidRateRange,
    InvalidTimeUpdate,
    SaleClosedViolation,
    TimeWindowViolation,
    TransferFailed,
)
from domain.events import EventKind, fund_transfer
from domain.rate import ether
from services.admin_service import owner_allocate_tokens, set_end, set_rate, terminate
from services.contribution_service import contribute


class TestTerminate:
    def test_closes_sale(self, runtime) -> None:
        terminate(runtime, OWNER)
        assert runtime.sale.sale_closed

        terminate(runtime, OWNER)
        assert runtime.sale.sale_closed

        with pytest.raises(SaleClosedViolation):
            contribute(runtime, ALICE, ether(1))

    def test_requires_owner(self, runtime) -> None:
        with pytest.raises(AccessDenied):
            terminate(runtime, ALICE)
        assert not runtime.sale.sale_closed


class TestSetRate:
    def test_updates_rate(self, runtime) -> None:
        set_rate(runtime, OWNER, 7500)
        assert runtime.sale.rate == 7500

    @pytest.mark.parametrize("rate", [4999, 10001, 0])
    def test_rejects_out_of_range(self, runtime, rate: int) -> None:
        with pytest.raises(InvalidRateRange):
            set_rate(runtime, OWNER, rate)
        assert runtime.sale.rate == 5000

    def test_requires_owner(self, runtime) -> None:
        with pytest.raises(AccessDenied):
            set_rate(runtime, ALICE, 6000)


class TestSetEnd:
    def test_extends_and_shortens(self, runtime, clock) -> None:
        later = START + timedelta(days=2)
        set_end(runtime, OWNER, later)
        assert runtime.sale.end_time == later

        clock.advance(minutes=10)
        sooner = clock.now() + timedelta(minutes=1)
        set_end(runtime, OWNER, sooner)
        assert runtime.sale.end_time == sooner

    def test_accepts_current_time(self, runtime, clock) -> None:
        clock.advance(minutes=5)
        set_end(runtime, OWNER, clock.now())
        assert runtime.sale.end_time == clock.now()

        with pytest.raises(TimeWindowViolation):
            contribute(runtime, ALICE, ether(1))

    def test_rejects_past_time(self, runtime, clock) -> None:
        clock.advance(minutes=30)
        with pytest.raises(InvalidTimeUpdate):
            set_end(runtime, OWNER, clock.now() - timedelta(seconds=1))

    def test_rejects_end_not_after_start(self, runtime, clock) -> None:
        clock.set(START - timedelta(hours=1))
        with pytest.raises(InvalidTimeUpdate):
            set_end(runtime, OWNER, START)

    def test_rejects_naive_time(self, runtime) -> None:
        with pytest.raises(InvalidTimeUpdate):
            set_end(runtime, OWNER, datetime(2030, 1, 1))

    def test_requires_owner(self, runtime) -> None:
        with pytest.raises(AccessDenied):
            set_end(runtime, ALICE, datetime(2030, 1, 1, tzinfo=timezone.utc))


class TestOwnerAllocateTokens:
    def test_credits_sale_entry_and_transfers_tokens(self, runtime, token) -> None:
        result = owner_allocate_tokens(runtime, OWNER, ALICE, ether(3), 12345)

        sale = runtime.sale
        assert result.amount_raised == ether(3)
        assert token.balance_of(ALICE) == 12345
        assert sale.balance_of(SALE) == ether(3)
        assert sale.balance_of(ALICE) == 0
        assert sale.amount_raised == ether(3)
        assert sale.ledger.is_conserved()
        assert sale.events == (fund_transfer(ALICE, ether(3), True),)

    def test_runs_monitor(self, runtime) -> None:
        owner_allocate_tokens(runtime, OWNER, ALICE, ether(20), 1)

        sale = runtime.sale
        assert sale.funding_goal_reached
        assert sale.funding_cap_reached
        assert sale.sale_closed
        assert [e.kind for e in sale.events] == [
            EventKind.FUND_TRANSFER,
            EventKind.GOAL_REACHED,
            EventKind.CAP_REACHED,
        ]

    def test_not_time_gated(self, runtime, after_deadline) -> None:
        after_deadline()
        owner_allocate_tokens(runtime, OWNER, BOB, ether(1), 1)
        assert runtime.sale.amount_raised == ether(1)

    @pytest.mark.parametrize("destination", [ZERO_ADDRESS, SALE, OWNER])
    def test_rejects_invalid_destination(self, runtime, destination: str) -> None:
        with pytest.raises(InvalidDestination):
            owner_allocate_tokens(runtime, OWNER, destination, ether(1), 1)
        assert runtime.sale.amount_raised == 0

    def test_rejects_destination_in_other_case(self, runtime) -> None:
        with pytest.raises(InvalidDestination):
            owner_allocate_tokens(runtime, OWNER, OWNER.upper().replace("0X", "0x"), ether(1), 1)
        with pytest.raises(InvalidDestination):
            owner_allocate_tokens(runtime, OWNER, SALE.upper().replace("0X", "0x"), ether(1), 1)

    def test_requires_owner(self, runtime) -> None:
        with pytest.raises(AccessDenied):
            owner_allocate_tokens(runtime, ALICE, BOB, ether(1), 1)

    def test_failed_token_transfer_aborts(self, runtime, token) -> None:
        supply = token.balance_of(OWNER)
        with pytest.raises(TransferFailed):
            owner_allocate_tokens(runtime, OWNER, ALICE, ether(1), supply + 1)

        assert runtime.sale.amount_raised == 0
        assert runtime.sale.events == ()


class TestOwnerAccessControl:
    def test_pause_and_ownership_are_owner_only(self, access) -> None:
        with pytest.raises(AccessDenied):
            access.pause(ALICE)

        access.transfer_ownership(OWNER, BOB)
        assert access.is_owner(BOB)
        assert not access.is_owner(OWNER)

        with pytest.raises(InvalidDestination):
            access.transfer_ownership(BOB, ZERO_ADDRESS)

