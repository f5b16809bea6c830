"""
Tests for `services/sale_runtime.py`.

Covers:
- Commit listeners fire once per outermost transaction, with the state before
  the outer call and the final committed state.
- A nested commit that the outer transaction rolls back is never delivered.
- A failing listener does not turn a committed call into an error; it is
  logged and the next delivery carries the whole undelivered delta.
"""

from __future__ import annotations

import logging

import pytest

from conftest import ALICE, BOB
from domain.events import fund_transfer
from domain.rate import ether
from services.contribution_service import contribute


def test_nested_transaction_notifies_once(runtime) -> None:
    calls = []
    runtime.add_listener(lambda previous, current: calls.append((previous, current)))
    original = runtime.sale

    with runtime.transaction() as outer:
        outer.stage(outer.sale.credited(ALICE, 5))
        with runtime.transaction() as inner:
            inner.stage(inner.sale.with_event(fund_transfer(ALICE, 5, True)))
        assert calls == []

    assert calls == [(original, runtime.sale)]
    assert runtime.sale.balance_of(ALICE) == 5
    assert len(runtime.sale.events) == 1


def test_rolled_back_outer_discards_nested_commit(runtime) -> None:
    calls = []
    runtime.add_listener(lambda previous, current: calls.append((previous, current)))
    original = runtime.sale

    with pytest.raises(RuntimeError):
        with runtime.transaction() as outer:
            with runtime.transaction() as inner:
                inner.stage(inner.sale.with_event(fund_transfer(ALICE, 5, True)))
            outer.stage(outer.sale.credited(ALICE, 5))
            raise RuntimeError("collaborator failed")

    assert calls == []
    assert runtime.sale is original


def test_failing_listener_keeps_committed_outcome(runtime, vault, token, caplog) -> None:
    delivered = []
    failures = [RuntimeError("supabase unavailable")]

    def flaky_listener(previous, current) -> None:
        if failures:
            raise failures.pop()
        delivered.append((previous, current))

    runtime.add_listener(flaky_listener)
    original = runtime.sale

    with caplog.at_level(logging.ERROR, logger="services.sale_runtime"):
        receipt = contribute(runtime, ALICE, ether(1))

    assert receipt.amount_raised == ether(1)
    assert runtime.sale.balance_of(ALICE) == ether(1)
    assert vault.balance() == ether(1)
    assert token.balance_of(ALICE) == ether(1) * 5000
    assert any("Commit listener" in record.getMessage() for record in caplog.records)
    assert delivered == []

    contribute(runtime, BOB, ether(2))

    assert len(delivered) == 1
    previous, current = delivered[0]
    assert previous is original
    assert current.balance_of(ALICE) == ether(1)
    assert current.balance_of(BOB) == ether(2)


def test_listener_added_later_starts_from_current_state(runtime) -> None:
    contribute(runtime, ALICE, ether(1))
    before = runtime.sale

    calls = []
    runtime.add_listener(lambda previous, current: calls.append(previous))
    contribute(runtime, BOB, ether(1))

    assert calls == [before]
