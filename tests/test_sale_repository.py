"""
Tests for `repositories/sale_repository.py`.

Supabase is replaced by a small fake that records the table calls, so these
tests exercise row mapping and the write pattern of a committed transition
without network access.
"""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Dict, List

import pytest

from conftest import ALICE, BENEFICIARY, BOB, SALE
from domain.rate import ether
from repositories import sale_repository
from repositories.sale_repository import (
    event_to_row,
    load_sale,
    persist_transition,
    row_to_sale,
    sale_to_row,
)
from services.contribution_service import contribute


class FakeQuery:
    def __init__(self, client: "FakeSupabase", table: str) -> None:
        self._client = client
        self._table = table
        self._filters: Dict[str, Any] = {}
        self._order = None
        self._limit = None
        self._write = None

    def select(self, _columns: str) -> "FakeQuery":
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self._filters[column] = value
        return self

    def order(self, column: str) -> "FakeQuery":
        self._order = column
        return self

    def limit(self, count: int) -> "FakeQuery":
        self._limit = count
        return self

    def upsert(self, payload: Any) -> "FakeQuery":
        self._write = ("upsert", payload)
        return self

    def insert(self, payload: Any) -> "FakeQuery":
        self._write = ("insert", payload)
        return self

    def execute(self) -> SimpleNamespace:
        if self._write is not None:
            action, payload = self._write
            rows = payload if isinstance(payload, list) else [payload]
            self._client.writes.append((self._table, action, rows))
            stored = self._client.tables.setdefault(self._table, [])
            for row in rows:
                if action == "upsert":
                    key = (row.get("sale_address"), row.get("account"))
                    stored[:] = [r for r in stored if (r.get("sale_address"), r.get("account")) != key]
                stored.append(row)
            return SimpleNamespace(data=rows, error=None)

        rows = [
            row
            for row in self._client.tables.get(self._table, [])
            if all(row.get(k) == v for k, v in self._filters.items())
        ]
        if self._order:
            rows = sorted(rows, key=lambda r: r[self._order])
        if self._limit is not None:
            rows = rows[: self._limit]
        return SimpleNamespace(data=rows, error=None)


class FakeSupabase:
    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.writes: List[Any] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


@pytest.fixture
def fake_supabase(monkeypatch) -> FakeSupabase:
    fake = FakeSupabase()
    monkeypatch.setattr(sale_repository, "get_supabase", lambda: fake)
    return fake


def test_row_mapping_preserves_sale(runtime) -> None:
    contribute(runtime, ALICE, ether(12))
    sale = runtime.sale

    row = sale_to_row(sale)
    assert row["amount_raised_wei"] == str(ether(12))
    assert row["start_time_utc"].endswith("+00:00")

    balances = [{"account": ALICE, "balance_wei": str(ether(12))}]
    events = [event_to_row(SALE, i, e) for i, e in enumerate(sale.events)]

    restored = row_to_sale(row, balances, list(reversed(events)))

    assert restored.terms == sale.terms
    assert restored.end_time == sale.end_time
    assert restored.rate == sale.rate
    assert restored.ledger == sale.ledger
    assert restored.funding_goal_reached
    assert restored.events == sale.events


def test_row_to_sale_accepts_zulu_timestamps(runtime) -> None:
    row = sale_to_row(runtime.sale)
    row["end_time_utc"] = row["end_time_utc"].replace("+00:00", "Z")

    assert row_to_sale(row).end_time == runtime.sale.end_time


def test_persist_transition_writes_only_changes(runtime, fake_supabase) -> None:
    runtime.add_listener(persist_transition)

    contribute(runtime, ALICE, ether(1))
    contribute(runtime, BOB, ether(2))

    balance_writes = [rows for table, _, rows in fake_supabase.writes if table == "crowdsale_balances"]
    assert balance_writes == [
        [{"sale_address": SALE, "account": ALICE, "balance_wei": str(ether(1))}],
        [{"sale_address": SALE, "account": BOB, "balance_wei": str(ether(2))}],
    ]

    event_rows = fake_supabase.tables["crowdsale_events"]
    assert [r["sequence"] for r in event_rows] == [0, 1]
    assert [r["account"] for r in event_rows] == [ALICE, BOB]


def test_rolled_back_call_writes_nothing(runtime, fake_supabase) -> None:
    from domain.errors import BelowMinimumContribution

    runtime.add_listener(persist_transition)

    with pytest.raises(BelowMinimumContribution):
        contribute(runtime, ALICE, 1)

    assert fake_supabase.writes == []


def test_load_sale(runtime, fake_supabase) -> None:
    fake_supabase.tables["crowdsales"] = [sale_to_row(runtime.sale)]
    runtime.add_listener(persist_transition)
    contribute(runtime, ALICE, ether(3))

    loaded = load_sale(SALE)

    assert loaded is not None
    assert loaded.terms.beneficiary == BENEFICIARY
    assert loaded.balance_of(ALICE) == ether(3)
    assert len(loaded.events) == 1
    assert load_sale("0xmissing") is None


def test_supabase_error_is_raised(runtime, monkeypatch) -> None:
    class FailingQuery(FakeQuery):
        def execute(self) -> SimpleNamespace:
            return SimpleNamespace(data=None, error="permission denied")

    class FailingSupabase(FakeSupabase):
        def table(self, name: str) -> FakeQuery:
            return FailingQuery(self, name)

    monkeypatch.setattr(sale_repository, "get_supabase", lambda: FailingSupabase())

    with pytest.raises(RuntimeError, match="permission denied"):
        sale_repository.save_sale(runtime.sale)


def _persisted_settings():
    from datetime import datetime, timezone

    from api.settings import SaleSettings
    from conftest import OWNER, TOKEN

    return SaleSettings(
        address=SALE,
        owner=OWNER,
        beneficiary=BENEFICIARY,
        token_address=TOKEN,
        token_supply=ether(1_000_000),
        funding_goal=ether(10),
        funding_cap=ether(20),
        min_contribution=0,
        start_time=datetime.now(timezone.utc),
        duration_minutes=60,
        rate=5000,
        persist=True,
    )


def test_restart_resumes_persisted_sale(fake_supabase) -> None:
    from api.dependencies import build_runtime

    settings = _persisted_settings()

    first = build_runtime(settings)
    contribute(first, ALICE, ether(3))

    second = build_runtime(settings)

    assert second.sale.amount_raised == ether(3)
    assert second.sale.balance_of(ALICE) == ether(3)
    assert second.sale.ledger.is_conserved()
    assert second.sale.events == first.sale.events
    assert len(fake_supabase.tables["crowdsales"]) == 1

    contribute(second, BOB, ether(1))

    stored = load_sale(SALE)
    assert stored is not None
    assert stored.amount_raised == ether(4)
    assert stored.ledger.is_conserved()
    sequences = [r["sequence"] for r in fake_supabase.tables["crowdsale_events"]]
    assert sequences == [0, 1]
