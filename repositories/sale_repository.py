"""
Sale repository (persistence).

This module provides *only* persistence operations for the Sale domain value.
It does not enforce business rules; the runtime has already validated and
committed every state it is asked to store.

Tables:
- crowdsales: one row per sale (terms, rate, deadline, totals, latches)
- crowdsale_balances: one row per (sale_address, account)
- crowdsale_events: append-only event log, ordered by sequence

Amounts are stored as strings: they are uint256 values that do not fit a
JSON number without losing precision.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from domain.events import EventKind, SaleEvent
from domain.ledger import Ledger
from domain.sale import Sale, SaleTerms
from domain.time import require_utc_timestamp
from repositories.client import get_supabase

logger = logging.getLogger(__name__)

# Supabase table names.
# Keep these aligned with your database schema.
_SALES_TABLE: str = "crowdsales"
_BALANCES_TABLE: str = "crowdsale_balances"
_EVENTS_TABLE: str = "crowdsale_events"


def _to_iso_utc(dt: datetime, *, name: str) -> str:
    """Serialize a UTC datetime to ISO-8601 (timezone-aware, offset 0)."""

    require_utc_timestamp(name, dt)
    return dt.astimezone(timezone.utc).isoformat()


def _parse_utc_datetime(value: Any) -> datetime:
    """
    Parse a Supabase timestamp into a timezone-aware UTC datetime.

    Supabase commonly returns ISO-8601 strings, sometimes with a trailing 'Z'.
    """

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise TypeError(f"Unsupported timestamp type: {type(value)!r}")

    if dt.tzinfo is None or dt.utcoffset() is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _raise_on_error(response: Any, action: str) -> List[Mapping[str, Any]]:
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to {action}: {error}")
    return getattr(response, "data", None) or []


def sale_to_row(sale: Sale) -> Dict[str, Any]:
    terms = sale.terms
    return {
        "sale_address": terms.address,
        "beneficiary": terms.beneficiary,
        "token_address": terms.token_address,
        "funding_goal_wei": str(terms.funding_goal),
        "funding_cap_wei": str(terms.funding_cap),
        "min_contribution_wei": str(terms.min_contribution),
        "start_time_utc": _to_iso_utc(terms.start_time, name="start_time"),
        "end_time_utc": _to_iso_utc(sale.end_time, name="end_time"),
        "rate": sale.rate,
        "amount_raised_wei": str(sale.amount_raised),
        "refund_amount_wei": str(sale.refund_amount),
        "funding_goal_reached": sale.funding_goal_reached,
        "funding_cap_reached": sale.funding_cap_reached,
        "sale_closed": sale.sale_closed,
        "updated_at_utc": datetime.now(timezone.utc).isoformat(),
    }


def event_to_row(sale_address: str, sequence: int, event: SaleEvent) -> Dict[str, Any]:
    return {
        "sale_address": sale_address,
        "sequence": sequence,
        "kind": event.kind.value,
        "account": event.account,
        "amount_wei": str(event.amount),
        "is_contribution": event.is_contribution,
    }


def _row_to_event(row: Mapping[str, Any]) -> SaleEvent:
    return SaleEvent(
        kind=EventKind(str(row["kind"])),
        account=str(row["account"]),
        amount=int(row["amount_wei"]),
        is_contribution=row.get("is_contribution"),
    )


def row_to_sale(
    row: Mapping[str, Any],
    balance_rows: Iterable[Mapping[str, Any]] = (),
    event_rows: Iterable[Mapping[str, Any]] = (),
) -> Sale:
    """Convert Supabase rows back into a Sale."""

    terms = SaleTerms(
        address=str(row["sale_address"]),
        beneficiary=str(row["beneficiary"]),
        token_address=str(row["token_address"]),
        funding_goal=int(row["funding_goal_wei"]),
        funding_cap=int(row["funding_cap_wei"]),
        min_contribution=int(row["min_contribution_wei"]),
        start_time=_parse_utc_datetime(row["start_time_utc"]),
    )
    ledger = Ledger(
        balances={str(b["account"]): int(b["balance_wei"]) for b in balance_rows},
        amount_raised=int(row["amount_raised_wei"]),
        refund_amount=int(row["refund_amount_wei"]),
    )
    ordered = sorted(event_rows, key=lambda e: int(e["sequence"]))
    return Sale(
        terms=terms,
        rate=int(row["rate"]),
        end_time=_parse_utc_datetime(row["end_time_utc"]),
        ledger=ledger,
        funding_goal_reached=bool(row["funding_goal_reached"]),
        funding_cap_reached=bool(row["funding_cap_reached"]),
        sale_closed=bool(row["sale_closed"]),
        events=tuple(_row_to_event(e) for e in ordered),
    )


def save_sale(sale: Sale) -> None:
    """Upsert the sale row (keyed by sale_address)."""

    response = get_supabase().table(_SALES_TABLE).upsert(sale_to_row(sale)).execute()
    _raise_on_error(response, "save sale")


def save_balances(sale: Sale, accounts: Iterable[str]) -> None:
    """Upsert ledger balances for the given accounts."""

    payload = [
        {
            "sale_address": sale.terms.address,
            "account": account,
            "balance_wei": str(sale.balance_of(account)),
        }
        for account in accounts
    ]
    if not payload:
        return

    response = get_supabase().table(_BALANCES_TABLE).upsert(payload).execute()
    _raise_on_error(response, "save balances")


def append_events(sale: Sale, start: int) -> None:
    """Insert sale.events[start:] with their log positions as sequence numbers."""

    payload = [
        event_to_row(sale.terms.address, sequence, event)
        for sequence, event in enumerate(sale.events[start:], start=start)
    ]
    if not payload:
        return

    response = get_supabase().table(_EVENTS_TABLE).insert(payload).execute()
    _raise_on_error(response, "append events")


def persist_transition(previous: Sale, current: Sale) -> None:
    """
    Commit listener: mirror one committed transition into Supabase.

    Only balances that changed and events appended since `previous` are written.
    """

    changed = [
        account
        for account, balance in current.ledger.balances.items()
        if previous.balance_of(account) != balance
    ]

    save_sale(current)
    save_balances(current, changed)
    append_events(current, len(previous.events))

    logger.info(
        f"Persisted sale {current.terms.address}",
        extra={
            "sale": current.terms.address,
            "balances_written": len(changed),
            "events_written": len(current.events) - len(previous.events),
        },
    )


def load_sale(sale_address: str) -> Optional[Sale]:
    """
    Load a persisted sale with its balances and event log.

    Returns:
        Sale or None if not found
    """

    client = get_supabase()

    response = (
        client.table(_SALES_TABLE)
        .select("*")
        .eq("sale_address", sale_address)
        .limit(1)
        .execute()
    )
    rows = _raise_on_error(response, "get sale")
    if not rows:
        return None

    balances = _raise_on_error(
        client.table(_BALANCES_TABLE).select("*").eq("sale_address", sale_address).execute(),
        "list balances",
    )
    events = _raise_on_error(
        client.table(_EVENTS_TABLE)
        .select("*")
        .eq("sale_address", sale_address)
        .order("sequence")
        .execute(),
        "list events",
    )
    return row_to_sale(rows[0], balances, events)


__all__ = [
    "sale_to_row",
    "row_to_sale",
    "event_to_row",
    "save_sale",
    "save_balances",
    "append_events",
    "persist_transition",
    "load_sale",
]
