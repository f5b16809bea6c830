"""
Domain: Time and closure gates.

Each operation declares which of these must hold before it touches state.
A failing gate raises and the operation has no effect.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from .errors import SaleClosedViolation, TimeWindowViolation
from .sale import Sale
from .time import require_utc_timestamp


class SalePhase(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    OPEN = "OPEN"
    ENDED = "ENDED"
    CLOSED = "CLOSED"


def is_before_deadline(sale: Sale, now: datetime) -> bool:
    require_utc_timestamp("now", now)
    return now < sale.end_time


def is_after_deadline(sale: Sale, now: datetime) -> bool:
    return not is_before_deadline(sale, now)


def require_before_deadline(sale: Sale, now: datetime) -> None:
    if not is_before_deadline(sale, now):
        raise TimeWindowViolation(f"sale deadline {sale.end_time.isoformat()} has passed")


def require_after_deadline(sale: Sale, now: datetime) -> None:
    if not is_after_deadline(sale, now):
        raise TimeWindowViolation(f"sale deadline {sale.end_time.isoformat()} has not passed yet")


def require_sale_not_closed(sale: Sale) -> None:
    if sale.sale_closed:
        raise SaleClosedViolation("sale is closed")


def phase(sale: Sale, now: datetime) -> SalePhase:
    """
    Reporting-only view of where the sale stands.

    Contributions are not gated on start_time; NOT_STARTED is informational.
    """

    if sale.sale_closed:
        return SalePhase.CLOSED
    if is_after_deadline(sale, now):
        return SalePhase.ENDED
    if now < sale.terms.start_time:
        return SalePhase.NOT_STARTED
    return SalePhase.OPEN
