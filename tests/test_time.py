"""
Tests for `domain/time.py`.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from conftest import START
from domain.time import FixedClock, SystemClock, require_utc_timestamp


def test_require_utc_timestamp() -> None:
    require_utc_timestamp("ts", START)

    with pytest.raises(ValueError):
        require_utc_timestamp("ts", datetime(2025, 1, 1))
    with pytest.raises(ValueError):
        require_utc_timestamp("ts", datetime(2025, 1, 1, tzinfo=timezone(timedelta(hours=-5))))


def test_fixed_clock_moves_only_when_told() -> None:
    clock = FixedClock(START)
    assert clock.now() == START

    assert clock.advance(minutes=5) == START + timedelta(minutes=5)
    clock.set(START)
    assert clock.now() == START

    with pytest.raises(ValueError):
        clock.advance(seconds=-1)
    with pytest.raises(ValueError):
        clock.set(datetime(2025, 1, 1))


def test_system_clock_is_utc() -> None:
    now = SystemClock().now()
    assert now.utcoffset() == timedelta(0)
