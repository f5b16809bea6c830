"""
Tests for `domain/rate.py`.

Covers contract rules:
- Rate must lie within [5000, 10000].
- numTokens = amount * rate with uint256 overflow checking.
- ether() converts whole and fractional ether amounts to wei.
"""

from __future__ import annotations

import pytest

from domain.errors import InvalidRateRange
from domain.rate import (
    HIGH_RANGE_RATE,
    LOW_RANGE_RATE,
    UINT256_MAX,
    RateConverter,
    checked_add,
    checked_mul,
    ether,
    require_rate_in_range,
)


@pytest.mark.parametrize("rate", [LOW_RANGE_RATE, 7500, HIGH_RANGE_RATE])
def test_rate_within_bounds_is_accepted(rate: int) -> None:
    assert require_rate_in_range(rate) == rate


@pytest.mark.parametrize("rate", [0, LOW_RANGE_RATE - 1, HIGH_RANGE_RATE + 1, -5000])
def test_rate_outside_bounds_is_rejected(rate: int) -> None:
    with pytest.raises(InvalidRateRange):
        require_rate_in_range(rate)

    with pytest.raises(InvalidRateRange):
        RateConverter(rate)


def test_tokens_for_multiplies_by_rate() -> None:
    """10 ETH at rate 5000 yields 50000 token units per unit of decimal alignment."""

    converter = RateConverter(5000)
    assert converter.tokens_for(ether(10)) == 50000 * ether(1)
    assert converter.tokens_for(0) == 0


def test_checked_arithmetic_overflows_past_uint256() -> None:
    assert checked_add(UINT256_MAX - 1, 1) == UINT256_MAX
    with pytest.raises(OverflowError):
        checked_add(UINT256_MAX, 1)

    with pytest.raises(OverflowError):
        checked_mul(UINT256_MAX // 2 + 1, 2)

    with pytest.raises(OverflowError):
        RateConverter(HIGH_RANGE_RATE).tokens_for(UINT256_MAX // HIGH_RANGE_RATE + 1)


def test_ether_conversion() -> None:
    assert ether(1) == 10 ** 18
    assert ether("0.01") == 10 ** 16
    assert ether(0) == 0

    with pytest.raises(ValueError):
        ether("0.0000000000000000001")
