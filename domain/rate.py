"""
Domain: Exchange rate and unit conversion.

Contract excerpts implemented here:
- The rate is the number of token units issued per base-currency unit and must
  satisfy LOW_RANGE_RATE <= rate <= HIGH_RANGE_RATE.
- numTokens = amount * rate, computed with uint256 overflow checking.
- The base currency and the reward token share CURRENCY_DECIMALS decimal
  places. This is a deployment precondition; no decimal conversion happens here.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Union

from .errors import InvalidRateRange

LOW_RANGE_RATE: int = 5000
HIGH_RANGE_RATE: int = 10000

CURRENCY_DECIMALS: int = 18
WEI_PER_ETHER: int = 10 ** CURRENCY_DECIMALS

UINT256_MAX: int = 2 ** 256 - 1


def require_rate_in_range(rate: int) -> int:
    if rate < LOW_RANGE_RATE or rate > HIGH_RANGE_RATE:
        raise InvalidRateRange(
            f"rate must be within [{LOW_RANGE_RATE}, {HIGH_RANGE_RATE}], got {rate}"
        )
    return rate


def checked_add(a: int, b: int) -> int:
    result = a + b
    if result > UINT256_MAX:
        raise OverflowError("uint256 addition overflow")
    return result


def checked_mul(a: int, b: int) -> int:
    result = a * b
    if result > UINT256_MAX:
        raise OverflowError("uint256 multiplication overflow")
    return result


def ether(value: Union[int, str, Decimal]) -> int:
    """
    Convert a whole or fractional ether amount into wei.

    Example:
        ether("0.01")  # 10_000_000_000_000_000
    """

    wei = Decimal(str(value)) * WEI_PER_ETHER
    if wei != wei.to_integral_value():
        raise ValueError(f"{value} ether is not a whole number of wei")
    return int(wei)


@dataclass(frozen=True, slots=True)
class RateConverter:
    """Maps a contributed wei amount to token units at a bounded rate."""

    rate: int

    def __post_init__(self) -> None:
        require_rate_in_range(self.rate)

    def tokens_for(self, amount_wei: int) -> int:
        return checked_mul(amount_wei, self.rate)


__all__ = [
    "LOW_RANGE_RATE",
    "HIGH_RANGE_RATE",
    "CURRENCY_DECIMALS",
    "WEI_PER_ETHER",
    "UINT256_MAX",
    "require_rate_in_range",
    "checked_add",
    "checked_mul",
    "ether",
    "RateConverter",
]
