"""
Sale configuration for the API process.

Values are read from environment variables, loaded from the .env file at the
project root. A missing required variable fails fast with RuntimeError.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from domain.time import require_utc_timestamp

env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing environment variable: {name}.")
    return value


def _int_env(name: str, default: Optional[int] = None) -> int:
    raw = os.getenv(name)
    if not raw:
        if default is None:
            raise RuntimeError(f"Missing environment variable: {name}.")
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise RuntimeError(f"Environment variable {name} must be an integer, got {raw!r}") from e


@dataclass(frozen=True, slots=True)
class SaleSettings:
    address: str
    owner: str
    beneficiary: str
    token_address: str
    token_supply: int
    funding_goal: int
    funding_cap: int
    min_contribution: int
    start_time: datetime
    duration_minutes: int
    rate: int
    persist: bool = False

    @staticmethod
    def from_env() -> "SaleSettings":
        """
        Build settings from CROWDSALE_* environment variables.

        CROWDSALE_START_TIME is an ISO-8601 UTC timestamp and defaults to now.
        """

        start_raw = os.getenv("CROWDSALE_START_TIME")
        if start_raw:
            start_time = datetime.fromisoformat(start_raw.replace("Z", "+00:00"))
            require_utc_timestamp("CROWDSALE_START_TIME", start_time)
        else:
            start_time = datetime.now(timezone.utc)

        return SaleSettings(
            address=_require_env("CROWDSALE_ADDRESS"),
            owner=_require_env("CROWDSALE_OWNER"),
            beneficiary=_require_env("CROWDSALE_BENEFICIARY"),
            token_address=_require_env("CROWDSALE_TOKEN_ADDRESS"),
            token_supply=_int_env("CROWDSALE_TOKEN_SUPPLY"),
            funding_goal=_int_env("CROWDSALE_FUNDING_GOAL_WEI"),
            funding_cap=_int_env("CROWDSALE_FUNDING_CAP_WEI"),
            min_contribution=_int_env("CROWDSALE_MIN_CONTRIBUTION_WEI", 0),
            start_time=start_time,
            duration_minutes=_int_env("CROWDSALE_DURATION_MINUTES"),
            rate=_int_env("CROWDSALE_RATE"),
            persist=os.getenv("CROWDSALE_PERSIST", "").strip().lower() in _TRUE_VALUES,
        )
