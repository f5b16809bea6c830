"""
Pytest configuration and shared fixtures.

This file adds the project root to the Python path so that tests can import
from the domain, services, repositories and api packages, and provides a
freshly constructed sale driven by a manual clock.
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from domain.rate import ether  # noqa: E402
from domain.time import FixedClock  # noqa: E402
from services.collaborators import (  # noqa: E402
    InMemoryRewardToken,
    InMemoryVault,
    OwnerAccessControl,
)
from services.sale_runtime import construct_sale  # noqa: E402

SALE = "0x5a1e000000000000000000000000000000000001"
BENEFICIARY = "0xbe4e000000000000000000000000000000000002"
TOKEN = "0x70c0000000000000000000000000000000000003"
ALICE = "0xa11c000000000000000000000000000000000004"
OWNER = "0x0e4e000000000000000000000000000000000005"
BOB = "0xb0b0000000000000000000000000000000000006"
CAROL = "0xca40000000000000000000000000000000000007"

START = datetime(2025, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
DURATION_MINUTES = 60


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(START)


@pytest.fixture
def token() -> InMemoryRewardToken:
    return InMemoryRewardToken(address=TOKEN, owner=OWNER, total_supply=ether(1_000_000_000))


@pytest.fixture
def vault() -> InMemoryVault:
    return InMemoryVault()


@pytest.fixture
def access() -> OwnerAccessControl:
    return OwnerAccessControl(OWNER)


@pytest.fixture
def runtime(clock, token, vault, access):
    """Goal 10 ETH, cap 20 ETH, minimum 0.01 ETH, rate 5000, one hour window."""

    return construct_sale(
        address=SALE,
        beneficiary=BENEFICIARY,
        funding_goal=ether(10),
        funding_cap=ether(20),
        min_contribution=ether("0.01"),
        start_time=START,
        duration_minutes=DURATION_MINUTES,
        rate=5000,
        token=token,
        vault=vault,
        access=access,
        clock=clock,
    )


@pytest.fixture
def after_deadline(clock):
    """Advance the clock past the sale deadline."""

    def _advance() -> None:
        clock.advance(minutes=DURATION_MINUTES + 1)

    return _advance
