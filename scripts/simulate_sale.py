"""
Simulate a complete sale in memory.

Runs one of two scenarios against a fresh sale driven by a manual clock:
- success: two contributors fill the goal and then the cap, the owner
  withdraws to the beneficiary
- refund:  the goal is missed, a contributor claims a refund after the deadline

Usage:
    python scripts/simulate_sale.py --scenario success
    python scripts/simulate_sale.py --scenario refund --rate 7500
"""

import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add parent directory to path so we can import from domain and services
sys.path.insert(0, str(Path(__file__).parent.parent))

from domain.errors import SaleError
from domain.rate import ether
from domain.time import FixedClock
from services.collaborators import InMemoryRewardToken, InMemoryVault, OwnerAccessControl
from services.contribution_service import contribute
from services.query_service import get_sale_info
from services.sale_runtime import SaleRuntime, construct_sale
from services.settlement_service import owner_safe_withdrawal, safe_withdrawal

SALE = "0x5a1e000000000000000000000000000000000001"
OWNER = "0x0e4e000000000000000000000000000000000005"
BENEFICIARY = "0xbe4e000000000000000000000000000000000002"
TOKEN = "0x70c0000000000000000000000000000000000003"
ALICE = "0xa11c000000000000000000000000000000000004"
BOB = "0xb0b0000000000000000000000000000000000006"


def build_sale(rate: int, clock: FixedClock) -> tuple[SaleRuntime, InMemoryRewardToken, InMemoryVault]:
    token = InMemoryRewardToken(address=TOKEN, owner=OWNER, total_supply=ether(1_000_000_000))
    vault = InMemoryVault()
    runtime = construct_sale(
        address=SALE,
        beneficiary=BENEFICIARY,
        funding_goal=ether(10),
        funding_cap=ether(20),
        min_contribution=ether("0.01"),
        start_time=clock.now(),
        duration_minutes=60,
        rate=rate,
        token=token,
        vault=vault,
        access=OwnerAccessControl(OWNER),
        clock=clock,
    )
    return runtime, token, vault


def print_state(runtime: SaleRuntime) -> None:
    info = get_sale_info(runtime)
    print(f"  phase={info.phase.value} raised={info.amount_raised} refunded={info.refund_amount}")
    print(f"  goal_reached={info.funding_goal_reached} cap_reached={info.funding_cap_reached} closed={info.sale_closed}")
    print(f"  vault={info.vault_balance}")


def run_success(rate: int) -> None:
    clock = FixedClock(datetime(2025, 1, 1, tzinfo=timezone.utc))
    runtime, token, vault = build_sale(rate, clock)

    receipt = contribute(runtime, ALICE, ether(10))
    print(f"Alice contributed 10 ETH for {receipt.tokens} token units (goal reached: {receipt.goal_reached})")
    receipt = contribute(runtime, BOB, ether(10))
    print(f"Bob contributed 10 ETH for {receipt.tokens} token units (cap reached: {receipt.cap_reached})")
    print_state(runtime)

    try:
        contribute(runtime, ALICE, ether(1))
    except SaleError as e:
        print(f"Further contribution rejected: {type(e).__name__}: {e}")

    clock.advance(minutes=61)
    amount = owner_safe_withdrawal(runtime, OWNER)
    print(f"Owner withdrew {amount} wei to the beneficiary")
    print_state(runtime)


def run_refund(rate: int) -> None:
    clock = FixedClock(datetime(2025, 1, 1, tzinfo=timezone.utc))
    runtime, token, vault = build_sale(rate, clock)

    contribute(runtime, ALICE, ether(2))
    print("Alice contributed 2 ETH")
    clock.advance(minutes=61)
    print_state(runtime)

    try:
        owner_safe_withdrawal(runtime, OWNER)
    except SaleError as e:
        print(f"Owner withdrawal rejected: {type(e).__name__}: {e}")

    amount = safe_withdrawal(runtime, ALICE)
    print(f"Alice refunded {amount} wei")
    amount = safe_withdrawal(runtime, ALICE)
    print(f"Second refund call paid {amount} wei")
    print_state(runtime)


def main() -> int:
    parser = argparse.ArgumentParser(description="Simulate a crowdsale in memory")
    parser.add_argument("--scenario", choices=["success", "refund"], default="success")
    parser.add_argument("--rate", type=int, default=5000, help="Token units per wei")
    args = parser.parse_args()

    print(f"Running '{args.scenario}' scenario at rate {args.rate}")
    if args.scenario == "success":
        run_success(args.rate)
    else:
        run_refund(args.rate)
    return 0


if __name__ == "__main__":
    sys.exit(main())
