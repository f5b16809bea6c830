"""
Check the persisted status of a sale.

Loads the sale row, balances and event log from Supabase and prints a summary.

Usage:
    python scripts/check_sale_status.py 0x5a1e000000000000000000000000000000000001
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path so we can import from repositories
sys.path.insert(0, str(Path(__file__).parent.parent))

from repositories.sale_repository import load_sale


def check_sale_status(sale_address: str) -> int:
    sale = load_sale(sale_address)
    if sale is None:
        print(f"[ERROR] No persisted sale found for {sale_address}")
        return 1

    terms = sale.terms
    print(f"Sale {terms.address}")
    print(f"  Beneficiary:   {terms.beneficiary}")
    print(f"  Token:         {terms.token_address}")
    print(f"  Goal / Cap:    {terms.funding_goal} / {terms.funding_cap} wei")
    print(f"  Window:        {terms.start_time.isoformat()} -> {sale.end_time.isoformat()}")
    print(f"  Rate:          {sale.rate}")
    print(f"  Raised:        {sale.amount_raised} wei")
    print(f"  Refunded:      {sale.refund_amount} wei")
    print(f"  Goal reached:  {sale.funding_goal_reached}")
    print(f"  Cap reached:   {sale.funding_cap_reached}")
    print(f"  Closed:        {sale.sale_closed}")
    print(f"  Conserved:     {sale.ledger.is_conserved()}")

    contributors = {a: b for a, b in sale.ledger.balances.items() if b > 0}
    print(f"\nContributors with a balance: {len(contributors)}")
    for account, balance in sorted(contributors.items(), key=lambda item: -item[1]):
        print(f"  {account}: {balance} wei")

    print(f"\nEvents: {len(sale.events)}")
    for event in sale.events[-10:]:
        print(f"  {event.kind.value} {event.account} {event.amount}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Print a persisted sale from Supabase")
    parser.add_argument("sale_address", help="Sale account identity")
    args = parser.parse_args()
    return check_sale_status(args.sale_address)


if __name__ == "__main__":
    sys.exit(main())
