"""
Domain: Account identifiers.

Accounts are opaque string identifiers (e.g. "0xabc..."). The zero address is
reserved and never a valid party to the sale.
"""

from __future__ import annotations

from .errors import InvalidDestination

ZERO_ADDRESS: str = "0x" + "0" * 40


def is_zero_address(account: str) -> bool:
    return not account or account.lower() == ZERO_ADDRESS


def same_account(a: str, b: str) -> bool:
    """Hex identifiers compare case-insensitively."""

    return a.lower() == b.lower()


def require_destination(to: str, *, sale_address: str, token_owner: str) -> None:
    """
    Validate a manual allocation recipient.

    Rejects the zero address, the sale's own identity and the token owner.
    """

    if is_zero_address(to):
        raise InvalidDestination("destination must not be the zero address")
    if same_account(to, sale_address):
        raise InvalidDestination("destination must not be the sale itself")
    if same_account(to, token_owner):
        raise InvalidDestination("destination must not be the token owner")
