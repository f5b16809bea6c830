"""
External collaborators consumed by the sale.

The sale only depends on the capability surfaces below:
- RewardToken: transfer_from(supply_owner, recipient, amount), owner(), decimals()
- CurrencyVault: the base-currency balance held by the sale (receive/send)
- AccessControl: is_owner(caller), is_paused()

In-memory implementations are provided for the API process, the scripts and
the tests. They do not model allowances or any other token internals.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict

from domain.account import is_zero_address
from domain.errors import AccessDenied, InvalidAmount, InvalidDestination, TransferFailed
from domain.rate import CURRENCY_DECIMALS

logger = logging.getLogger(__name__)


class RewardToken(ABC):
    """Capability surface of the reward token contract."""

    address: str

    @abstractmethod
    def transfer_from(self, supply_owner: str, recipient: str, amount: int) -> bool:
        """Move `amount` token units from the supply owner to `recipient`. False on failure."""
        raise NotImplementedError

    @abstractmethod
    def owner(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def decimals(self) -> int:
        raise NotImplementedError


class CurrencyVault(ABC):
    """Base-currency funds held by the sale."""

    @abstractmethod
    def balance(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def receive(self, sender: str, amount: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def send(self, recipient: str, amount: int) -> None:
        """Pay `amount` out of the vault. Raises TransferFailed if it cannot."""
        raise NotImplementedError


class AccessControl(ABC):
    @abstractmethod
    def is_owner(self, caller: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def is_paused(self) -> bool:
        raise NotImplementedError


class InMemoryRewardToken(RewardToken):
    """Token whose whole supply starts with its owner."""

    def __init__(
        self,
        address: str,
        owner: str,
        total_supply: int,
        decimals: int = CURRENCY_DECIMALS,
    ) -> None:
        self.address = address
        self._owner = owner
        self._decimals = decimals
        self._balances: Dict[str, int] = {owner: total_supply}

    def transfer_from(self, supply_owner: str, recipient: str, amount: int) -> bool:
        available = self._balances.get(supply_owner, 0)
        if amount < 0 or amount > available:
            logger.warning(
                f"Token transfer of {amount} from {supply_owner} rejected",
                extra={"supply_owner": supply_owner, "recipient": recipient, "amount": amount, "available": available},
            )
            return False
        self._balances[supply_owner] = available - amount
        self._balances[recipient] = self._balances.get(recipient, 0) + amount
        return True

    def owner(self) -> str:
        return self._owner

    def decimals(self) -> int:
        return self._decimals

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)


class InMemoryVault(CurrencyVault):
    """Vault that records every payout per recipient."""

    def __init__(self) -> None:
        self._balance = 0
        self.received: Dict[str, int] = {}
        self.paid_out: Dict[str, int] = {}

    def balance(self) -> int:
        return self._balance

    def receive(self, sender: str, amount: int) -> None:
        if amount < 0:
            raise InvalidAmount("received amount must be >= 0")
        self._balance += amount
        self.received[sender] = self.received.get(sender, 0) + amount

    def send(self, recipient: str, amount: int) -> None:
        if amount < 0:
            raise InvalidAmount("sent amount must be >= 0")
        if amount > self._balance:
            raise TransferFailed(f"vault holds {self._balance}, cannot send {amount}")
        self._balance -= amount
        self.paid_out[recipient] = self.paid_out.get(recipient, 0) + amount


class OwnerAccessControl(AccessControl):
    """Single-owner access control with a pause switch."""

    def __init__(self, owner: str) -> None:
        self._owner = owner
        self._paused = False

    @property
    def owner(self) -> str:
        return self._owner

    def is_owner(self, caller: str) -> bool:
        return caller == self._owner

    def is_paused(self) -> bool:
        return self._paused

    def _require_owner(self, caller: str) -> None:
        if not self.is_owner(caller):
            raise AccessDenied(f"{caller} is not the owner")

    def pause(self, caller: str) -> None:
        self._require_owner(caller)
        self._paused = True

    def unpause(self, caller: str) -> None:
        self._require_owner(caller)
        self._paused = False

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        self._require_owner(caller)
        if is_zero_address(new_owner):
            raise InvalidDestination("new owner must not be the zero address")
        self._owner = new_owner


__all__ = [
    "RewardToken",
    "CurrencyVault",
    "AccessControl",
    "InMemoryRewardToken",
    "InMemoryVault",
    "OwnerAccessControl",
]
