"""
FastAPI dependencies.

The API process hosts exactly one sale. It is built on first request from
SaleSettings with in-memory collaborators; when CROWDSALE_PERSIST is enabled
every committed transition is mirrored to Supabase.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from fastapi import Header

from services.collaborators import InMemoryRewardToken, InMemoryVault, OwnerAccessControl
from services.sale_runtime import SaleRuntime, construct_sale
from api.settings import SaleSettings

logger = logging.getLogger(__name__)

_runtime: Optional[SaleRuntime] = None
_runtime_lock = threading.Lock()


def build_runtime(settings: SaleSettings) -> SaleRuntime:
    """
    Build the process runtime.

    With persistence enabled an already persisted sale is resumed as stored;
    only a sale with no row yet is constructed from settings and saved.
    """

    token = InMemoryRewardToken(
        address=settings.token_address,
        owner=settings.owner,
        total_supply=settings.token_supply,
    )
    vault = InMemoryVault()
    access = OwnerAccessControl(settings.owner)

    if settings.persist:
        from repositories.sale_repository import load_sale, persist_transition, save_sale

        stored = load_sale(settings.address)
        if stored is not None:
            runtime = SaleRuntime(stored, token=token, vault=vault, access=access)
            logger.info(
                f"Resumed persisted sale {settings.address}",
                extra={
                    "sale": settings.address,
                    "amount_raised": stored.amount_raised,
                    "events": len(stored.events),
                },
            )
        else:
            runtime = _construct(settings, token, vault, access)
            save_sale(runtime.sale)
        runtime.add_listener(persist_transition)
        return runtime

    return _construct(settings, token, vault, access)


def _construct(
    settings: SaleSettings,
    token: InMemoryRewardToken,
    vault: InMemoryVault,
    access: OwnerAccessControl,
) -> SaleRuntime:
    return construct_sale(
        address=settings.address,
        beneficiary=settings.beneficiary,
        funding_goal=settings.funding_goal,
        funding_cap=settings.funding_cap,
        min_contribution=settings.min_contribution,
        start_time=settings.start_time,
        duration_minutes=settings.duration_minutes,
        rate=settings.rate,
        token=token,
        vault=vault,
        access=access,
    )


def get_runtime() -> SaleRuntime:
    global _runtime
    with _runtime_lock:
        if _runtime is None:
            _runtime = build_runtime(SaleSettings.from_env())
        return _runtime


def get_caller(x_caller: str = Header(..., description="Account identity of the caller")) -> str:
    return x_caller
