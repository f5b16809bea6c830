"""
Sale API Endpoints.

Read-only endpoints for the sale state, progress, contributors and event log.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_runtime
from api.models import (
    ContributorResponse,
    EventListResponse,
    EventResponse,
    QuoteResponse,
    SaleInfoResponse,
    SaleProgressResponse,
)
from domain.events import EventKind
from services.query_service import (
    get_contributor_info,
    get_sale_info,
    get_sale_progress,
    list_events,
    quote_tokens,
)
from services.sale_runtime import SaleRuntime

router = APIRouter()


@router.get(
    "/sale",
    response_model=SaleInfoResponse,
    summary="Sale State",
    description="Terms, totals, latches and phase of the sale."
)
def read_sale(runtime: SaleRuntime = Depends(get_runtime)):
    info = get_sale_info(runtime)
    return SaleInfoResponse(
        address=info.address,
        beneficiary=info.beneficiary,
        token_address=info.token_address,
        funding_goal=info.funding_goal,
        funding_cap=info.funding_cap,
        min_contribution=info.min_contribution,
        rate=info.rate,
        start_time=info.start_time,
        end_time=info.end_time,
        amount_raised=info.amount_raised,
        refund_amount=info.refund_amount,
        vault_balance=info.vault_balance,
        funding_goal_reached=info.funding_goal_reached,
        funding_cap_reached=info.funding_cap_reached,
        sale_closed=info.sale_closed,
        paused=info.paused,
        phase=info.phase.value,
    )


@router.get(
    "/sale/progress",
    response_model=SaleProgressResponse,
    summary="Sale Progress",
)
def read_progress(runtime: SaleRuntime = Depends(get_runtime)):
    progress = get_sale_progress(runtime)
    return SaleProgressResponse(
        goal_bp=progress.goal_bp,
        cap_bp=progress.cap_bp,
        remaining_to_cap=progress.remaining_to_cap,
        is_successful=progress.is_successful,
    )


@router.get(
    "/sale/contributors/{account}",
    response_model=ContributorResponse,
    summary="Contributor Balance",
)
def read_contributor(account: str, runtime: SaleRuntime = Depends(get_runtime)):
    info = get_contributor_info(runtime, account)
    return ContributorResponse(account=info.account, balance=info.balance, can_refund=info.can_refund)


@router.get(
    "/sale/events",
    response_model=EventListResponse,
    summary="Event Log",
    description="Append-only notifications: GoalReached, CapReached, FundTransfer."
)
def read_events(
    kind: Optional[str] = Query(None, description="Filter by kind (e.g. 'FundTransfer')"),
    runtime: SaleRuntime = Depends(get_runtime),
):
    event_kind = None
    if kind is not None:
        try:
            event_kind = EventKind(kind)
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Unknown event kind: {kind}")

    events = [
        EventResponse(
            kind=event.kind.value,
            account=event.account,
            amount=event.amount,
            is_contribution=event.is_contribution,
        )
        for event in list_events(runtime, event_kind)
    ]
    return EventListResponse(events=events, total_count=len(events))


@router.get(
    "/sale/quote",
    response_model=QuoteResponse,
    summary="Token Quote",
    description="Tokens a contribution would receive at the current rate."
)
def read_quote(
    amount_wei: int = Query(..., ge=0, description="Contribution amount in wei"),
    runtime: SaleRuntime = Depends(get_runtime),
):
    return QuoteResponse(
        amount_wei=amount_wei,
        rate=runtime.sale.rate,
        tokens=quote_tokens(runtime, amount_wei),
    )
