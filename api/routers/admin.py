"""
Admin API Endpoints.

Owner-only operations. Every route requires the X-Caller header to name the
sale owner; anything else is rejected with 403.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_caller, get_runtime
from api.models import (
    AllocationRequest,
    AllocationResponse,
    EndTimeRequest,
    RateRequest,
    StatusResponse,
    WithdrawalResponse,
)
from domain.errors import AccessDenied
from services.admin_service import owner_allocate_tokens, set_end, set_rate, terminate
from services.collaborators import OwnerAccessControl
from services.sale_runtime import SaleRuntime
from services.settlement_service import owner_safe_withdrawal, owner_unlock_fund

router = APIRouter()


@router.post("/admin/withdrawals", response_model=WithdrawalResponse, summary="Withdraw To Beneficiary")
def post_owner_withdrawal(
    caller: str = Depends(get_caller),
    runtime: SaleRuntime = Depends(get_runtime),
):
    """
    Send the whole vault balance to the beneficiary after a successful sale.

    Repeatable. When the vault is already empty the response amount is 0 and
    no FundTransfer event is recorded.
    """
    amount = owner_safe_withdrawal(runtime, caller)
    return WithdrawalResponse(account=runtime.sale.terms.beneficiary, amount=amount)


@router.post("/admin/unlock", response_model=StatusResponse, summary="Reopen Refunds")
def post_unlock(
    caller: str = Depends(get_caller),
    runtime: SaleRuntime = Depends(get_runtime),
):
    owner_unlock_fund(runtime, caller)
    return StatusResponse(status="unlocked")


@router.post("/admin/terminate", response_model=StatusResponse, summary="Terminate Sale")
def post_terminate(
    caller: str = Depends(get_caller),
    runtime: SaleRuntime = Depends(get_runtime),
):
    terminate(runtime, caller)
    return StatusResponse(status="closed")


@router.put("/admin/rate", response_model=StatusResponse, summary="Set Rate")
def put_rate(
    request: RateRequest,
    caller: str = Depends(get_caller),
    runtime: SaleRuntime = Depends(get_runtime),
):
    set_rate(runtime, caller, request.rate)
    return StatusResponse(status="updated")


@router.put("/admin/end-time", response_model=StatusResponse, summary="Set Deadline")
def put_end_time(
    request: EndTimeRequest,
    caller: str = Depends(get_caller),
    runtime: SaleRuntime = Depends(get_runtime),
):
    set_end(runtime, caller, request.end_time)
    return StatusResponse(status="updated")


@router.post("/admin/allocations", response_model=AllocationResponse, summary="Allocate Tokens")
def post_allocation(
    request: AllocationRequest,
    caller: str = Depends(get_caller),
    runtime: SaleRuntime = Depends(get_runtime),
):
    result = owner_allocate_tokens(runtime, caller, request.to, request.amount_wei, request.amount_tokens)
    return AllocationResponse(
        recipient=result.recipient,
        amount_wei=result.amount_wei,
        amount_tokens=result.amount_tokens,
        amount_raised=result.amount_raised,
    )


def _owner_access(runtime: SaleRuntime) -> OwnerAccessControl:
    if not isinstance(runtime.access, OwnerAccessControl):
        # Pause state lives in an external access-control contract.
        raise AccessDenied("pause is managed outside this service")
    return runtime.access


@router.post("/admin/pause", response_model=StatusResponse, summary="Pause Contributions")
def post_pause(
    caller: str = Depends(get_caller),
    runtime: SaleRuntime = Depends(get_runtime),
):
    _owner_access(runtime).pause(caller)
    return StatusResponse(status="paused")


@router.post("/admin/unpause", response_model=StatusResponse, summary="Resume Contributions")
def post_unpause(
    caller: str = Depends(get_caller),
    runtime: SaleRuntime = Depends(get_runtime),
):
    _owner_access(runtime).unpause(caller)
    return StatusResponse(status="active")
