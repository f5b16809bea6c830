"""
Contributions and Refunds API Endpoints.

Endpoints open to any caller: contributing to the sale and claiming a refund
after a failed sale.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_caller, get_runtime
from api.models import ContributionRequest, ContributionResponse, WithdrawalResponse
from services.contribution_service import contribute
from services.sale_runtime import SaleRuntime
from services.settlement_service import safe_withdrawal

router = APIRouter()


@router.post(
    "/contributions",
    response_model=ContributionResponse,
    summary="Contribute",
    description="Contribute wei to the sale and receive tokens at the current rate."
)
def post_contribution(
    request: ContributionRequest,
    caller: str = Depends(get_caller),
    runtime: SaleRuntime = Depends(get_runtime),
):
    """
    Contribute to the sale.

    **Rejected when:**
    - the sale is paused, closed, or past its deadline
    - the amount is below the minimum contribution

    **Example request:**
    ```json
    {"amount_wei": 1000000000000000000}
    ```
    """
    receipt = contribute(runtime, caller, request.amount_wei)
    return ContributionResponse(
        contributor=receipt.contributor,
        amount=receipt.amount,
        tokens=receipt.tokens,
        amount_raised=receipt.amount_raised,
        goal_reached=receipt.goal_reached,
        cap_reached=receipt.cap_reached,
    )


@router.post(
    "/refunds",
    response_model=WithdrawalResponse,
    summary="Claim Refund",
    description="After the deadline of a sale that missed its goal, refund the caller's full balance."
)
def post_refund(
    caller: str = Depends(get_caller),
    runtime: SaleRuntime = Depends(get_runtime),
):
    amount = safe_withdrawal(runtime, caller)
    return WithdrawalResponse(account=caller, amount=amount)
