"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
All amounts are integers in the smallest unit (wei for currency, token units
for the reward token).
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# ============================================================================
# Sale Models
# ============================================================================

class SaleInfoResponse(BaseModel):
    """Current state of the sale."""
    address: str
    beneficiary: str
    token_address: str
    funding_goal: int
    funding_cap: int
    min_contribution: int
    rate: int
    start_time: datetime
    end_time: datetime
    amount_raised: int
    refund_amount: int
    vault_balance: int
    funding_goal_reached: bool
    funding_cap_reached: bool
    sale_closed: bool
    paused: bool
    phase: str  # NOT_STARTED, OPEN, ENDED, CLOSED

    class Config:
        json_schema_extra = {
            "example": {
                "address": "0x5a1e000000000000000000000000000000000001",
                "beneficiary": "0xbe4e000000000000000000000000000000000002",
                "token_address": "0x70c0000000000000000000000000000000000003",
                "funding_goal": 10000000000000000000,
                "funding_cap": 20000000000000000000,
                "min_contribution": 10000000000000000,
                "rate": 5000,
                "start_time": "2025-01-01T00:00:00Z",
                "end_time": "2025-01-08T00:00:00Z",
                "amount_raised": 0,
                "refund_amount": 0,
                "vault_balance": 0,
                "funding_goal_reached": False,
                "funding_cap_reached": False,
                "sale_closed": False,
                "paused": False,
                "phase": "OPEN"
            }
        }


class SaleProgressResponse(BaseModel):
    """Progress against goal and cap in basis points (10000 = 100%)."""
    goal_bp: int
    cap_bp: int
    remaining_to_cap: int
    is_successful: bool


class ContributorResponse(BaseModel):
    account: str
    balance: int
    can_refund: bool


class EventResponse(BaseModel):
    kind: str  # GoalReached, CapReached, FundTransfer
    account: str
    amount: int
    is_contribution: Optional[bool] = None


class EventListResponse(BaseModel):
    events: List[EventResponse]
    total_count: int


class QuoteResponse(BaseModel):
    amount_wei: int
    rate: int
    tokens: int


# ============================================================================
# Contribution / Settlement Models
# ============================================================================

class ContributionRequest(BaseModel):
    amount_wei: int = Field(..., ge=0, description="Contributed amount in wei")

    class Config:
        json_schema_extra = {
            "example": {
                "amount_wei": 1000000000000000000
            }
        }


class ContributionResponse(BaseModel):
    contributor: str
    amount: int
    tokens: int
    amount_raised: int
    goal_reached: bool
    cap_reached: bool


class WithdrawalResponse(BaseModel):
    """Amount paid out by a refund or owner withdrawal (0 for a no-op)."""
    account: str
    amount: int


# ============================================================================
# Admin Models
# ============================================================================

class RateRequest(BaseModel):
    rate: int = Field(..., description="Token units per wei")


class EndTimeRequest(BaseModel):
    end_time: datetime = Field(..., description="New deadline (UTC)")


class AllocationRequest(BaseModel):
    to: str = Field(..., description="Token recipient")
    amount_wei: int = Field(..., ge=0, description="Wei recorded as raised")
    amount_tokens: int = Field(..., ge=0, description="Token units transferred to the recipient")

    class Config:
        json_schema_extra = {
            "example": {
                "to": "0xa11c000000000000000000000000000000000004",
                "amount_wei": 1000000000000000000,
                "amount_tokens": 5000000000000000000000
            }
        }


class AllocationResponse(BaseModel):
    recipient: str
    amount_wei: int
    amount_tokens: int
    amount_raised: int


class StatusResponse(BaseModel):
    status: str


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: Optional[str] = None
    status_code: int

    class Config:
        json_schema_extra = {
            "example": {
                "error": "SaleClosedViolation",
                "detail": "sale is closed",
                "status_code": 409
            }
        }
