"""
Domain: Sale error taxonomy.

Every SaleError is a precondition violation. When one is raised from a sale
operation, the operation has had no effect on the Sale state.
"""

from __future__ import annotations


class SaleError(ValueError):
    """Base class for rejected sale operations."""
    pass


class AccessDenied(SaleError):
    """Raised when a non-owner calls an owner-only operation."""
    pass


class SalePaused(SaleError):
    """Raised when a pause-gated operation is called while the sale is paused."""
    pass


class TimeWindowViolation(SaleError):
    """Raised when an operation is called on the wrong side of the deadline."""
    pass


class SaleClosedViolation(SaleError):
    """Raised when contributing to a closed sale."""
    pass


class BelowMinimumContribution(SaleError):
    pass


class InvalidAmount(SaleError):
    """Raised for negative amounts."""
    pass


class InvalidDestination(SaleError):
    """Raised for the zero address, the sale itself or the token owner as recipient."""
    pass


class InvalidRateRange(SaleError):
    pass


class InvalidTimeUpdate(SaleError):
    """Raised when a new end time is in the past or not after the start time."""
    pass


class ConstructionInvariantViolation(SaleError):
    pass


class GoalNotReached(SaleError):
    """Raised when the owner withdraws while the funding goal latch is not set."""
    pass


class TransferFailed(RuntimeError):
    """Raised when a token or currency collaborator reports a failed transfer."""
    pass


__all__ = [
    "SaleError",
    "AccessDenied",
    "SalePaused",
    "TimeWindowViolation",
    "SaleClosedViolation",
    "BelowMinimumContribution",
    "InvalidAmount",
    "InvalidDestination",
    "InvalidRateRange",
    "InvalidTimeUpdate",
    "ConstructionInvariantViolation",
    "GoalNotReached",
    "TransferFailed",
]
