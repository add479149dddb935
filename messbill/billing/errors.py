"""
Calculation errors.

All of these are user-input problems, not system faults. They are
deterministic: the same inputs always fail the same way, so callers
show the message and let the user fix the inputs instead of retrying.
"""

from enum import Enum
from typing import Optional


class CalculationErrorKind(str, Enum):
    """Why a calculation was refused."""
    EMPTY_MEMBERS = "empty_members"
    NO_BILLABLE_MEMBERS = "no_billable_members"
    ZERO_MEALS = "zero_meals"


class CalculationError(Exception):
    """Base exception for rejected calculations."""

    kind: CalculationErrorKind
    default_message = "Bills could not be calculated"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)


class EmptyMembersError(CalculationError):
    """No members were supplied."""

    kind = CalculationErrorKind.EMPTY_MEMBERS
    default_message = "Please add at least one member"


class NoBillableMembersError(CalculationError):
    """Every member is guest-only, so overhead cannot be shared."""

    kind = CalculationErrorKind.NO_BILLABLE_MEMBERS
    default_message = "At least one non-guest member is required"


class ZeroMealsError(CalculationError):
    """Total effective meals is zero, so there is no meal rate."""

    kind = CalculationErrorKind.ZERO_MEALS
    default_message = "Total meals cannot be zero"
