"""
Core Data Models for the Mess Bill Calculator

These models define the schemas for everything that flows into and out of
the bill calculation:
1. Member and ExpenseInputs are edited freely by the user
2. BillResult and Overview are derived, never authoritative
3. HistoryEntry is an immutable snapshot of one calculation

DESIGN DECISION: Amounts are plain floats in a single currency unit.
Only the final outstanding balance is rounded to a whole unit.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# INPUT MODELS
# =============================================================================

class Member(BaseModel):
    """
    One person on the mess ledger for a billing period.

    Guest-only members never receive a meal allocation or an
    establishment charge; they only pay their guest charges and fines.

    The guest-only flag is exported as `isGuest`, the key used in shared
    member files.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Member name (unique, case-insensitive)"
    )
    meals: float = Field(
        default=0.0,
        ge=0,
        description="Meals actually consumed this period"
    )
    deposits: float = Field(
        default=0.0,
        ge=0,
        description="Amount pre-paid toward this period"
    )
    guest: float = Field(
        default=0.0,
        ge=0,
        description="Guest-meal charges hosted by this member"
    )
    fine: float = Field(
        default=0.0,
        ge=0,
        description="Flat penalty added to the bill"
    )
    is_guest_only: bool = Field(
        default=False,
        validation_alias=AliasChoices("is_guest_only", "isGuestOnly", "isGuest"),
        serialization_alias="isGuest",
        description="Member only pays guest charges"
    )
    email: Optional[str] = Field(
        default=None,
        max_length=254,
        description="Contact address for bill notifications"
    )

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        """Empty addresses become None; anything else needs an @."""
        if v is None or not v:
            return None
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError(f"Invalid email address: {v}")
        return v


class ExpenseInputs(BaseModel):
    """
    Period-scoped expense inputs.

    Only the resolved total cook charge is stored here; the per-head
    rate shown in the UI is derived by `messbill.billing.CookCharge`.
    """

    rice_cost: float = Field(default=0.0, ge=0)
    marketing_cost: float = Field(default=0.0, ge=0)
    gas_cost: float = Field(default=0.0, ge=0)
    paper_cost: float = Field(default=0.0, ge=0)
    other_costs: float = Field(default=0.0, ge=0)
    total_cook_charge: float = Field(
        default=0.0,
        ge=0,
        description="Resolved total cook charge for the period"
    )
    bound_meal: float = Field(
        default=0.0,
        ge=0,
        description="Minimum meals credited to every billable member"
    )

    @property
    def total_marketing(self) -> float:
        """Per-meal cost pool: rice + marketing + gas."""
        return self.rice_cost + self.marketing_cost + self.gas_cost

    @property
    def total_overhead(self) -> float:
        """Per-head cost pool: cook + paper + other."""
        return self.total_cook_charge + self.paper_cost + self.other_costs


# =============================================================================
# RESULT MODELS
# =============================================================================

class BillResult(Member):
    """A member together with their computed bill."""

    effective_meals: float = Field(
        ...,
        description="Meals charged after applying the bound-meal floor"
    )
    meal_cost: float
    establishment_charge: float
    total_bill: float = Field(
        ...,
        description="Unrounded bill before deposits"
    )
    outstanding: int = Field(
        ...,
        description="Rounded balance owed (negative means refund)"
    )

    @property
    def min_meals_applied(self) -> bool:
        """True when the bound-meal floor raised this member's meals."""
        return not self.is_guest_only and self.effective_meals > self.meals


class Overview(BaseModel):
    """Aggregate snapshot that accompanies every calculation."""

    total_meals: float = Field(
        ...,
        description="Total effective meals across all members"
    )
    meal_rate: float = Field(
        ...,
        description="Cost per effective meal (may be negative)"
    )
    total_members: int = Field(
        ...,
        ge=0,
        description="Number of non-guest members"
    )
    establishment_charge: float = Field(
        ...,
        description="Overhead share per non-guest member"
    )


class BillingOutcome(BaseModel):
    """Everything one successful calculation produces."""

    results: list[BillResult]
    overview: Overview

    @property
    def total_outstanding(self) -> int:
        return sum(result.outstanding for result in self.results)


class HistoryEntry(BaseModel):
    """
    Immutable snapshot of one calculation.

    Stored newest first in a bounded log (see `messbill.history`).
    """
    model_config = ConfigDict(frozen=True)

    entry_id: UUID = Field(default_factory=uuid4)
    recorded_at: datetime = Field(default_factory=_utcnow)
    members: tuple[Member, ...]
    expenses: ExpenseInputs
    results: tuple[BillResult, ...]
    overview: Overview


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in the calculation inputs."""

    field: str = Field(
        ...,
        description="Input the issue relates to"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'duplicate', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """
    Result of the two-stage input check.

    Stage 1: Structure (can a bill be computed at all?)
    Stage 2: Semantics (is the outcome plausible?)
    """

    validated_at: datetime = Field(default_factory=_utcnow)
    structure_valid: bool
    semantic_valid: bool
    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")
