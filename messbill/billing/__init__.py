"""Billing package: the bill calculator and its input helpers."""

from messbill.billing.calculator import (
    calculate,
    effective_meals,
    round_outstanding,
)
from messbill.billing.cook_charge import CookCharge, CookChargeMode
from messbill.billing.errors import (
    CalculationError,
    CalculationErrorKind,
    EmptyMembersError,
    NoBillableMembersError,
    ZeroMealsError,
)

__all__ = [
    "calculate",
    "effective_meals",
    "round_outstanding",
    "CookCharge",
    "CookChargeMode",
    "CalculationError",
    "CalculationErrorKind",
    "EmptyMembersError",
    "NoBillableMembersError",
    "ZeroMealsError",
]
