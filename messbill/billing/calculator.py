"""
Bill Calculator

Splits one billing period's costs across the mess members.

Two cost pools are shared differently:
- Per-meal pool (rice + marketing + gas), minus guest charges already
  collected, divided by total effective meals.
- Per-head pool (cook + paper + other), divided equally among the
  non-guest members.

Each member's effective meals are raised to the bound-meal floor so
under-reporting cannot shift costs onto everyone else. Guest-only
members pay only what they are charged directly.

Rounding: only `outstanding` is rounded, to a whole unit, half away
from zero. `total_bill` stays unrounded so printed bills match the
figures members have always been shown.

This module is pure. It never mutates its inputs and never logs.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from messbill.billing.errors import (
    EmptyMembersError,
    NoBillableMembersError,
    ZeroMealsError,
)
from messbill.models.mess import (
    BillingOutcome,
    BillResult,
    ExpenseInputs,
    Member,
    Overview,
)


def round_outstanding(amount: float) -> int:
    """Round a balance to the nearest whole unit, halves away from zero."""
    return int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def effective_meals(member: Member, bound_meal: float) -> float:
    """Meals a member is charged for after the bound-meal floor."""
    if member.is_guest_only:
        return 0.0
    return max(member.meals, bound_meal)


def calculate(
    members: Sequence[Member],
    expenses: ExpenseInputs,
) -> BillingOutcome:
    """
    Compute every member's bill for the period.

    Args:
        members: Member records, in display order
        expenses: Period expenses with the cook charge already resolved

    Returns:
        BillingOutcome with one BillResult per member (same order)
        and the period overview

    Raises:
        EmptyMembersError: No members given
        NoBillableMembersError: Every member is guest-only
        ZeroMealsError: Total effective meals is zero
    """
    if not members:
        raise EmptyMembersError()

    billable_count = sum(1 for m in members if not m.is_guest_only)
    if billable_count == 0:
        raise NoBillableMembersError()

    total_guest_charge = sum(m.guest for m in members)
    meals = [effective_meals(m, expenses.bound_meal) for m in members]
    total_meals = sum(meals)

    if total_meals == 0:
        raise ZeroMealsError()

    meal_rate = (expenses.total_marketing - total_guest_charge) / total_meals
    establishment_charge = expenses.total_overhead / billable_count

    results = []
    for member, member_meals in zip(members, meals):
        if member.is_guest_only:
            meal_cost = 0.0
            est_charge = 0.0
        else:
            meal_cost = member_meals * meal_rate
            est_charge = establishment_charge

        total_bill = meal_cost + est_charge + member.guest + member.fine

        results.append(BillResult(
            **member.model_dump(),
            effective_meals=member_meals,
            meal_cost=meal_cost,
            establishment_charge=est_charge,
            total_bill=total_bill,
            outstanding=round_outstanding(total_bill - member.deposits),
        ))

    overview = Overview(
        total_meals=total_meals,
        meal_rate=meal_rate,
        total_members=billable_count,
        establishment_charge=establishment_charge,
    )

    return BillingOutcome(results=results, overview=overview)
