"""
Tests for the bill calculator.
"""

import pytest

from messbill.billing import (
    CalculationError,
    CalculationErrorKind,
    EmptyMembersError,
    NoBillableMembersError,
    ZeroMealsError,
    calculate,
    round_outstanding,
)
from messbill.models.mess import ExpenseInputs, Member


@pytest.fixture
def two_members():
    return [
        Member(name="A", meals=30, deposits=1000),
        Member(name="B", meals=20, deposits=800, fine=50),
    ]


@pytest.fixture
def food_only():
    return ExpenseInputs(rice_cost=3000, marketing_cost=500, gas_cost=500)


class TestWorkedExample:
    """The reference two-member period."""

    def test_overview(self, two_members, food_only):
        """Test the meal rate and totals."""
        overview = calculate(two_members, food_only).overview
        assert overview.total_meals == 50
        assert overview.meal_rate == 80
        assert overview.total_members == 2
        assert overview.establishment_charge == 0

    def test_member_bills(self, two_members, food_only):
        """Test each member's bill."""
        a, b = calculate(two_members, food_only).results

        assert a.meal_cost == 2400
        assert a.total_bill == 2400
        assert a.outstanding == 1400

        assert b.meal_cost == 1600
        assert b.total_bill == 1650
        assert b.outstanding == 850


class TestAllocation:
    """Tests for how costs are split."""

    def test_one_result_per_member_in_order(self):
        """Test results preserve input order."""
        members = [Member(name=n, meals=10) for n in ["Zed", "Amal", "Mina", "Bo"]]
        outcome = calculate(members, ExpenseInputs(rice_cost=400))
        assert [r.name for r in outcome.results] == ["Zed", "Amal", "Mina", "Bo"]

    def test_establishment_charges_sum_to_overhead(self):
        """Test the per-head pool is fully distributed."""
        members = [
            Member(name="A", meals=10),
            Member(name="B", meals=12),
            Member(name="C", meals=7),
            Member(name="G", guest=150, is_guest_only=True),
        ]
        expenses = ExpenseInputs(
            rice_cost=1000, total_cook_charge=1000, paper_cost=100, other_costs=33,
        )
        outcome = calculate(members, expenses)
        total = sum(r.establishment_charge for r in outcome.results)
        assert total == pytest.approx(expenses.total_overhead)
        assert outcome.overview.establishment_charge == pytest.approx(1133 / 3)

    def test_bound_meal_raises_low_counts_only(self):
        """Test the bound-meal floor."""
        members = [
            Member(name="Low", meals=5),
            Member(name="Exact", meals=10),
            Member(name="High", meals=20),
        ]
        outcome = calculate(members, ExpenseInputs(rice_cost=400, bound_meal=10))
        effective = [r.effective_meals for r in outcome.results]
        assert effective == [10, 10, 20]
        assert outcome.results[0].min_meals_applied is True
        assert outcome.results[1].min_meals_applied is False

    def test_guest_only_member_pays_guest_and_fine_only(self):
        """Test guest-only members get no meal or establishment charge."""
        members = [
            Member(name="A", meals=10),
            Member(name="G", meals=8, guest=200, fine=20, deposits=50, is_guest_only=True),
        ]
        expenses = ExpenseInputs(rice_cost=1000, paper_cost=100)
        a, g = calculate(members, expenses).results

        assert g.effective_meals == 0
        assert g.meal_cost == 0
        assert g.establishment_charge == 0
        assert g.total_bill == 220
        assert g.outstanding == 170

        # Guest charges offset the meal pool: (1000 - 200) / 10
        assert a.meal_cost == 800
        assert a.establishment_charge == 100

    def test_guest_charges_from_regular_members_offset_pool(self):
        """Test guest charges are summed across all members."""
        members = [
            Member(name="A", meals=10, guest=100),
            Member(name="B", meals=10),
        ]
        outcome = calculate(members, ExpenseInputs(rice_cost=2100))
        assert outcome.overview.meal_rate == 100
        assert outcome.results[0].total_bill == 1100
        assert outcome.results[1].total_bill == 1000

    def test_negative_meal_rate_is_allowed(self):
        """Test guest charges larger than food costs."""
        members = [
            Member(name="A", meals=10),
            Member(name="G", guest=300, is_guest_only=True),
        ]
        outcome = calculate(members, ExpenseInputs(rice_cost=100))
        assert outcome.overview.meal_rate == -20
        assert outcome.results[0].meal_cost == -200
        assert outcome.results[1].meal_cost == 0

    def test_total_bill_is_not_rounded(self):
        """Test only the outstanding balance is rounded."""
        members = [Member(name=n, meals=1) for n in "ABC"]
        outcome = calculate(members, ExpenseInputs(rice_cost=100))
        result = outcome.results[0]
        assert result.total_bill == pytest.approx(33.3333333)
        assert result.outstanding == 33


class TestPurity:
    """The calculator has no hidden state."""

    def test_idempotent(self, two_members, food_only):
        """Test identical inputs give identical outcomes."""
        assert calculate(two_members, food_only) == calculate(two_members, food_only)

    def test_inputs_not_mutated(self, two_members, food_only):
        """Test the calculator leaves its inputs untouched."""
        before = [m.model_dump() for m in two_members], food_only.model_dump()
        calculate(two_members, food_only)
        after = [m.model_dump() for m in two_members], food_only.model_dump()
        assert before == after


class TestCalculationErrors:
    """Tests for refused calculations."""

    def test_empty_members(self, food_only):
        with pytest.raises(EmptyMembersError, match="at least one member"):
            calculate([], food_only)

    def test_only_guest_members(self, food_only):
        """Test a single guest-only member is not billable."""
        members = [Member(name="G", guest=200, is_guest_only=True)]
        with pytest.raises(NoBillableMembersError) as exc:
            calculate(members, food_only)
        assert exc.value.kind == CalculationErrorKind.NO_BILLABLE_MEMBERS

    def test_zero_meals(self, food_only):
        """Test everyone reporting zero meals with no bound meal."""
        members = [Member(name="A"), Member(name="B")]
        with pytest.raises(ZeroMealsError, match="cannot be zero"):
            calculate(members, food_only)

    def test_bound_meal_avoids_zero_meals(self, food_only):
        """Test the floor makes a zero-meal period billable."""
        members = [Member(name="A"), Member(name="B")]
        outcome = calculate(members, food_only.model_copy(update={"bound_meal": 5}))
        assert outcome.overview.total_meals == 10
        assert outcome.overview.meal_rate == 400

    def test_errors_share_a_base_class(self, food_only):
        with pytest.raises(CalculationError):
            calculate([], food_only)


class TestRounding:
    """Tests for the outstanding rounding rule."""

    @pytest.mark.parametrize(
        "amount, expected",
        [
            (1400.0, 1400),
            (0.5, 1),
            (2.5, 3),
            (-2.5, -3),
            (1399.49, 1399),
            (-0.4, 0),
        ],
    )
    def test_half_away_from_zero(self, amount, expected):
        assert round_outstanding(amount) == expected

    def test_refund_is_negative(self):
        """Test a member who over-deposited gets a negative balance."""
        members = [Member(name="A", meals=10, deposits=1000)]
        outcome = calculate(members, ExpenseInputs(rice_cost=750.6))
        assert outcome.results[0].outstanding == -249


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
