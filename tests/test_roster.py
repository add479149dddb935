"""
Tests for the member roster and the calculation history.
"""

import pytest

from messbill.billing import calculate
from messbill.history import HISTORY_CAPACITY, BillingHistory
from messbill.models.mess import ExpenseInputs, Member
from messbill.roster import (
    DuplicateMemberError,
    InvalidMemberError,
    MemberNotFoundError,
    Roster,
)


class TestRosterAdd:
    """Tests for adding members."""

    def test_add_member_with_zeros(self):
        """Test a new member starts with zero values."""
        roster = Roster()
        member = roster.add("Rahim")
        assert member.meals == 0
        assert member.deposits == 0
        assert len(roster) == 1

    def test_add_strips_name(self):
        roster = Roster()
        assert roster.add("  Rahim ").name == "Rahim"

    def test_empty_name_rejected(self):
        """Test blank names are refused."""
        roster = Roster()
        with pytest.raises(InvalidMemberError, match="Please enter a member name"):
            roster.add("   ")
        assert len(roster) == 0

    def test_duplicate_name_rejected_ignoring_case(self):
        """Test names are unique regardless of case."""
        roster = Roster()
        roster.add("Rahim")
        with pytest.raises(DuplicateMemberError, match="Member already exists"):
            roster.add("rahim")
        assert len(roster) == 1

    def test_invalid_email_rejected(self):
        roster = Roster()
        with pytest.raises(InvalidMemberError):
            roster.add("Rahim", email="rahim")

    def test_billable_count(self):
        """Test guest-only members are not counted as heads."""
        roster = Roster()
        roster.add("A")
        roster.add("B")
        roster.add("G", is_guest_only=True)
        assert roster.billable_count == 2


class TestRosterEdit:
    """Tests for updating and removing members."""

    @pytest.fixture
    def roster(self):
        roster = Roster()
        roster.add("A")
        roster.add("B")
        roster.add("C")
        return roster

    def test_update_fields(self, roster):
        updated = roster.update("B", meals=20, deposits=800)
        assert updated.meals == 20
        assert roster.get("B").deposits == 800

    def test_update_keeps_order(self, roster):
        roster.update("B", fine=50)
        assert [m.name for m in roster] == ["A", "B", "C"]

    def test_update_rejects_name_change(self, roster):
        """Test the name is not an editable field."""
        with pytest.raises(InvalidMemberError, match="name"):
            roster.update("A", name="Z")

    def test_update_rejects_negative_value(self, roster):
        with pytest.raises(InvalidMemberError):
            roster.update("A", meals=-5)
        assert roster.get("A").meals == 0

    def test_update_unknown_member(self, roster):
        with pytest.raises(MemberNotFoundError):
            roster.update("Nobody", meals=1)

    def test_remove(self, roster):
        """Test removal keeps the rest in order."""
        removed = roster.remove("B")
        assert removed.name == "B"
        assert [m.name for m in roster] == ["A", "C"]

    def test_remove_unknown_member(self, roster):
        with pytest.raises(MemberNotFoundError, match="Nobody"):
            roster.remove("Nobody")

    def test_members_is_a_copy(self, roster):
        """Test callers cannot modify the roster through the list."""
        members = roster.members
        members.clear()
        assert len(roster) == 3

    def test_replace_all_rejects_duplicates(self, roster):
        with pytest.raises(DuplicateMemberError):
            roster.replace_all([Member(name="X"), Member(name="x")])
        assert len(roster) == 3


def record_period(history: BillingHistory, rice_cost: float):
    members = [Member(name="A", meals=10)]
    expenses = ExpenseInputs(rice_cost=rice_cost)
    return history.record(members, expenses, calculate(members, expenses))


class TestBillingHistory:
    """Tests for the bounded history log."""

    def test_default_capacity(self):
        assert BillingHistory().capacity == HISTORY_CAPACITY == 10

    def test_newest_first(self):
        """Test the latest calculation is at the front."""
        history = BillingHistory()
        record_period(history, 100)
        second = record_period(history, 200)
        assert history.latest == second
        assert history.entries[1].expenses.rice_cost == 100

    def test_oldest_evicted_when_full(self):
        """Test the log never exceeds its capacity."""
        history = BillingHistory()
        for i in range(12):
            record_period(history, 100 + i)
        assert len(history) == 10
        rice = [e.expenses.rice_cost for e in history.entries]
        assert rice[0] == 111
        assert rice[-1] == 102

    def test_snapshot_not_affected_by_later_edits(self):
        """Test entries keep the inputs as they were."""
        roster = Roster()
        roster.add("A")
        roster.update("A", meals=10)
        expenses = ExpenseInputs(rice_cost=500)
        members = roster.members
        history = BillingHistory()
        entry = history.record(members, expenses, calculate(members, expenses))

        roster.update("A", meals=99)
        assert entry.members[0].meals == 10

    def test_snapshot_not_affected_by_outcome_edits(self):
        """Test editing the returned outcome leaves the entry as recorded."""
        members = [Member(name="A", meals=10), Member(name="B", meals=10)]
        expenses = ExpenseInputs(rice_cost=4000)
        outcome = calculate(members, expenses)
        history = BillingHistory()
        entry = history.record(members, expenses, outcome)

        outcome.results[0].outstanding = 0
        outcome.overview.meal_rate = 0
        members[1].meals = 99

        assert entry.results[0].outstanding == 2000
        assert entry.overview.meal_rate == 200
        assert entry.members[1].meals == 10

    def test_initial_entries_truncated(self):
        history = BillingHistory(capacity=3)
        for i in range(3):
            record_period(history, i)
        reloaded = BillingHistory(history.entries, capacity=2)
        assert len(reloaded) == 2

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            BillingHistory(capacity=0)

    def test_clear(self):
        history = BillingHistory()
        record_period(history, 100)
        history.clear()
        assert history.latest is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
