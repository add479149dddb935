"""
Tests for the Mess Bill Calculator models

Test strategy:
1. Unit tests for individual components (models, calculator, helpers)
2. Flow tests for the session (with in-memory storage and fake services)
3. No real network calls in tests (use mocks)
"""

import pytest
from pydantic import ValidationError
from uuid import uuid4

from messbill.models.mess import (
    BillingOutcome,
    BillResult,
    ExpenseInputs,
    HistoryEntry,
    Member,
    Overview,
    ValidationIssue,
    ValidationResult,
)
from messbill.models.notification import BillEmailRequest
from messbill.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


def make_result(**overrides) -> BillResult:
    data = {
        "name": "Rahim",
        "meals": 20,
        "effective_meals": 20,
        "meal_cost": 1600.0,
        "establishment_charge": 0.0,
        "total_bill": 1600.0,
        "outstanding": 600,
        "deposits": 1000,
    }
    data.update(overrides)
    return BillResult(**data)


class TestMemberModel:
    """Tests for the Member model."""

    def test_member_defaults(self):
        """Test a new member starts with zeros."""
        member = Member(name="Rahim")
        assert member.meals == 0
        assert member.deposits == 0
        assert member.guest == 0
        assert member.fine == 0
        assert member.is_guest_only is False
        assert member.email is None

    def test_member_strips_whitespace(self):
        """Test that whitespace is stripped from the name."""
        member = Member(name="  Rahim  ")
        assert member.name == "Rahim"

    def test_member_rejects_empty_name(self):
        """Test that a blank name is rejected."""
        with pytest.raises(ValidationError):
            Member(name="   ")

    def test_member_rejects_negative_meals(self):
        """Test that negative meal counts are rejected."""
        with pytest.raises(ValidationError):
            Member(name="Rahim", meals=-1)

    def test_member_accepts_guest_flag_aliases(self):
        """Test the guest-only flag under all accepted keys."""
        assert Member.model_validate({"name": "A", "isGuest": True}).is_guest_only
        assert Member.model_validate({"name": "A", "isGuestOnly": True}).is_guest_only
        assert Member.model_validate({"name": "A", "is_guest_only": True}).is_guest_only

    def test_member_serializes_guest_flag_as_isguest(self):
        """Test exported members use the isGuest key."""
        dumped = Member(name="A", is_guest_only=True).model_dump(by_alias=True)
        assert dumped["isGuest"] is True
        assert "is_guest_only" not in dumped

    def test_member_email_validation(self):
        """Test that an address needs an @ and blanks become None."""
        assert Member(name="A", email="").email is None
        assert Member(name="A", email="a@example.com").email == "a@example.com"
        with pytest.raises(ValidationError, match="Invalid email address"):
            Member(name="A", email="not-an-address")


class TestExpenseInputs:
    """Tests for ExpenseInputs."""

    def test_cost_pools(self):
        """Test the per-meal and per-head pools."""
        expenses = ExpenseInputs(
            rice_cost=3000,
            marketing_cost=500,
            gas_cost=500,
            paper_cost=100,
            other_costs=50,
            total_cook_charge=2000,
        )
        assert expenses.total_marketing == 4000
        assert expenses.total_overhead == 2150

    def test_rejects_negative_costs(self):
        """Test that negative costs are rejected."""
        with pytest.raises(ValidationError):
            ExpenseInputs(rice_cost=-1)


class TestResultModels:
    """Tests for BillResult, Overview and BillingOutcome."""

    def test_min_meals_applied(self):
        """Test the bound-meal badge flag."""
        assert make_result(meals=5, effective_meals=10).min_meals_applied is True
        assert make_result(meals=10, effective_meals=10).min_meals_applied is False

    def test_min_meals_never_applied_to_guest_only(self):
        """Test guest-only members never show the badge."""
        result = make_result(meals=0, effective_meals=0, is_guest_only=True)
        assert result.min_meals_applied is False

    def test_total_outstanding(self):
        """Test the sum of outstanding balances."""
        outcome = BillingOutcome(
            results=[make_result(outstanding=600), make_result(name="B", outstanding=-100)],
            overview=Overview(
                total_meals=40, meal_rate=80, total_members=2, establishment_charge=0,
            ),
        )
        assert outcome.total_outstanding == 500


class TestHistoryEntry:
    """Tests for HistoryEntry."""

    def test_history_entry_is_frozen(self):
        """Test that entries cannot be modified once created."""
        entry = HistoryEntry(
            members=(Member(name="A", meals=10),),
            expenses=ExpenseInputs(rice_cost=100),
            results=(make_result(name="A"),),
            overview=Overview(
                total_meals=10, meal_rate=10, total_members=1, establishment_charge=0,
            ),
        )
        with pytest.raises(ValidationError):
            entry.overview = None
        assert entry.entry_id is not None
        assert entry.recorded_at.tzinfo is not None


class TestNotificationModels:
    """Tests for BillEmailRequest."""

    def test_bill_email_request_requires_recipient(self):
        """Test that an empty recipient is rejected."""
        with pytest.raises(ValidationError):
            BillEmailRequest(
                to="",
                member_name="A",
                month="March 2025",
                individual_bill="...",
                overview="...",
                total_amount="100",
            )


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.MEMBER_ADDED,
            description="Member added: Rahim",
        )
        assert event.event_type == AuditEventType.MEMBER_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.calculation_completed(
            member_count=2, total_meals=50, meal_rate=80,
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "calculation_completed"
        assert log_dict["details"]["meal_rate"] == 80

    def test_audit_event_to_sheets_row(self):
        """Test conversion to sheets row."""
        event = AuditEventBuilder.member_removed("Rahim")
        row = event.to_sheets_row()
        assert len(row) == 11
        assert row[2] == "member_removed"
        assert row[5] == "Rahim"
        assert row[10] == "True"

    def test_calculation_failed_is_warning(self):
        """Test refused calculations are warnings, not errors."""
        correlation_id = uuid4()
        event = AuditEventBuilder.calculation_failed(
            kind="zero_meals",
            message="Total meals cannot be zero",
            correlation_id=correlation_id,
        )
        assert event.severity == AuditSeverity.WARNING
        assert event.correlation_id == correlation_id
        assert event.error_message == "Total meals cannot be zero"

    def test_email_failed_is_error(self):
        """Test failed emails are logged as errors."""
        event = AuditEventBuilder.email_failed("Rahim", "Failed to send email")
        assert event.severity == AuditSeverity.ERROR
        assert event.is_user_action is False

    def test_every_event_type_has_a_builder(self):
        """Test the event vocabulary matches what the builder emits."""
        events = [
            AuditEventBuilder.member_added("A", False),
            AuditEventBuilder.member_removed("A"),
            AuditEventBuilder.member_updated("A", {"meals": 3}),
            AuditEventBuilder.members_imported(2),
            AuditEventBuilder.members_exported(2),
            AuditEventBuilder.calculation_completed(2, 50, 80),
            AuditEventBuilder.calculation_failed("zero_meals", "Total meals cannot be zero"),
            AuditEventBuilder.history_recorded(uuid4(), 1),
            AuditEventBuilder.email_sent("A", "March 2025"),
            AuditEventBuilder.email_failed("A", "Failed to send email"),
            AuditEventBuilder.storage_error("save_members", "disk full"),
        ]
        assert {e.event_type for e in events} == set(AuditEventType)


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            structure_valid=False,
            semantic_valid=False,
            is_valid=False,
            issues=[
                ValidationIssue(
                    field="members",
                    issue_type="missing",
                    message="Please add at least one member",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 1

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            structure_valid=True,
            semantic_valid=True,
            is_valid=True,
            issues=[
                ValidationIssue(
                    field="guest",
                    issue_type="suspicious_value",
                    message="Guest charges exceed food costs",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.error_count == 0

    def test_validation_issue_severity_pattern(self):
        """Test that unknown severities are rejected."""
        with pytest.raises(ValidationError):
            ValidationIssue(
                field="x", issue_type="y", message="z", severity="fatal",
            )


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
