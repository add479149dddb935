"""
Two-Stage Input Validation

DESIGN DECISION: Validation happens in two distinct stages before the
calculator runs:

STAGE 1 - STRUCTURE:
- Members present
- At least one non-guest member
- Names unique
- Total effective meals above zero
These are the conditions under which the calculator would refuse to run.

STAGE 2 - SEMANTICS:
- Guest charges larger than the food bill (negative meal rate)
- Meals recorded against guest-only members (they are ignored)
- Unusually large deposits or fines
- A bound meal higher than anyone actually ate
These never block a calculation; they are shown so the user can
double-check the numbers.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them for human review.
"""

from typing import Optional, Sequence

from messbill.billing.calculator import effective_meals
from messbill.config import get_settings
from messbill.models.mess import (
    ExpenseInputs,
    Member,
    ValidationIssue,
    ValidationResult,
)


class InputValidator:
    """
    Checks calculation inputs through a two-stage pipeline.

    Stage 2 is skipped when stage 1 finds errors.
    """

    def __init__(self, max_reasonable_amount: Optional[float] = None):
        if max_reasonable_amount is None:
            max_reasonable_amount = get_settings().app.max_reasonable_amount
        self._max_amount = max_reasonable_amount

    def _validate_structure(
        self,
        members: Sequence[Member],
        expenses: ExpenseInputs,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: can a bill be computed at all?

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if not members:
            issues.append(ValidationIssue(
                field="members",
                issue_type="missing",
                message="Please add at least one member",
                severity="error",
            ))
            return False, issues

        if all(m.is_guest_only for m in members):
            issues.append(ValidationIssue(
                field="members",
                issue_type="no_billable_members",
                message="At least one non-guest member is required",
                severity="error",
                suggested_fix="Untick 'Guest Only' for the regular members",
            ))

        seen: dict[str, str] = {}
        for member in members:
            key = member.name.lower()
            if key in seen:
                issues.append(ValidationIssue(
                    field=f"members.{member.name}",
                    issue_type="duplicate",
                    message=f"'{member.name}' and '{seen[key]}' are the same member",
                    severity="error",
                    suggested_fix="Remove one of the duplicate entries",
                ))
            else:
                seen[key] = member.name

        total_meals = sum(effective_meals(m, expenses.bound_meal) for m in members)
        if total_meals == 0 and not all(m.is_guest_only for m in members):
            issues.append(ValidationIssue(
                field="meals",
                issue_type="zero_meals",
                message="Total meals cannot be zero",
                severity="error",
                suggested_fix="Enter meal counts or set a bound meal",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _validate_semantic(
        self,
        members: Sequence[Member],
        expenses: ExpenseInputs,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: is the outcome plausible?

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        total_guest_charge = sum(m.guest for m in members)
        if total_guest_charge > expenses.total_marketing:
            issues.append(ValidationIssue(
                field="guest",
                issue_type="suspicious_value",
                message=(
                    f"Guest charges (₹{total_guest_charge:,.2f}) exceed food costs "
                    f"(₹{expenses.total_marketing:,.2f}); the meal rate will be negative"
                ),
                severity="warning",
                suggested_fix="Check the guest charges and the rice/marketing/gas costs",
            ))

        for member in members:
            if member.is_guest_only and member.meals > 0:
                issues.append(ValidationIssue(
                    field=f"members.{member.name}.meals",
                    issue_type="ignored_value",
                    message=f"{member.name} is guest-only; their {member.meals:g} meals are ignored",
                    severity="warning",
                ))
            if member.deposits > self._max_amount:
                issues.append(ValidationIssue(
                    field=f"members.{member.name}.deposits",
                    issue_type="suspicious_value",
                    message=f"Deposit of ₹{member.deposits:,.2f} for {member.name} seems unusually high",
                    severity="warning",
                    suggested_fix="Please verify this amount is correct",
                ))
            if member.fine > self._max_amount:
                issues.append(ValidationIssue(
                    field=f"members.{member.name}.fine",
                    issue_type="suspicious_value",
                    message=f"Fine of ₹{member.fine:,.2f} for {member.name} seems unusually high",
                    severity="warning",
                    suggested_fix="Please verify this amount is correct",
                ))

        billable = [m for m in members if not m.is_guest_only]
        if (
            expenses.bound_meal > 0
            and billable
            and all(m.meals < expenses.bound_meal for m in billable)
        ):
            issues.append(ValidationIssue(
                field="bound_meal",
                issue_type="suspicious_value",
                message=(
                    f"Bound meal ({expenses.bound_meal:g}) is higher than every "
                    "member's reported meals"
                ),
                severity="warning",
                suggested_fix="Check the bound meal setting",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def validate(
        self,
        members: Sequence[Member],
        expenses: ExpenseInputs,
    ) -> ValidationResult:
        """
        Run the full two-stage pipeline.

        Args:
            members: Members about to be billed
            expenses: Resolved expense inputs

        Returns:
            ValidationResult with all issues found
        """
        all_issues = []

        structure_valid, structure_issues = self._validate_structure(members, expenses)
        all_issues.extend(structure_issues)

        semantic_valid = False
        if structure_valid:
            semantic_valid, semantic_issues = self._validate_semantic(members, expenses)
            all_issues.extend(semantic_issues)

        warnings = [i.message for i in all_issues if i.severity == "warning"]

        return ValidationResult(
            structure_valid=structure_valid,
            semantic_valid=semantic_valid,
            is_valid=structure_valid and semantic_valid,
            issues=all_issues,
            warnings=warnings,
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a plain-language summary of the validation result.
        """
        if result.is_valid and not result.warnings:
            return "✅ All checks passed! Ready to calculate."

        lines = []

        if not result.structure_valid:
            lines.append("❌ Bills cannot be calculated yet:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
