"""
Main Orchestrator for the Mess Bill Calculator

This module ties together all the components and owns the application
state that the UI edits between calculations:
1. The member roster
2. Period expenses and the cook charge (total or per head)
3. The bounded calculation history

DESIGN DECISION: The orchestrator enforces the boundaries:
- The calculator only ever sees copies of the state
- A refused calculation writes no history
- History, audit and email failures never undo a completed calculation
- Every user action is audited
"""

from typing import Any, Optional, Union
from uuid import UUID

import structlog

from messbill.audit import AuditLogger, create_correlation_id
from messbill.billing import (
    CalculationError,
    CookCharge,
    calculate,
)
from messbill.config import get_settings
from messbill.history import BillingHistory
from messbill.models.mess import (
    BillingOutcome,
    ExpenseInputs,
    HistoryEntry,
    Member,
    ValidationResult,
)
from messbill.models.notification import BillEmailRequest, EmailSendResult
from messbill.roster import Roster
from messbill.services.notify import (
    EmailRelayService,
    NotificationError,
    format_individual_bill,
    format_overview,
)
from messbill.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsStorage,
    JsonFileStorage,
    MessStorageInterface,
    StorageError,
)
from messbill.services.transfer import export_members, import_members
from messbill.validation import InputValidator


logger = structlog.get_logger(__name__)


class MessSession:
    """
    Application state plus the flows that act on it.

    Flow for one billing period:
    1. Add members, record meals, deposits, guest charges, fines
    2. Enter expenses and the cook charge
    3. Validate (optional preview of problems)
    4. Calculate → results + overview, pushed to history
    5. Email bills (optional, failures reported per member)
    """

    def __init__(
        self,
        storage: Optional[MessStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        email_service: Optional[EmailRelayService] = None,
        validator: Optional[InputValidator] = None,
        history_capacity: Optional[int] = None,
    ):
        if history_capacity is None:
            history_capacity = get_settings().app.history_capacity

        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._email_service = email_service
        self._validator = validator or InputValidator()

        self.roster = Roster()
        self.cook_charge = CookCharge()
        self.history = BillingHistory(capacity=history_capacity)
        self._expenses = ExpenseInputs()

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def members(self) -> list[Member]:
        return self.roster.members

    @property
    def expenses(self) -> ExpenseInputs:
        """Expenses with the cook charge resolved to a total."""
        return self._expenses.model_copy(
            update={"total_cook_charge": self.cook_charge.total}
        )

    def set_expenses(self, **fields: Any) -> ExpenseInputs:
        """
        Update one or more expense fields.

        A `total_cook_charge` given here is treated as an edit of the
        total field.
        """
        cook_total = fields.pop("total_cook_charge", None)
        self._expenses = ExpenseInputs.model_validate(
            {**self._expenses.model_dump(), **fields}
        )
        if cook_total is not None:
            self.cook_charge.set_total(cook_total)
        return self.expenses

    def set_cook_charge_total(self, value: float) -> None:
        self.cook_charge.set_total(value)

    def set_cook_charge_per_head(self, value: float) -> None:
        self.cook_charge.set_per_head(value)

    def _sync_head_count(self) -> None:
        self.cook_charge.update_head_count(self.roster.billable_count)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    async def load(self) -> None:
        """Restore members and history from storage, if configured."""
        if not self._storage:
            return

        members = await self._storage.load_members()
        self.roster.replace_all(members)
        self._sync_head_count()

        entries = await self._storage.load_history()
        self.history = BillingHistory(entries, capacity=self.history.capacity)

    async def _persist_members(self, correlation_id: Optional[UUID]) -> None:
        if not self._storage:
            return
        try:
            await self._storage.save_members(self.roster.members)
        except StorageError as e:
            await self._audit_logger.log_storage_error(
                operation="save_members",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise

    async def _persist_history(self, correlation_id: Optional[UUID]) -> bool:
        if not self._storage:
            return True
        try:
            await self._storage.save_history(self.history.entries)
            return True
        except StorageError as e:
            # The calculation already succeeded; report and carry on
            await self._audit_logger.log_storage_error(
                operation="save_history",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            return False

    # -------------------------------------------------------------------------
    # Roster
    # -------------------------------------------------------------------------

    async def add_member(
        self,
        name: str,
        is_guest_only: bool = False,
        email: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Member:
        """Add a member. Raises RosterError on an empty or duplicate name."""
        correlation_id = correlation_id or create_correlation_id()

        member = self.roster.add(name, is_guest_only=is_guest_only, email=email)
        self._sync_head_count()

        await self._audit_logger.log_member_added(
            name=member.name,
            is_guest_only=member.is_guest_only,
            correlation_id=correlation_id,
        )
        await self._persist_members(correlation_id)
        return member

    async def remove_member(
        self,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> Member:
        correlation_id = correlation_id or create_correlation_id()

        member = self.roster.remove(name)
        self._sync_head_count()

        await self._audit_logger.log_member_removed(name, correlation_id)
        await self._persist_members(correlation_id)
        return member

    async def update_member(
        self,
        name: str,
        correlation_id: Optional[UUID] = None,
        **fields: Any,
    ) -> Member:
        correlation_id = correlation_id or create_correlation_id()

        member = self.roster.update(name, **fields)
        if "is_guest_only" in fields:
            self._sync_head_count()

        await self._audit_logger.log_member_updated(name, fields, correlation_id)
        await self._persist_members(correlation_id)
        return member

    async def import_members(
        self,
        data: Union[str, bytes],
        correlation_id: Optional[UUID] = None,
    ) -> list[Member]:
        """
        Replace the roster with an imported member list.

        Raises:
            ImportFormatError: The file is not a member list
            DuplicateMemberError: The file lists a name twice
        """
        correlation_id = correlation_id or create_correlation_id()

        members = import_members(data)
        self.roster.replace_all(members)
        self._sync_head_count()

        await self._audit_logger.log_members_imported(len(members), correlation_id)
        await self._persist_members(correlation_id)
        return members

    def export_payload(self) -> str:
        """Member list as JSON, without an audit event."""
        return export_members(self.roster.members)

    async def export_members(
        self,
        correlation_id: Optional[UUID] = None,
    ) -> str:
        """Export the member list and record the export."""
        exported = self.export_payload()
        await self._audit_logger.log_members_exported(
            len(self.roster),
            correlation_id or create_correlation_id(),
        )
        return exported

    # -------------------------------------------------------------------------
    # Calculation
    # -------------------------------------------------------------------------

    def validate(self) -> ValidationResult:
        """Preview problems with the current inputs without calculating."""
        return self._validator.validate(self.roster.members, self.expenses)

    def validation_summary(self, result: ValidationResult) -> str:
        return self._validator.get_user_friendly_summary(result)

    async def calculate(
        self,
        record_history: bool = True,
        correlation_id: Optional[UUID] = None,
    ) -> BillingOutcome:
        """
        Calculate every member's bill from the current state.

        On success the outcome is pushed to history (unless disabled).
        On failure nothing is recorded and the CalculationError is
        re-raised for the UI to show.
        """
        correlation_id = correlation_id or create_correlation_id()

        members = self.roster.members
        expenses = self.expenses

        try:
            outcome = calculate(members, expenses)
        except CalculationError as e:
            await self._audit_logger.log_calculation_failed(
                kind=e.kind.value,
                message=str(e),
                correlation_id=correlation_id,
            )
            raise

        await self._audit_logger.log_calculation_completed(
            member_count=len(outcome.results),
            total_meals=outcome.overview.total_meals,
            meal_rate=outcome.overview.meal_rate,
            correlation_id=correlation_id,
        )

        if record_history:
            entry = self.history.record(members, expenses, outcome)
            await self._audit_logger.log_history_recorded(
                entry_id=entry.entry_id,
                history_size=len(self.history),
                correlation_id=correlation_id,
            )
            await self._persist_history(correlation_id)

        return outcome

    @property
    def last_entry(self) -> Optional[HistoryEntry]:
        return self.history.latest

    # -------------------------------------------------------------------------
    # Notification
    # -------------------------------------------------------------------------

    def build_email_requests(
        self,
        outcome: BillingOutcome,
        month: str,
    ) -> list[BillEmailRequest]:
        """One request per member that has an email address."""
        overview_text = format_overview(outcome.overview)
        return [
            BillEmailRequest(
                to=result.email,
                member_name=result.name,
                month=month,
                individual_bill=format_individual_bill(result),
                overview=overview_text,
                total_amount=str(result.outstanding),
            )
            for result in outcome.results
            if result.email
        ]

    async def send_bill_emails(
        self,
        outcome: BillingOutcome,
        month: str,
        correlation_id: Optional[UUID] = None,
    ) -> dict[str, EmailSendResult]:
        """
        Email each member their bill.

        Returns a result per member name. A failure for one member is
        recorded and the remaining members are still sent.
        """
        correlation_id = correlation_id or create_correlation_id()

        if self._email_service is None:
            self._email_service = EmailRelayService()

        results: dict[str, EmailSendResult] = {}
        for request in self.build_email_requests(outcome, month):
            try:
                results[request.member_name] = await self._email_service.send_bill(request)
                await self._audit_logger.log_email_sent(
                    request.member_name, month, correlation_id
                )
            except NotificationError as e:
                results[request.member_name] = EmailSendResult(success=False, error=str(e))
                await self._audit_logger.log_email_failed(
                    request.member_name, str(e), correlation_id
                )

        return results


def create_session(use_storage: bool = True) -> MessSession:
    """
    Factory function to create a session with the configured backends.

    Args:
        use_storage: Whether to persist members and history.
                    Set to False for a throwaway session.
    """
    settings = get_settings()
    storage = None
    audit_logger = None

    if use_storage:
        try:
            if settings.app.storage_backend == "google_sheets":
                sheets_client = GoogleSheetsClient()
                storage = GoogleSheetsStorage(sheets_client)
                audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
            else:
                storage = JsonFileStorage.from_settings(settings.local_storage)
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning("storage_not_configured", error=str(e))
            storage = None

    return MessSession(
        storage=storage,
        audit_logger=audit_logger or AuditLogger(),
        email_service=EmailRelayService(),
    )
