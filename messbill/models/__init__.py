"""
Data Models Package

This package contains all Pydantic models used by the mess calculator.
All data flowing through the system must conform to these schemas.
"""

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
from messbill.models.notification import (
    BillEmailRequest,
    EmailSendResult,
)
from messbill.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Mess models
    "BillingOutcome",
    "BillResult",
    "ExpenseInputs",
    "HistoryEntry",
    "Member",
    "Overview",
    "ValidationIssue",
    "ValidationResult",
    # Notification models
    "BillEmailRequest",
    "EmailSendResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
