"""
Audit Models for the Mess Bill Calculator

Every user action that changes the ledger, and every calculation, is
logged for audit purposes. This provides:
1. Traceability of who was added, removed or edited
2. Debugging information when a calculation is rejected
3. A record of which bills were emailed and which failed

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Roster
    MEMBER_ADDED = "member_added"
    MEMBER_REMOVED = "member_removed"
    MEMBER_UPDATED = "member_updated"
    MEMBERS_IMPORTED = "members_imported"
    MEMBERS_EXPORTED = "members_exported"

    # Calculation
    CALCULATION_COMPLETED = "calculation_completed"
    CALCULATION_FAILED = "calculation_failed"
    HISTORY_RECORDED = "history_recorded"

    # Notification
    EMAIL_SENT = "email_sent"
    EMAIL_FAILED = "email_failed"

    # System events
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'member', 'calculation', 'email')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Identifier of the entity (member name, history entry id)"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="Ties together the events of one user action"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         correlation_id, description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.member_added("Rahim", False, correlation_id)
        event = AuditEventBuilder.calculation_completed(entry_id, 12, 54.5, correlation_id)
    """

    @staticmethod
    def member_added(
        name: str,
        is_guest_only: bool,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MEMBER_ADDED,
            entity_type="member",
            entity_id=name,
            correlation_id=correlation_id,
            description=f"Member added: {name}",
            details={"is_guest_only": is_guest_only},
            is_user_action=True,
        )

    @staticmethod
    def member_removed(
        name: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MEMBER_REMOVED,
            entity_type="member",
            entity_id=name,
            correlation_id=correlation_id,
            description=f"Member removed: {name}",
            is_user_action=True,
        )

    @staticmethod
    def member_updated(
        name: str,
        changes: dict[str, Any],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MEMBER_UPDATED,
            entity_type="member",
            entity_id=name,
            correlation_id=correlation_id,
            description=f"Member updated: {name}",
            details={"changes": changes},
            is_user_action=True,
        )

    @staticmethod
    def members_imported(
        count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MEMBERS_IMPORTED,
            entity_type="roster",
            correlation_id=correlation_id,
            description=f"Imported {count} members",
            details={"member_count": count},
            is_user_action=True,
        )

    @staticmethod
    def members_exported(
        count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MEMBERS_EXPORTED,
            entity_type="roster",
            correlation_id=correlation_id,
            description=f"Exported {count} members",
            details={"member_count": count},
            is_user_action=True,
        )

    @staticmethod
    def calculation_completed(
        member_count: int,
        total_meals: float,
        meal_rate: float,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CALCULATION_COMPLETED,
            entity_type="calculation",
            correlation_id=correlation_id,
            description=f"Bills calculated for {member_count} members",
            details={
                "member_count": member_count,
                "total_meals": total_meals,
                "meal_rate": meal_rate,
            },
            is_user_action=True,
        )

    @staticmethod
    def calculation_failed(
        kind: str,
        message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CALCULATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="calculation",
            correlation_id=correlation_id,
            description=f"Calculation rejected: {kind}",
            error_message=message,
            details={"kind": kind},
            is_user_action=True,
        )

    @staticmethod
    def history_recorded(
        entry_id: UUID,
        history_size: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.HISTORY_RECORDED,
            entity_type="history",
            entity_id=str(entry_id),
            correlation_id=correlation_id,
            description="Calculation added to history",
            details={"history_size": history_size},
        )

    @staticmethod
    def email_sent(
        member_name: str,
        month: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EMAIL_SENT,
            entity_type="email",
            entity_id=member_name,
            correlation_id=correlation_id,
            description=f"Bill for {month} emailed to {member_name}",
            details={"month": month},
        )

    @staticmethod
    def email_failed(
        member_name: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EMAIL_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="email",
            entity_id=member_name,
            correlation_id=correlation_id,
            description=f"Bill email to {member_name} failed",
            error_message=error_message,
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={"operation": operation},
            correlation_id=correlation_id,
        )
