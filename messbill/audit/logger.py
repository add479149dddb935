"""
Audit Logger

DESIGN DECISION: Every roster change and every calculation is logged.
This provides:
1. Traceability of who changed the ledger and when
2. Debugging capability when a calculation is refused
3. A record of which bill emails went out

The audit logger:
- Is async so storage backends can do I/O
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from typing import Any, Optional
from uuid import UUID, uuid4

import structlog

from messbill.models.audit import AuditEvent, AuditEventBuilder
from messbill.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, if one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("messbill.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_member_added(
        self,
        name: str,
        is_guest_only: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.member_added(name, is_guest_only, correlation_id))

    async def log_member_removed(
        self,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.member_removed(name, correlation_id))

    async def log_member_updated(
        self,
        name: str,
        changes: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.member_updated(name, changes, correlation_id))

    async def log_members_imported(
        self,
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.members_imported(count, correlation_id))

    async def log_members_exported(
        self,
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.members_exported(count, correlation_id))

    async def log_calculation_completed(
        self,
        member_count: int,
        total_meals: float,
        meal_rate: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a successful calculation."""
        event = AuditEventBuilder.calculation_completed(
            member_count=member_count,
            total_meals=total_meals,
            meal_rate=meal_rate,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_calculation_failed(
        self,
        kind: str,
        message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a refused calculation (bad input, not a fault)."""
        await self.log(AuditEventBuilder.calculation_failed(kind, message, correlation_id))

    async def log_history_recorded(
        self,
        entry_id: UUID,
        history_size: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.history_recorded(entry_id, history_size, correlation_id)
        )

    async def log_email_sent(
        self,
        member_name: str,
        month: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.email_sent(member_name, month, correlation_id))

    async def log_email_failed(
        self,
        member_name: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.email_failed(member_name, error_message, correlation_id)
        )

    async def log_storage_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.storage_error(operation, error_message, correlation_id)
        )


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., Calculate Bills).
    Pass it through all subsequent operations.
    """
    return uuid4()
