"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for persistence.
This allows us to:
1. Keep the calculator completely unaware of storage
2. Use in-memory storage for testing
3. Offer a shared Google Sheet as an alternative to local files

The interface is intentionally simple: the mess only needs to keep
the current member list, a bounded history log, and an audit trail.
"""

from abc import ABC, abstractmethod

from messbill.models.audit import AuditEvent
from messbill.models.mess import HistoryEntry, Member


class MemberStorageInterface(ABC):
    """Persists the current member list."""

    @abstractmethod
    async def load_members(self) -> list[Member]:
        """
        Load the saved member list.

        Returns:
            Members in saved order; empty list if nothing was saved

        Raises:
            StorageError: If the saved data cannot be read
        """
        pass

    @abstractmethod
    async def save_members(self, members: list[Member]) -> bool:
        """
        Replace the saved member list.

        Returns:
            True if saved successfully

        Raises:
            StorageError: If save fails
        """
        pass


class HistoryStorageInterface(ABC):
    """Persists the bounded calculation history."""

    @abstractmethod
    async def load_history(self) -> list[HistoryEntry]:
        """
        Load saved history entries, newest first.
        """
        pass

    @abstractmethod
    async def save_history(self, entries: list[HistoryEntry]) -> bool:
        """
        Replace the saved history log.

        Args:
            entries: Entries newest first, already capped by the caller
        """
        pass


class MessStorageInterface(MemberStorageInterface, HistoryStorageInterface):
    """Everything the application state needs to survive a restart."""
    pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events (newest first).
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
