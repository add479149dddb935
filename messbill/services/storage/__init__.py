"""
Storage Services Package

Provides abstract interfaces and concrete implementations for persisting
the member list, the history log and the audit trail. Local JSON files
are the default backend; a shared Google Sheet is the alternative.
"""

from messbill.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    HistoryStorageInterface,
    MemberStorageInterface,
    MessStorageInterface,
    StorageError,
)
from messbill.services.storage.local import (
    InMemoryStorage,
    JsonFileStorage,
)
from messbill.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "HistoryStorageInterface",
    "MemberStorageInterface",
    "MessStorageInterface",
    # Exceptions
    "ConnectionError",
    "StorageError",
    # Local implementations
    "InMemoryStorage",
    "JsonFileStorage",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsStorage",
]
