"""Services package."""

from messbill.services.notify import (
    EmailConfigurationError,
    EmailRelayService,
    EmailSendError,
    NotificationError,
)
from messbill.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsStorage,
    InMemoryStorage,
    JsonFileStorage,
    MessStorageInterface,
    StorageError,
)
from messbill.services.transfer import (
    ImportFormatError,
    export_members,
    import_members,
)

__all__ = [
    # Notification
    "EmailConfigurationError",
    "EmailRelayService",
    "EmailSendError",
    "NotificationError",
    # Storage
    "AuditStorageInterface",
    "ConnectionError",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsStorage",
    "InMemoryStorage",
    "JsonFileStorage",
    "MessStorageInterface",
    "StorageError",
    # Import/export
    "ImportFormatError",
    "export_members",
    "import_members",
]
