"""Member list import/export package."""

from messbill.services.transfer.json_transfer import (
    EXPORT_FILENAME,
    ImportFormatError,
    export_members,
    import_members,
)

__all__ = [
    "EXPORT_FILENAME",
    "ImportFormatError",
    "export_members",
    "import_members",
]
