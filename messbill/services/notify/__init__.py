"""Notification and presentation services package."""

from messbill.services.notify.email_relay import (
    EmailConfigurationError,
    EmailRelayService,
    EmailSendError,
    NotificationError,
)
from messbill.services.notify.formatting import (
    format_amount,
    format_individual_bill,
    format_overview,
    format_results_table,
)

__all__ = [
    "EmailConfigurationError",
    "EmailRelayService",
    "EmailSendError",
    "NotificationError",
    "format_amount",
    "format_individual_bill",
    "format_overview",
    "format_results_table",
]
