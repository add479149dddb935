"""
Notification Models

Request/response contract for the email relay that sends each member
their bill once a calculation is done.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BillEmailRequest(BaseModel):
    """
    One outbound bill email.

    The bill and overview are pre-formatted plain text so the relay
    does not need to know anything about the calculation.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    to: str = Field(..., min_length=3, description="Recipient address")
    member_name: str = Field(..., min_length=1)
    month: str = Field(..., min_length=1, description="Billing period label")
    individual_bill: str
    overview: str
    total_amount: str = Field(..., description="Amount shown on the last line")


class EmailSendResult(BaseModel):
    """Outcome of a single send attempt."""

    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
