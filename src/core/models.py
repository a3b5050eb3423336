"""Pydantic models for all API contracts."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator


def _as_address_list(value: Any) -> Any:
    """Accept a single address string where a list of addresses is expected."""
    if isinstance(value, str):
        return [value]
    return value


# === Send Options ===


class SendOptions(BaseModel):
    """Caller-facing options for a structured send.

    ``source`` wins over ``from`` and ``text_body`` wins over ``body``;
    both pairs exist for compatibility with mail-object field names.
    """

    source: str | None = None
    from_: str | None = Field(default=None, alias="from")
    to: list[str] | None = None
    cc: list[str] | None = None
    bcc: list[str] | None = None
    subject: str | None = None
    html_body: str | None = None
    text_body: str | None = None
    body: str | None = None
    return_path: str | None = None  # Bounce notifications are forwarded here
    reply_to: list[str] | None = None

    model_config = {"populate_by_name": True, "extra": "forbid"}

    @field_validator("to", "cc", "bcc", "reply_to", mode="before")
    @classmethod
    def normalize_addresses(cls, value: Any) -> Any:
        return _as_address_list(value)


class RawOverrides(BaseModel):
    """Overrides applied on top of the fields read from a MIME message."""

    source: str | None = None
    from_: str | None = Field(default=None, alias="from")
    to: list[str] | None = None
    cc: list[str] | None = None
    bcc: list[str] | None = None

    model_config = {"populate_by_name": True, "extra": "forbid"}

    @field_validator("to", "cc", "bcc", mode="before")
    @classmethod
    def normalize_addresses(cls, value: Any) -> Any:
        return _as_address_list(value)


# === Account Info ===


class SendQuota(BaseModel):
    """Sending limits for the account (GetSendQuota)."""

    max_24_hour_send: float
    max_send_rate: float  # Messages per second
    sent_last_24_hours: float

    @classmethod
    def from_response(cls, response: dict[str, Any]) -> SendQuota:
        return cls(
            max_24_hour_send=response["Max24HourSend"],
            max_send_rate=response["MaxSendRate"],
            sent_last_24_hours=response["SentLast24Hours"],
        )


class SendDataPoint(BaseModel):
    """Sending activity for one 15-minute interval (GetSendStatistics)."""

    timestamp: datetime
    delivery_attempts: int = 0
    bounces: int = 0
    complaints: int = 0
    rejects: int = 0

    @classmethod
    def from_response(cls, point: dict[str, Any]) -> SendDataPoint:
        return cls(
            timestamp=point["Timestamp"],
            delivery_attempts=point.get("DeliveryAttempts", 0),
            bounces=point.get("Bounces", 0),
            complaints=point.get("Complaints", 0),
            rejects=point.get("Rejects", 0),
        )


# === Send Email Payload (Caller -> Send Lambda) ===


class SendEmailPayload(BaseModel):
    """Incoming request to send an email.

    Exactly one of ``options`` (structured send) or ``raw_message``
    (RFC 5322 text) must be given. ``overrides`` only applies to raw sends.
    """

    options: SendOptions | None = None
    raw_message: str | None = Field(default=None, min_length=1)
    overrides: RawOverrides | None = None

    @model_validator(mode="after")
    def check_exactly_one_message(self) -> SendEmailPayload:
        if (self.options is None) == (self.raw_message is None):
            raise ValueError("Provide exactly one of 'options' or 'raw_message'")
        if self.overrides is not None and self.raw_message is None:
            raise ValueError("'overrides' can only be used with 'raw_message'")
        return self


class SendEmailResponse(BaseModel):
    """Response from the send endpoint."""

    status: Literal["sent", "error"]
    message_id: str | None = None
    message: str
