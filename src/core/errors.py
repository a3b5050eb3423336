"""Errors raised by the SES mailer."""

from __future__ import annotations


class SESAdapterError(Exception):
    """Base class for all mailer errors."""

    pass


class InvalidMessageError(SESAdapterError):
    """Raised when a message fails local validation (no request is sent)."""

    pass


class UpstreamError(SESAdapterError):
    """Raised when the SES client call fails.

    Attributes:
        operation: SES operation name (e.g. "SendEmail")
        code: SES error code (e.g. "MessageRejected"), None for transport failures
    """

    def __init__(self, message: str, operation: str, code: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation
        self.code = code
