"""Adapter exposing stdlib email messages through the MailMessage interface."""

from __future__ import annotations

from collections.abc import Mapping
from email import message_from_bytes, policy
from email.errors import HeaderParseError
from email.header import decode_header, make_header
from email.message import EmailMessage, Message
from email.utils import getaddresses
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    # Support both Lambda and test import paths
    try:
        from core.interfaces import MailMessage
    except ImportError:
        from src.core.interfaces import MailMessage


class MimeMessageView:
    """Read-only MailMessage view over an ``email.message.Message``.

    Addresses are returned bare (display names dropped), in header order.
    """

    def __init__(self, message: Message) -> None:
        self.message = message

    @classmethod
    def from_string(cls, raw: str) -> MimeMessageView:
        # Parse as bytes so non-ASCII payloads decode with their declared charset
        return cls(message_from_bytes(raw.encode("utf-8"), policy=policy.default))

    @classmethod
    def from_bytes(cls, raw: bytes) -> MimeMessageView:
        return cls(message_from_bytes(raw, policy=policy.default))

    @classmethod
    def from_mapping(cls, fields: Mapping[str, Any]) -> MimeMessageView:
        """Build a single-part message from a mapping of header fields.

        Recognised keys: from, to, cc, bcc, subject, body, content_type,
        return_path, reply_to. Address fields accept a string or a list.
        """
        message = EmailMessage()
        headers = {
            "from": "From",
            "to": "To",
            "cc": "Cc",
            "bcc": "Bcc",
            "reply_to": "Reply-To",
            "return_path": "Return-Path",
            "subject": "Subject",
        }
        for key, header in headers.items():
            value = fields.get(key)
            if value is None:
                continue
            if isinstance(value, (list, tuple)):
                value = ", ".join(value)
            message[header] = value

        body = fields.get("body") or ""
        if not isinstance(body, str):
            raise ValueError(f"Mapping message body must be a string, got {type(body).__name__}")
        content_type = fields.get("content_type") or "text/plain"
        maintype, _, subtype = str(content_type).partition("/")
        if maintype != "text" or not subtype:
            raise ValueError(f"Unsupported content_type for mapping message: {maintype}/{subtype}")
        message.set_content(body, subtype=subtype)
        return cls(message)

    def _addresses(self, header: str) -> list[str] | None:
        values = self.message.get_all(header)
        if values is None:
            return None
        return [address for _, address in getaddresses([str(v) for v in values]) if address]

    def _first_part(self, content_type: str) -> Message | None:
        if not self.message.is_multipart():
            return None
        for part in self.message.walk():
            if part.is_multipart() or part.get_content_disposition() == "attachment":
                continue
            if part.get_content_type() == content_type:
                return part
        return None

    @staticmethod
    def _decode(part: Message) -> str:
        payload = part.get_payload(decode=True)
        if payload is None:
            return ""
        charset = part.get_content_charset() or "utf-8"
        try:
            return payload.decode(charset, errors="replace")
        except LookupError:
            return payload.decode("utf-8", errors="replace")

    @staticmethod
    def _header_text(value: Any) -> str:
        """Decode RFC 2047 encoded words left in place by compat32 messages."""
        text = str(value)
        try:
            return str(make_header(decode_header(text)))
        except (HeaderParseError, LookupError, UnicodeError):
            return text

    @property
    def from_(self) -> list[str]:
        return self._addresses("From") or []

    @property
    def to(self) -> list[str] | None:
        return self._addresses("To")

    @property
    def cc(self) -> list[str] | None:
        return self._addresses("Cc")

    @property
    def bcc(self) -> list[str] | None:
        return self._addresses("Bcc")

    @property
    def reply_to(self) -> list[str] | None:
        return self._addresses("Reply-To")

    @property
    def return_path(self) -> str | None:
        value = self.message.get("Return-Path")
        if value is None:
            return None
        return self._header_text(value).strip().strip("<>") or None

    @property
    def subject(self) -> str | None:
        value = self.message.get("Subject")
        return None if value is None else self._header_text(value)

    @property
    def mime_type(self) -> str:
        return self.message.get_content_type()

    @property
    def text_part(self) -> str | None:
        part = self._first_part("text/plain")
        return None if part is None else self._decode(part)

    @property
    def html_part(self) -> str | None:
        part = self._first_part("text/html")
        return None if part is None else self._decode(part)

    @property
    def body(self) -> str:
        """Decoded body; for multipart messages, the text part, else the html part."""
        if not self.message.is_multipart():
            return self._decode(self.message)
        part = self._first_part("text/plain")
        if part is None:
            part = self._first_part("text/html")
        return "" if part is None else self._decode(part)

    def has_attachments(self) -> bool:
        return any(part.get_content_disposition() == "attachment" for part in self.message.walk())


def as_mail_message(message: Any) -> MailMessage:
    """Coerce a raw send input into a MailMessage.

    Accepts an object already exposing the MailMessage accessors, an
    ``email.message.Message``, RFC 5322 text (str or bytes), or a mapping
    of header fields.
    """
    if isinstance(message, Message):
        return MimeMessageView(message)
    if isinstance(message, str):
        return MimeMessageView.from_string(message)
    if isinstance(message, bytes):
        return MimeMessageView.from_bytes(message)
    if isinstance(message, Mapping):
        return MimeMessageView.from_mapping(message)
    return message
