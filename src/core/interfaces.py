"""Core interfaces for infrastructure dependencies."""

from __future__ import annotations

from typing import Protocol


class MailMessage(Protocol):
    """Read-only view of a MIME message used for raw sends.

    Address accessors return None when the header is absent.
    """

    @property
    def from_(self) -> list[str]: ...

    @property
    def to(self) -> list[str] | None: ...

    @property
    def cc(self) -> list[str] | None: ...

    @property
    def bcc(self) -> list[str] | None: ...

    @property
    def subject(self) -> str | None: ...

    @property
    def body(self) -> str:
        """Decoded message body."""
        ...

    @property
    def mime_type(self) -> str:
        """Content type of the message, e.g. "text/html"."""
        ...

    @property
    def return_path(self) -> str | None: ...

    @property
    def reply_to(self) -> list[str] | None: ...

    @property
    def text_part(self) -> str | None:
        """Decoded text/plain part of a multipart message."""
        ...

    @property
    def html_part(self) -> str | None:
        """Decoded text/html part of a multipart message."""
        ...

    def has_attachments(self) -> bool: ...
