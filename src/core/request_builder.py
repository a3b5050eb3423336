"""Translate send options and MIME messages into SES SendEmail requests."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

# Support both Lambda and test import paths
try:
    from core.errors import InvalidMessageError
    from core.models import RawOverrides, SendOptions
except ImportError:
    from src.core.errors import InvalidMessageError
    from src.core.models import RawOverrides, SendOptions

if TYPE_CHECKING:
    try:
        from core.interfaces import MailMessage
    except ImportError:
        from src.core.interfaces import MailMessage

logger = logging.getLogger(__name__)

CHARSET = "UTF-8"


def _content(data: str | None) -> dict[str, Any]:
    return {"Data": data, "Charset": CHARSET}


def build_send_email_request(
    options: SendOptions, source_arn: str | None = None
) -> dict[str, Any]:
    """Build the keyword arguments for an SES ``send_email`` call.

    Optional fields are only included when given; an absent destination list
    is omitted, never replaced by an empty one. A missing subject omits
    ``Message.Subject`` entirely.

    Args:
        options: Validated send options
        source_arn: Sending authorization ARN attached to every request

    Returns:
        Request kwargs for ``client.send_email``
    """
    request: dict[str, Any] = {}

    source = options.source if options.source is not None else options.from_
    if source is not None:
        request["Source"] = source

    destination: dict[str, list[str]] = {}
    if options.to is not None:
        destination["ToAddresses"] = options.to
    if options.cc is not None:
        destination["CcAddresses"] = options.cc
    if options.bcc is not None:
        destination["BccAddresses"] = options.bcc
    request["Destination"] = destination

    message: dict[str, Any] = {"Body": {}}
    if options.subject is not None:
        message["Subject"] = _content(options.subject)
    if options.html_body is not None:
        message["Body"]["Html"] = _content(options.html_body)
    text_body = options.text_body if options.text_body is not None else options.body
    if text_body is not None:
        message["Body"]["Text"] = _content(text_body)
    request["Message"] = message

    if options.return_path is not None:
        request["ReturnPath"] = options.return_path
    if options.reply_to is not None:
        request["ReplyToAddresses"] = options.reply_to
    if source_arn is not None:
        request["SourceArn"] = source_arn

    return request


def options_from_message(
    message: MailMessage, overrides: RawOverrides | None = None
) -> SendOptions:
    """Project a MIME message into structured send options.

    Override precedence for the sender is source > from > the message's
    first From address. Recipient overrides replace the message's own lists.
    The body goes to ``html_body`` only when the message is ``text/html``.

    Raises:
        InvalidMessageError: If the message has attachments but no text or html part,
            or its fields are not valid send options
    """
    if message.has_attachments() and message.text_part is None and message.html_part is None:
        raise InvalidMessageError("Attachment provided without message body")

    overrides = overrides or RawOverrides()
    fields: dict[str, Any] = {}

    sender = message.from_[0] if message.from_ else None
    if overrides.from_ is not None:
        sender = overrides.from_
    if overrides.source is not None:
        sender = overrides.source
    fields["from_"] = sender

    for key in ("to", "cc", "bcc"):
        value = getattr(message, key)
        override = getattr(overrides, key)
        if override is not None:
            value = override
        if value is not None:
            fields[key] = value

    fields["subject"] = message.subject
    body_key = "html_body" if message.mime_type == "text/html" else "text_body"
    fields[body_key] = message.body

    if message.return_path is not None:
        fields["return_path"] = message.return_path
    if message.reply_to is not None:
        fields["reply_to"] = message.reply_to

    logger.debug("Adapted %s message from %s", message.mime_type, sender)
    try:
        return SendOptions(**fields)
    except ValidationError as e:
        raise InvalidMessageError(f"Message fields are not valid send options: {e}") from e
