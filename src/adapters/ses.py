"""AWS SES adapter for sending email and reading account sending info."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from functools import cached_property
from typing import TYPE_CHECKING, Any, TypeVar

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

# Support both Lambda and test import paths
try:
    from adapters.mime import as_mail_message
    from core.errors import InvalidMessageError, UpstreamError
    from core.models import RawOverrides, SendDataPoint, SendOptions, SendQuota
    from core.request_builder import build_send_email_request, options_from_message
except ImportError:
    from src.adapters.mime import as_mail_message
    from src.core.errors import InvalidMessageError, UpstreamError
    from src.core.models import RawOverrides, SendDataPoint, SendOptions, SendQuota
    from src.core.request_builder import build_send_email_request, options_from_message

if TYPE_CHECKING:
    from mypy_boto3_ses import SESClient

logger = logging.getLogger(__name__)

R = TypeVar("R")


def _call(operation: str, func: Callable[..., R], **kwargs: Any) -> R:
    """Invoke an SES client method, translating SDK failures to UpstreamError."""
    try:
        return func(**kwargs)
    except ClientError as e:
        code = e.response.get("Error", {}).get("Code")
        logger.error("SES %s failed (%s): %s", operation, code, e)
        raise UpstreamError(f"SES {operation} failed: {e}", operation, code) from e
    except BotoCoreError as e:
        logger.error("SES %s failed: %s", operation, e)
        raise UpstreamError(f"SES {operation} failed: {e}", operation) from e


class SESMailer:
    """Sender for AWS SES email messages.

    Usage::

        mailer = SESMailer(source_arn="arn:aws:ses:eu-west-1:123456789012:identity/example.com")
        mailer.send_email(
            to=["jon@example.com", "dave@example.com"],
            source='"Steve Smith" <steve@example.com>',
            subject="Subject Line",
            text_body="Internal text body",
        )

    If SES rejects the message with "Email address is not verified" even
    though the source is verified, the account is probably still in the SES
    sandbox, where every recipient must be verified as well.
    """

    def __init__(
        self,
        source_arn: str | None = None,
        region: str = "eu-west-1",
        client: SESClient | None = None,
    ) -> None:
        """Initialize the mailer.

        Args:
            source_arn: Sending authorization ARN attached to every send
            region: AWS region (ignored when ``client`` is given)
            client: Optional pre-built boto3 SES client
        """
        self.source_arn = source_arn
        self.client: SESClient = client or boto3.client("ses", region_name=region)
        logger.info("Initialised SES mailer (source_arn=%s)", source_arn)

    def send_email(self, options: Mapping[str, Any] | SendOptions | None = None, **kwargs: Any) -> str:
        """Send an email via SES.

        Options may be passed as a mapping, a SendOptions instance, or as
        keyword arguments (keywords win over mapping entries). Because
        ``from`` is a keyword, pass it as ``from_`` or inside the mapping.

        Args:
            options: source/from, to, cc, bcc, subject, html_body,
                text_body/body, return_path, reply_to
            **kwargs: Same keys as ``options``

        Returns:
            The message ID from SES

        Raises:
            InvalidMessageError: If the options do not validate
            UpstreamError: If SES rejects the request or the call fails
        """
        send_options = self._validate_options(options, kwargs)
        request = build_send_email_request(send_options, self.source_arn)

        logger.info(
            "Calling SES send_email from %s to %s",
            request.get("Source"),
            request["Destination"],
        )
        response = _call("SendEmail", self.client.send_email, **request)
        message_id = str(response["MessageId"])
        logger.info("SES accepted message %s", message_id)
        return message_id

    def send_raw_email(
        self,
        message: Any,
        overrides: Mapping[str, Any] | RawOverrides | None = None,
        **kwargs: Any,
    ) -> str:
        """Send a MIME message by converting it into a structured send.

        Note that source/html_body/text_body cannot be set here; the sender
        comes from the message unless overridden, and the body is routed by
        the message's content type.

        Args:
            message: A MailMessage, an ``email.message.Message``, RFC 5322
                text, or a mapping of header fields
            overrides: source/from, to, cc, bcc replacing the message's values
            **kwargs: Same keys as ``overrides``

        Returns:
            The message ID from SES

        Raises:
            InvalidMessageError: If the message cannot be used (e.g. an
                attachment without a message body)
            UpstreamError: If SES rejects the request or the call fails
        """
        raw_overrides = self._validate_overrides(overrides, kwargs)
        try:
            mail = as_mail_message(message)
        except ValueError as e:
            raise InvalidMessageError(str(e)) from e

        options = options_from_message(mail, raw_overrides)
        return self.send_email(options)

    deliver = send_raw_email

    @cached_property
    def addresses(self) -> Addresses:
        """Verified sender address management."""
        return Addresses(self)

    def quota(self) -> SendQuota:
        """Get the account's sending limits and usage over the last 24 hours."""
        response = _call("GetSendQuota", self.client.get_send_quota)
        return SendQuota.from_response(response)

    def statistics(self) -> list[SendDataPoint]:
        """Get sending activity for the last two weeks.

        Each data point covers a 15-minute interval, in the order SES returns them.
        """
        response = _call("GetSendStatistics", self.client.get_send_statistics)
        return [SendDataPoint.from_response(point) for point in response.get("SendDataPoints", [])]

    @staticmethod
    def _validate_options(
        options: Mapping[str, Any] | SendOptions | None, overrides: dict[str, Any]
    ) -> SendOptions:
        if isinstance(options, SendOptions):
            if not overrides:
                return options
            options = options.model_dump(exclude_unset=True)
        try:
            return SendOptions.model_validate({**(options or {}), **overrides})
        except ValidationError as e:
            raise InvalidMessageError(f"Invalid send options: {e}") from e

    @staticmethod
    def _validate_overrides(
        overrides: Mapping[str, Any] | RawOverrides | None, extra: dict[str, Any]
    ) -> RawOverrides:
        if isinstance(overrides, RawOverrides):
            if not extra:
                return overrides
            overrides = overrides.model_dump(exclude_unset=True)
        try:
            return RawOverrides.model_validate({**(overrides or {}), **extra})
        except ValidationError as e:
            raise InvalidMessageError(f"Invalid overrides: {e}") from e


class Addresses:
    """Verified email address management (list, verify, delete).

    Usage::

        mailer.addresses.list()
        mailer.addresses.verify("jon@example.com")
        mailer.addresses.delete("jon@example.com")
    """

    def __init__(self, mailer: SESMailer) -> None:
        self.mailer = mailer

    def list(self) -> list[str]:
        """List all verified email addresses."""
        response = _call("ListVerifiedEmailAddresses", self.mailer.client.list_verified_email_addresses)
        return list(response.get("VerifiedEmailAddresses", []))

    def verify(self, email: str) -> None:
        """Send a verification email to the address."""
        _call("VerifyEmailAddress", self.mailer.client.verify_email_address, EmailAddress=email)
        logger.info("Requested verification for %s", email)

    def delete(self, email: str) -> None:
        """Remove the address from the verified list."""
        _call(
            "DeleteVerifiedEmailAddress",
            self.mailer.client.delete_verified_email_address,
            EmailAddress=email,
        )
        logger.info("Deleted verified address %s", email)
