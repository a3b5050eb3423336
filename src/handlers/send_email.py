"""Lambda handler for the send email endpoint."""

from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING, Any

from aws_lambda_powertools import Logger
from pydantic import ValidationError

# Support both Lambda (adapters...) and test (src.adapters...) import paths
try:
    from adapters.ses import SESMailer
    from core.errors import InvalidMessageError, UpstreamError
    from core.models import SendEmailPayload, SendEmailResponse
except ImportError:
    from src.adapters.ses import SESMailer
    from src.core.errors import InvalidMessageError, UpstreamError
    from src.core.models import SendEmailPayload, SendEmailResponse

if TYPE_CHECKING:
    from aws_lambda_powertools.utilities.typing import LambdaContext

logger = Logger(service="ses-mailer-send")

# Initialize client lazily for cold start optimization
_mailer: SESMailer | None = None


def get_mailer() -> SESMailer:
    """Get or create the SES mailer."""
    global _mailer
    if _mailer is None:
        _mailer = SESMailer(
            source_arn=os.environ.get("SES_SOURCE_ARN") or None,
            region=os.environ.get("SES_REGION", "eu-west-1"),
        )
    return _mailer


@logger.inject_lambda_context
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Handle incoming send requests.

    Expected event format (Lambda Function URL):
    {
        "body": "{\"options\": {...}}" or "{\"raw_message\": \"...\", \"overrides\": {...}}"
    }
    """
    try:
        body = event.get("body", "{}")
        if isinstance(body, str):
            body = json.loads(body)

        payload = SendEmailPayload.model_validate(body)
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning("Invalid request payload", extra={"error": str(e)})
        return _response(400, SendEmailResponse(status="error", message=f"Invalid payload: {e}"))

    mailer = get_mailer()

    try:
        if payload.raw_message is not None:
            message_id = mailer.send_raw_email(payload.raw_message, payload.overrides)
        else:
            message_id = mailer.send_email(payload.options)
    except InvalidMessageError as e:
        logger.warning("Invalid message", extra={"error": str(e)})
        return _response(400, SendEmailResponse(status="error", message=f"Invalid message: {e}"))
    except UpstreamError as e:
        logger.exception("SES rejected message", extra={"operation": e.operation, "code": e.code})
        return _response(
            502,
            SendEmailResponse(status="error", message=f"Failed to send email: {e}"),
        )

    logger.info("Sent email", extra={"message_id": message_id})
    return _response(200, SendEmailResponse(status="sent", message_id=message_id, message="Email sent"))


def _response(status_code: int, body: SendEmailResponse) -> dict[str, Any]:
    """Build a Lambda Function URL response."""
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": body.model_dump_json(),
    }
