"""Unit tests for Pydantic models."""

import pytest
from pydantic import ValidationError

from src.core.models import RawOverrides, SendDataPoint, SendEmailPayload, SendOptions, SendQuota


class TestSendOptions:
    """Tests for SendOptions validation."""

    def test_from_alias(self):
        """Should accept 'from' as well as the from_ field name."""
        assert SendOptions.model_validate({"from": "a@x.com"}).from_ == "a@x.com"
        assert SendOptions(from_="a@x.com").from_ == "a@x.com"

    @pytest.mark.parametrize("key", ["to", "cc", "bcc", "reply_to"])
    def test_single_address_becomes_list(self, key):
        """A single address string should be normalized to a list."""
        options = SendOptions.model_validate({key: "a@x.com"})
        assert getattr(options, key) == ["a@x.com"]

    def test_address_list_kept(self):
        """A list of addresses should be kept as-is."""
        options = SendOptions(to=["a@x.com", "b@x.com"])
        assert options.to == ["a@x.com", "b@x.com"]

    def test_unknown_key_rejected(self):
        """Unknown options should fail validation."""
        with pytest.raises(ValidationError):
            SendOptions.model_validate({"attachments": ["x.pdf"]})

    def test_all_optional(self):
        """An empty options mapping should validate."""
        options = SendOptions()
        assert options.source is None
        assert options.to is None


class TestRawOverrides:
    """Tests for RawOverrides validation."""

    def test_from_alias_and_normalization(self):
        """Should accept 'from' and normalize single recipients."""
        overrides = RawOverrides.model_validate({"from": "a@x.com", "bcc": "b@x.com"})
        assert overrides.from_ == "a@x.com"
        assert overrides.bcc == ["b@x.com"]

    def test_body_not_overridable(self):
        """Body fields are not valid overrides."""
        with pytest.raises(ValidationError):
            RawOverrides.model_validate({"html_body": "<p>x</p>"})


class TestSendQuota:
    """Tests for SendQuota mapping."""

    def test_from_response(self):
        """Should map SES field names."""
        quota = SendQuota.from_response(
            {"Max24HourSend": 50000.0, "MaxSendRate": 14.0, "SentLast24Hours": 3.0}
        )
        assert quota.max_24_hour_send == 50000.0
        assert quota.max_send_rate == 14.0
        assert quota.sent_last_24_hours == 3.0


class TestSendDataPoint:
    """Tests for SendDataPoint mapping."""

    def test_missing_counters_default_to_zero(self):
        """Counters absent from the response should be zero."""
        point = SendDataPoint.from_response({"Timestamp": "2024-01-26T16:30:00Z"})
        assert point.timestamp.year == 2024
        assert point.delivery_attempts == 0
        assert point.bounces == 0


class TestSendEmailPayload:
    """Tests for SendEmailPayload validation."""

    def test_structured_payload(self):
        """Options-only payload should be valid."""
        payload = SendEmailPayload.model_validate(
            {"options": {"from": "a@x.com", "to": "b@x.com", "text_body": "hi"}}
        )
        assert payload.options is not None
        assert payload.options.to == ["b@x.com"]

    def test_raw_payload_with_overrides(self):
        """Raw payload may carry overrides."""
        payload = SendEmailPayload.model_validate(
            {"raw_message": "From: a@x.com\n\nhi\n", "overrides": {"to": "b@x.com"}}
        )
        assert payload.overrides is not None
        assert payload.overrides.to == ["b@x.com"]

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"options": {"from": "a@x.com"}, "raw_message": "From: a@x.com\n\nhi\n"},
            {"options": {"from": "a@x.com"}, "overrides": {"to": "b@x.com"}},
            {"raw_message": ""},
        ],
    )
    def test_invalid_combinations(self, body):
        """Exactly one message source is required; overrides need a raw message."""
        with pytest.raises(ValidationError):
            SendEmailPayload.model_validate(body)
