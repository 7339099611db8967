"""Pydantic models for queue messages, the SMS notification shape, and run results."""

import json
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from spaceauth_renewer.errors import MalformedSmsError


class QueueMessage(BaseModel):
    """One message received from the queue (subset of the SQS shape we need)."""

    message_id: str
    receipt_handle: str
    body: str = ""
    sent_at: Optional[datetime] = None  # SentTimestamp attribute

    @classmethod
    def from_sqs(cls, raw: dict[str, Any]) -> "QueueMessage":
        """Build from an item of receive_message()["Messages"]."""
        sent_at = None
        sent_ms = (raw.get("Attributes") or {}).get("SentTimestamp")
        if sent_ms:
            try:
                sent_at = datetime.fromtimestamp(int(sent_ms) / 1000, tz=timezone.utc)
            except (TypeError, ValueError):
                sent_at = None
        return cls(
            message_id=raw.get("MessageId", ""),
            receipt_handle=raw["ReceiptHandle"],
            body=raw.get("Body", ""),
            sent_at=sent_at,
        )


class SmsNotification(BaseModel):
    """Inbound SMS as published by the SMS bridge (End User Messaging / Pinpoint) to SNS."""

    messageBody: str
    originationNumber: Optional[str] = None
    destinationNumber: Optional[str] = None
    inboundMessageId: Optional[str] = None

    model_config = ConfigDict(extra="allow")

    @classmethod
    def from_queue_body(cls, body: str) -> "SmsNotification":
        """Unwrap the SNS envelope: the queue body's "Message" field is itself JSON."""
        try:
            envelope = json.loads(body)
        except (TypeError, ValueError) as e:
            raise MalformedSmsError(f"Queue body is not JSON: {e}") from e
        if not isinstance(envelope, dict) or not isinstance(envelope.get("Message"), str):
            raise MalformedSmsError("Queue body has no SNS 'Message' string")
        try:
            payload = json.loads(envelope["Message"])
        except ValueError as e:
            raise MalformedSmsError(f"SNS Message is not JSON: {e}") from e
        if not isinstance(payload, dict):
            raise MalformedSmsError("SNS Message is not a JSON object")
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            raise MalformedSmsError(f"SNS Message has no messageBody: {e.error_count()} error(s)") from e


class RenewalResult(BaseModel):
    """Outcome of one renewal run."""

    session: str
    updated: bool = False
    used_two_factor: bool = False
    finished_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_response(self, session_key: str = "FASTLANE_SESSION") -> dict[str, Any]:
        """Payload returned by the Lambda handler."""
        return {
            session_key: self.session,
            "updated": self.updated,
            "used_two_factor": self.used_two_factor,
        }
