"""Amazon SQS message queue (boto3)."""

from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from spaceauth_renewer.errors import QueueError
from spaceauth_renewer.models import QueueMessage
from spaceauth_renewer.utils.logger import get_logger

logger = get_logger("spaceauth_renewer.sms_queue.sqs")

# SQS rejects WaitTimeSeconds outside 0..20
MAX_WAIT_SECONDS = 20


class SqsMessageQueue:
    """Reads SNS-wrapped SMS notifications from one SQS queue, one message at a time."""

    def __init__(self, queue_url: str, client: Any = None, region_name: str | None = None):
        if not queue_url:
            raise ValueError("queue_url is required")
        self._queue_url = queue_url
        self._client = client or boto3.client("sqs", region_name=region_name)

    @property
    def queue_url(self) -> str:
        return self._queue_url

    def receive(self, wait_seconds: int, visibility_timeout: int) -> list[QueueMessage]:
        wait = max(0, min(int(wait_seconds), MAX_WAIT_SECONDS))
        try:
            response = self._client.receive_message(
                QueueUrl=self._queue_url,
                MaxNumberOfMessages=1,
                WaitTimeSeconds=wait,
                VisibilityTimeout=visibility_timeout,
                AttributeNames=["SentTimestamp"],
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("sqs.receive.error", error=str(e), error_type=type(e).__name__)
            raise QueueError(f"Cannot receive from {self._queue_url}: {e}") from e
        messages = [QueueMessage.from_sqs(m) for m in response.get("Messages", [])]
        logger.debug("sqs.receive", wait_seconds=wait, count=len(messages))
        return messages

    def delete(self, receipt_handle: str) -> None:
        try:
            self._client.delete_message(
                QueueUrl=self._queue_url,
                ReceiptHandle=receipt_handle,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("sqs.delete.error", error=str(e), error_type=type(e).__name__)
            raise QueueError(f"Cannot delete message from {self._queue_url}: {e}") from e
        logger.debug("sqs.delete")
