"""In-memory message queue for local dry runs and tests."""

import itertools
import json
from collections import deque
from datetime import datetime, timezone
from typing import Callable, Optional

from spaceauth_renewer.models import QueueMessage
from spaceauth_renewer.utils.logger import get_logger

logger = get_logger("spaceauth_renewer.sms_queue.memory")


def sns_wrapped_sms(text: str, origination_number: str = "+10000000000") -> str:
    """Build a queue body in the same two-layer shape the SMS bridge produces."""
    inner = {"originationNumber": origination_number, "messageBody": text}
    return json.dumps({"Type": "Notification", "Message": json.dumps(inner)})


class InMemoryMessageQueue:
    """Queue double: messages are visible until deleted; receive never blocks.

    on_receive is called before each receive with the requested wait, which lets
    tests advance a fake clock or inject messages mid-poll.
    """

    def __init__(self, on_receive: Optional[Callable[[int], None]] = None):
        self._messages: deque[QueueMessage] = deque()
        self._ids = itertools.count(1)
        self._on_receive = on_receive
        self.deleted: list[str] = []
        self.receive_calls: list[int] = []

    def put(self, body: str, sent_at: datetime | None = None) -> QueueMessage:
        n = next(self._ids)
        message = QueueMessage(
            message_id=f"msg-{n}",
            receipt_handle=f"rh-{n}",
            body=body,
            sent_at=sent_at or datetime.now(timezone.utc),
        )
        self._messages.append(message)
        return message

    def put_sms(self, text: str, sent_at: datetime | None = None) -> QueueMessage:
        return self.put(sns_wrapped_sms(text), sent_at=sent_at)

    def __len__(self) -> int:
        return len(self._messages)

    def receive(self, wait_seconds: int, visibility_timeout: int) -> list[QueueMessage]:
        self.receive_calls.append(wait_seconds)
        if self._on_receive is not None:
            self._on_receive(wait_seconds)
        if not self._messages:
            return []
        # Rotate so an undeleted message does not shadow the ones behind it
        message = self._messages[0]
        self._messages.rotate(-1)
        return [message]

    def delete(self, receipt_handle: str) -> None:
        for message in list(self._messages):
            if message.receipt_handle == receipt_handle:
                self._messages.remove(message)
                self.deleted.append(receipt_handle)
                logger.debug("memory_queue.delete", message_id=message.message_id)
                return
        raise KeyError(f"Unknown receipt handle: {receipt_handle}")
