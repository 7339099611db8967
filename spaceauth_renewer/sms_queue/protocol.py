"""Message queue protocol (the subset of SQS the code acquisition needs)."""

from typing import Protocol

from spaceauth_renewer.models import QueueMessage


class MessageQueue(Protocol):
    """Receive-and-delete queue carrying inbound SMS notifications."""

    def receive(self, wait_seconds: int, visibility_timeout: int) -> list[QueueMessage]:
        """Long-poll for up to wait_seconds; return at most one message."""
        ...

    def delete(self, receipt_handle: str) -> None:
        """Remove a received message from the queue."""
        ...
