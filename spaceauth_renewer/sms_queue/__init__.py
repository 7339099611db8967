"""SMS queue: protocol, SQS implementation and in-memory double."""

from spaceauth_renewer.sms_queue.memory import InMemoryMessageQueue
from spaceauth_renewer.sms_queue.protocol import MessageQueue
from spaceauth_renewer.sms_queue.sqs import SqsMessageQueue

__all__ = [
    "MessageQueue",
    "InMemoryMessageQueue",
    "SqsMessageQueue",
]
