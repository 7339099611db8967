"""Two-factor code acquisition: poll the SMS queue until a fresh six-digit code arrives.

The SMS bridge (phone number -> SNS topic -> SQS queue) delivers every SMS sent to the
account's trusted number. A run only trusts a message that

- was sent after the code was requested (minus a small clock-skew grace),
- unwraps as an SNS notification carrying an SMS body, and
- contains a six-digit code.

Everything else is deleted so it cannot be picked up by a later run. The message that
yields the code is deleted before the code is returned.
"""

import math
import time
from datetime import datetime, timedelta, timezone
from typing import Callable

from spaceauth_renewer import config
from spaceauth_renewer.errors import CodeNotFoundError, MalformedSmsError
from spaceauth_renewer.models import QueueMessage, SmsNotification
from spaceauth_renewer.sms_queue.protocol import MessageQueue
from spaceauth_renewer.utils.logger import get_logger
from spaceauth_renewer.utils.sms_code import extract_code, mask_code

logger = get_logger("spaceauth_renewer.two_factor")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CodeAcquirer:
    """Polls a MessageQueue for the verification code within a fixed time budget."""

    def __init__(
        self,
        queue: MessageQueue,
        wait_seconds: float = config.CODE_WAIT_SECONDS,
        poll_wait_seconds: int = config.QUEUE_WAIT_TIME_SECONDS,
        visibility_timeout: int = config.QUEUE_VISIBILITY_TIMEOUT,
        stale_grace_seconds: float = config.STALE_MESSAGE_GRACE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._queue = queue
        self._wait_seconds = wait_seconds
        # At least one second per poll; a 0 s poll against an empty queue would spin
        self._poll_wait_seconds = max(1, min(int(poll_wait_seconds), 20))
        self._visibility_timeout = visibility_timeout
        self._stale_grace = timedelta(seconds=stale_grace_seconds)
        self._clock = clock

    def acquire(self, requested_at: datetime | None = None) -> str:
        """Return the code from the first fresh, well-formed SMS; raise CodeNotFoundError on timeout."""
        requested_at = requested_at or _utcnow()
        not_before = requested_at - self._stale_grace
        deadline = self._clock() + self._wait_seconds
        log = logger.bind(requested_at=requested_at.isoformat())
        log.info("two_factor.wait", wait_seconds=self._wait_seconds)

        polls = 0
        while True:
            remaining = deadline - self._clock()
            if remaining <= 0:
                break
            polls += 1
            wait = min(self._poll_wait_seconds, math.ceil(remaining))
            for message in self._queue.receive(wait, self._visibility_timeout):
                code = self._consume(message, not_before, log)
                if code is not None:
                    log.info("two_factor.code_received", message_id=message.message_id, polls=polls)
                    return code

        log.warning("two_factor.timeout", wait_seconds=self._wait_seconds, polls=polls)
        raise CodeNotFoundError(
            f"No verification code received within {self._wait_seconds:g} seconds"
        )

    def _consume(self, message: QueueMessage, not_before: datetime, log) -> str | None:
        """Delete message and return its code, or None when it carries no usable code."""
        if message.sent_at is not None and message.sent_at < not_before:
            self._queue.delete(message.receipt_handle)
            log.info(
                "two_factor.stale_message",
                message_id=message.message_id,
                sent_at=message.sent_at.isoformat(),
            )
            return None

        try:
            sms = SmsNotification.from_queue_body(message.body)
        except MalformedSmsError as e:
            self._queue.delete(message.receipt_handle)
            log.warning("two_factor.malformed_message", message_id=message.message_id, error=str(e))
            return None

        try:
            code = extract_code(sms.messageBody)
        except CodeNotFoundError:
            self._queue.delete(message.receipt_handle)
            log.warning(
                "two_factor.no_code_in_sms",
                message_id=message.message_id,
                sms=mask_code(sms.messageBody),
            )
            return None

        self._queue.delete(message.receipt_handle)
        log.debug("two_factor.sms", message_id=message.message_id, sms=mask_code(sms.messageBody))
        return code
