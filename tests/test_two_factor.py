"""Tests for the code acquisition protocol against the in-memory queue."""

import sys
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from spaceauth_renewer.errors import CodeNotFoundError, QueueError, RenewalError
from spaceauth_renewer.sms_queue.memory import InMemoryMessageQueue
from spaceauth_renewer.two_factor import CodeAcquirer


class FakeClock:
    """Monotonic clock that only moves when a receive 'waits'."""

    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TestCodeAcquirer(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.requested_at = datetime(2026, 10, 17, 12, 0, 0, tzinfo=timezone.utc)

    def _acquirer(self, queue, wait_seconds=60, poll_wait_seconds=20):
        return CodeAcquirer(
            queue,
            wait_seconds=wait_seconds,
            poll_wait_seconds=poll_wait_seconds,
            visibility_timeout=30,
            stale_grace_seconds=5,
            clock=self.clock,
        )

    def _fresh(self, seconds=1):
        return self.requested_at + timedelta(seconds=seconds)

    def test_returns_code_and_deletes_message(self):
        queue = InMemoryMessageQueue(on_receive=self.clock.advance)
        msg = queue.put_sms("Your Apple ID Code is: 123456.", sent_at=self._fresh())

        code = self._acquirer(queue).acquire(self.requested_at)

        self.assertEqual(code, "123456")
        self.assertEqual(queue.deleted, [msg.receipt_handle])
        self.assertEqual(len(queue), 0)

    def test_code_arriving_after_empty_polls(self):
        def on_receive(wait):
            self.clock.advance(wait)
            if self.clock.now >= 40 and not len(queue):
                queue.put_sms("Your Apple ID Code is: 654321.", sent_at=self._fresh(40))

        queue = InMemoryMessageQueue(on_receive=on_receive)
        code = self._acquirer(queue).acquire(self.requested_at)

        self.assertEqual(code, "654321")
        self.assertEqual(queue.receive_calls, [20, 20])

    def test_timeout_raises_and_respects_budget(self):
        queue = InMemoryMessageQueue(on_receive=self.clock.advance)

        with self.assertRaises(CodeNotFoundError):
            self._acquirer(queue, wait_seconds=50).acquire(self.requested_at)

        # 20 + 20 + the 10 seconds that remain
        self.assertEqual(queue.receive_calls, [20, 20, 10])
        self.assertEqual(self.clock.now, 50)

    def test_stale_message_is_deleted_and_skipped(self):
        queue = InMemoryMessageQueue(on_receive=self.clock.advance)
        stale = queue.put_sms("Your Apple ID Code is: 111111.", sent_at=self.requested_at - timedelta(minutes=10))
        fresh = queue.put_sms("Your Apple ID Code is: 222222.", sent_at=self._fresh())

        code = self._acquirer(queue).acquire(self.requested_at)

        self.assertEqual(code, "222222")
        self.assertEqual(queue.deleted, [stale.receipt_handle, fresh.receipt_handle])

    def test_message_within_grace_is_accepted(self):
        queue = InMemoryMessageQueue(on_receive=self.clock.advance)
        queue.put_sms("Your Apple ID Code is: 333333.", sent_at=self.requested_at - timedelta(seconds=3))

        self.assertEqual(self._acquirer(queue).acquire(self.requested_at), "333333")

    def test_malformed_and_codeless_messages_are_dropped(self):
        queue = InMemoryMessageQueue(on_receive=self.clock.advance)
        junk = queue.put("not json", sent_at=self._fresh())
        no_code = queue.put_sms("Your package has shipped", sent_at=self._fresh())
        good = queue.put_sms("Your Apple ID Code is: 444444.", sent_at=self._fresh())

        code = self._acquirer(queue).acquire(self.requested_at)

        self.assertEqual(code, "444444")
        self.assertEqual(
            queue.deleted,
            [junk.receipt_handle, no_code.receipt_handle, good.receipt_handle],
        )

    def test_only_invalid_messages_times_out(self):
        queue = InMemoryMessageQueue(on_receive=self.clock.advance)
        queue.put_sms("No code here", sent_at=self._fresh())

        with self.assertRaises(CodeNotFoundError):
            self._acquirer(queue, wait_seconds=30).acquire(self.requested_at)
        self.assertEqual(len(queue), 0)

    def test_second_call_does_not_reuse_consumed_code(self):
        queue = InMemoryMessageQueue(on_receive=self.clock.advance)
        queue.put_sms("Your Apple ID Code is: 555555.", sent_at=self._fresh())
        acquirer = self._acquirer(queue, wait_seconds=20)

        self.assertEqual(acquirer.acquire(self.requested_at), "555555")
        with self.assertRaises(CodeNotFoundError):
            acquirer.acquire(self.requested_at)

    def test_missing_sent_timestamp_is_not_treated_as_stale(self):
        queue = InMemoryMessageQueue(on_receive=self.clock.advance)
        msg = queue.put_sms("Your Apple ID Code is: 666666.")
        msg.sent_at = None

        self.assertEqual(self._acquirer(queue).acquire(self.requested_at), "666666")

    def test_fractional_budget_is_rounded_up(self):
        # Each receive overshoots its wait slightly, as real long polls do
        queue = InMemoryMessageQueue(on_receive=lambda wait: self.clock.advance(wait + 0.01))

        with self.assertRaises(CodeNotFoundError):
            self._acquirer(queue, wait_seconds=20.9).acquire(self.requested_at)

        # The 0.89 s left after the first poll still gets a 1 s poll, not a 0 s one
        self.assertEqual(queue.receive_calls, [20, 1])

    def test_zero_poll_wait_is_raised_to_one_second(self):
        queue = InMemoryMessageQueue(on_receive=self.clock.advance)

        with self.assertRaises(CodeNotFoundError):
            self._acquirer(queue, wait_seconds=3, poll_wait_seconds=0).acquire(self.requested_at)

        self.assertEqual(queue.receive_calls, [1, 1, 1])

    def test_delete_failure_propagates_as_queue_error(self):
        class FailingDeleteQueue(InMemoryMessageQueue):
            def delete(self, receipt_handle):
                raise QueueError("Cannot delete message: AccessDenied")

        queue = FailingDeleteQueue(on_receive=self.clock.advance)
        queue.put_sms("Your Apple ID Code is: 777777.", sent_at=self._fresh())

        with self.assertRaises(QueueError) as ctx:
            self._acquirer(queue).acquire(self.requested_at)
        self.assertIsInstance(ctx.exception, RenewalError)
        self.assertEqual(queue.receive_calls, [20])
