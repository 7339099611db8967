"""Log output of a renewal run must not contain codes or session tokens.

Records are read through pytest's caplog: structlog hands the event dict to the stdlib
root logger, so record.msg is the full event.
"""

import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from spaceauth_renewer.renewal import renew_session
from spaceauth_renewer.secret_store.memory import InMemorySecretStore
from spaceauth_renewer.sms_queue.memory import InMemoryMessageQueue
from spaceauth_renewer.two_factor import CodeAcquirer
from spaceauth_renewer.utils.logger import session_fingerprint

OLD_SESSION = "---\\n- !ruby/object:HTTP::Cookie\\n  value: expired-session-token-abc"
NEW_SESSION = "---\\n- !ruby/object:HTTP::Cookie\\n  value: fresh-session-token-xyz"
CODE = "123456"
REQUESTED_AT = datetime(2026, 10, 17, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class TwoFactorFlow:
    def __init__(self):
        self.codes = []

    def run(self, previous_session, code_provider):
        self.codes.append(code_provider(REQUESTED_AT))
        return NEW_SESSION


def test_renewal_logs_no_code_or_session(caplog):
    caplog.set_level(logging.INFO)
    clock = FakeClock()
    queue = InMemoryMessageQueue(on_receive=clock.advance)
    queue.put_sms(
        f"Your Apple ID Code is: {CODE}. Don't share it with anyone.",
        sent_at=REQUESTED_AT + timedelta(seconds=1),
    )
    acquirer = CodeAcquirer(
        queue,
        wait_seconds=20,
        poll_wait_seconds=20,
        visibility_timeout=30,
        stale_grace_seconds=5,
        clock=clock,
    )
    store = InMemorySecretStore(session=OLD_SESSION)
    flow = TwoFactorFlow()

    result = renew_session(store, flow, acquirer)

    assert result.updated
    assert flow.codes == [CODE]
    assert caplog.records

    for record in caplog.records:
        event = dict(record.msg) if isinstance(record.msg, dict) else {"event": record.getMessage()}
        # Log timestamps carry microseconds, which can spell any six digits
        event.pop("timestamp", None)
        text = str(event)
        assert CODE not in text
        assert "expired-session-token-abc" not in text
        assert "fresh-session-token-xyz" not in text

    # Sessions are identified by fingerprint instead
    assert session_fingerprint(NEW_SESSION) in caplog.text
