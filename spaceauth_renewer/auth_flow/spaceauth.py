"""Drive `fastlane spaceauth` on a pseudo-terminal and answer its prompts.

spaceauth only asks for the SMS code when it is attached to a terminal, so the child
gets a pty for stdin/stdout/stderr. Output is read incrementally; each prompt found
after the last answered one is answered once:

- the 6 digit code prompt gets a code from the code provider,
- yes/no prompts (clipboard copy) get "n",
- prompts for credentials or phone selection abort the run.

The session string is read from the line after the FASTLANE_SESSION marker.
"""

import codecs
import os
import pty
import re
import select
import shlex
import signal
import subprocess
import time
from datetime import datetime, timezone
from typing import Mapping

from spaceauth_renewer import config
from spaceauth_renewer.auth_flow.prompts import (
    CODE_PROMPT,
    FATAL_PROMPTS,
    YES_NO_PROMPT,
    extract_session,
    normalize_output,
    transcript_tail,
)
from spaceauth_renewer.auth_flow.protocol import CodeProvider
from spaceauth_renewer.errors import AuthFlowError, UnexpectedPromptError
from spaceauth_renewer.utils.logger import get_logger, session_fingerprint

logger = get_logger("spaceauth_renewer.auth_flow.spaceauth")

READ_CHUNK = 4096
SELECT_INTERVAL = 0.2
# One retry when Apple rejects the first code
MAX_CODE_ATTEMPTS = 2


def build_child_env(previous_session: str, base: Mapping[str, str] | None = None) -> dict[str, str]:
    """Environment for the spaceauth child: inherited values plus session and quiet-output flags."""
    env = dict(os.environ if base is None else base)
    if previous_session:
        env["FASTLANE_SESSION"] = previous_session
    else:
        env.pop("FASTLANE_SESSION", None)
    env["FASTLANE_DISABLE_COLORS"] = "1"
    env["FASTLANE_SKIP_UPDATE_CHECK"] = "1"
    env["FASTLANE_HIDE_CHANGELOG"] = "1"
    # fastlane refuses interactive 2FA when it thinks it runs on CI
    env.pop("CI", None)
    env.setdefault("TERM", "dumb")
    return env


def _kill(process: subprocess.Popen) -> None:
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    process.wait()


class SpaceauthFlow:
    """Runs the spaceauth command once per call to run()."""

    def __init__(
        self,
        command: str | list[str] = config.SPACEAUTH_COMMAND,
        timeout_seconds: float = config.SPACEAUTH_TIMEOUT_SECONDS,
        env: Mapping[str, str] | None = None,
    ):
        self._argv = shlex.split(command) if isinstance(command, str) else list(command)
        if not self._argv:
            raise ValueError("spaceauth command is empty")
        self._timeout_seconds = timeout_seconds
        self._base_env = env

    def run(self, previous_session: str, code_provider: CodeProvider) -> str:
        log = logger.bind(command=self._argv[0], previous_session=session_fingerprint(previous_session))
        log.info("spaceauth.start")

        master_fd, slave_fd = pty.openpty()
        try:
            process = subprocess.Popen(
                self._argv,
                stdin=slave_fd,
                stdout=slave_fd,
                stderr=slave_fd,
                env=build_child_env(previous_session, self._base_env),
                close_fds=True,
                start_new_session=True,
            )
        except OSError as e:
            os.close(master_fd)
            os.close(slave_fd)
            raise AuthFlowError(f"Cannot start {self._argv[0]}: {e}") from e
        os.close(slave_fd)

        deadline = time.monotonic() + self._timeout_seconds
        try:
            transcript, code_attempts = self._interact(process, master_fd, code_provider, deadline, log)
        except BaseException:
            _kill(process)
            raise
        finally:
            os.close(master_fd)

        # The pty can close before the process exits (e.g. it detached its stdio)
        try:
            exit_code = process.wait(timeout=max(0.0, deadline - time.monotonic()))
        except subprocess.TimeoutExpired:
            _kill(process)
            log.error("spaceauth.timeout", timeout_seconds=self._timeout_seconds, output_closed=True)
            raise AuthFlowError(
                f"spaceauth did not finish within {self._timeout_seconds:g} seconds",
                transcript_tail=transcript_tail(transcript),
            )
        if exit_code != 0:
            log.error("spaceauth.failed", exit_code=exit_code, code_attempts=code_attempts)
            raise AuthFlowError(
                f"{self._argv[0]} exited with status {exit_code}",
                transcript_tail=transcript_tail(transcript),
            )

        session = extract_session(transcript)
        if not session:
            log.error("spaceauth.no_session", exit_code=exit_code)
            raise AuthFlowError(
                "spaceauth finished without printing a session",
                transcript_tail=transcript_tail(transcript),
            )
        log.info("spaceauth.done", session=session_fingerprint(session), code_attempts=code_attempts)
        return session

    def _interact(
        self, process, master_fd: int, code_provider: CodeProvider, deadline: float, log
    ) -> tuple[str, int]:
        """Pump output until the child closes the pty; answer prompts on the way."""
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        raw = ""
        transcript = ""
        scan_from = 0
        code_attempts = 0

        while True:
            if time.monotonic() > deadline:
                log.error("spaceauth.timeout", timeout_seconds=self._timeout_seconds)
                raise AuthFlowError(
                    f"spaceauth did not finish within {self._timeout_seconds:g} seconds",
                    transcript_tail=transcript_tail(transcript),
                )

            ready, _, _ = select.select([master_fd], [], [], SELECT_INTERVAL)
            if not ready:
                if process.poll() is not None:
                    break
                continue
            try:
                chunk = os.read(master_fd, READ_CHUNK)
            except OSError:
                # Linux raises EIO once the child side of the pty is closed
                chunk = b""
            if not chunk:
                break

            raw += decoder.decode(chunk)
            transcript = normalize_output(raw)

            while True:
                prompt = self._next_prompt(transcript, scan_from)
                if prompt is None:
                    break
                kind, match = prompt
                scan_from = match.end()

                if kind == "code":
                    code_attempts += 1
                    if code_attempts > MAX_CODE_ATTEMPTS:
                        log.error("spaceauth.code_rejected", attempts=code_attempts - 1)
                        raise AuthFlowError(
                            "Verification code was rejected",
                            transcript_tail=transcript_tail(transcript),
                        )
                    requested_at = datetime.now(timezone.utc)
                    log.info("spaceauth.code_prompt", attempt=code_attempts)
                    code = code_provider(requested_at)
                    os.write(master_fd, f"{code}\n".encode())
                elif kind == "yes_no":
                    log.debug("spaceauth.yes_no_prompt")
                    os.write(master_fd, b"n\n")
                else:
                    log.error("spaceauth.unexpected_prompt", reason=kind)
                    raise UnexpectedPromptError(kind, transcript_tail=transcript_tail(transcript))

        return transcript, code_attempts

    @staticmethod
    def _next_prompt(transcript: str, start: int) -> tuple[str, re.Match] | None:
        """Earliest prompt at or after start, as (kind, match). Fatal prompts use their message as kind."""
        candidates: list[tuple[str, re.Match]] = []
        for kind, pattern in (("code", CODE_PROMPT), ("yes_no", YES_NO_PROMPT)):
            match = pattern.search(transcript, start)
            if match:
                candidates.append((kind, match))
        for pattern, message in FATAL_PROMPTS:
            match = pattern.search(transcript, start)
            if match:
                candidates.append((message, match))
        if not candidates:
            return None
        return min(candidates, key=lambda c: c[1].start())
