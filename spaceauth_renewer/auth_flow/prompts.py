"""Recognize spaceauth prompts and pull the session string out of its output."""

import re

from spaceauth_renewer.utils.sms_code import mask_code

_ANSI_CSI_PATTERN = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]")
_ANSI_OSC_PATTERN = re.compile(r"\x1b\][^\x07]*(?:\x07|\x1b\\)")

# "Please enter the 6 digit code you received at +49 •••• •••••69:"
CODE_PROMPT = re.compile(r"Please enter the 6 digit code[^\n]*:", re.IGNORECASE)

# highline agree(): "... copy the cookie into your clipboard ... (y/n)"
YES_NO_PROMPT = re.compile(r"\(y/n\)", re.IGNORECASE)

# Prompts we cannot answer unattended, with the setting that avoids them
FATAL_PROMPTS = (
    (
        re.compile(r"Please select a trusted phone number", re.IGNORECASE),
        "spaceauth asked for a phone number; set SPACESHIP_2FA_SMS_DEFAULT_PHONE_NUMBER",
    ),
    (
        re.compile(r"^\s*Password \(for [^)]*\):", re.IGNORECASE | re.MULTILINE),
        "spaceauth asked for a password; set FASTLANE_PASSWORD",
    ),
)

SESSION_MARKER = re.compile(
    r"Pass the following via the FASTLANE_SESSION environment variable:[ \t]*\n+[ \t]*(?P<session>[^\n]+)"
)


def strip_ansi(text: str) -> str:
    cleaned = _ANSI_OSC_PATTERN.sub("", text)
    cleaned = _ANSI_CSI_PATTERN.sub("", cleaned)
    return cleaned


def normalize_output(text: str) -> str:
    """Strip colors and terminal line endings from raw pty output."""
    return strip_ansi(text).replace("\r\n", "\n").replace("\r", "\n")


def extract_session(transcript: str) -> str | None:
    """Return the session line printed after the FASTLANE_SESSION marker, if any."""
    matches = list(SESSION_MARKER.finditer(transcript))
    if not matches:
        return None
    session = matches[-1].group("session").strip()
    return session or None


def transcript_tail(transcript: str, lines: int = 20) -> str:
    """Last lines of output for error reports, with codes and session masked."""
    masked = SESSION_MARKER.sub(
        "Pass the following via the FASTLANE_SESSION environment variable:\n<session>",
        transcript,
    )
    return "\n".join(mask_code(masked).splitlines()[-lines:])
