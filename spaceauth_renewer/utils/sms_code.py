"""Extract the six-digit verification code from an SMS body."""

import re

from spaceauth_renewer.errors import CodeNotFoundError

# ASCII digits only; \d would also match e.g. Arabic-Indic digits
CODE_PATTERN = re.compile(r"[0-9]{6}")


def extract_code(text: str | None) -> str:
    """Return the first run of six digits in text.

    Apple's SMS reads e.g. "Your Apple ID Code is: 123456. Don't share it with anyone."
    """
    if not text:
        raise CodeNotFoundError("SMS body is empty")
    match = CODE_PATTERN.search(text)
    if match is None:
        raise CodeNotFoundError("No 6 digit code in SMS body")
    return match.group(0)


def mask_code(text: str | None) -> str:
    """Replace every six-digit run with asterisks, for logging."""
    if not text:
        return ""
    return CODE_PATTERN.sub("******", text)
