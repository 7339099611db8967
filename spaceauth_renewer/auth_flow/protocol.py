"""Auth flow protocol: an interactive login that may ask for a verification code."""

from datetime import datetime
from typing import Callable, Protocol

# Called with the time the code was requested; returns the six-digit code.
CodeProvider = Callable[[datetime], str]


class AuthFlow(Protocol):
    """Establishes or refreshes a session, asking code_provider when 2FA is required."""

    def run(self, previous_session: str, code_provider: CodeProvider) -> str:
        """Return the resulting session string (may equal previous_session)."""
        ...
