"""Secret store protocol (where the session string lives between runs)."""

from typing import Protocol


class SecretStore(Protocol):
    """Get/put access to the saved session string."""

    def get_session(self) -> str:
        """Return the saved session, or "" when none is stored."""
        ...

    def put_session(self, session: str) -> None:
        """Persist a new session, keeping any other values stored alongside it."""
        ...
