"""In-memory secret store for local dry runs and tests."""

from spaceauth_renewer.utils.logger import get_logger, session_fingerprint

logger = get_logger("spaceauth_renewer.secret_store.memory")


class InMemorySecretStore:
    """Holds the session in a dict shaped like the real secret's JSON."""

    def __init__(self, session: str = "", session_key: str = "FASTLANE_SESSION", **extra: str):
        self._session_key = session_key
        self.values: dict[str, str] = {**extra}
        if session:
            self.values[session_key] = session
        self.put_count = 0

    def get_session(self) -> str:
        return self.values.get(self._session_key, "")

    def put_session(self, session: str) -> None:
        self.values[self._session_key] = session
        self.put_count += 1
        logger.info("memory_secret_store.put", session=session_fingerprint(session))
