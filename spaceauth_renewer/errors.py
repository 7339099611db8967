"""Exceptions raised by the renewal run."""


class RenewalError(Exception):
    """Base class for all renewal failures."""


class ConfigurationError(RenewalError):
    """Required settings are missing or invalid."""


class SecretStoreError(RenewalError):
    """The session secret could not be read or written."""


class QueueError(RenewalError):
    """The SMS queue could not be read or a message could not be deleted."""


class CodeNotFoundError(RenewalError):
    """No usable verification code arrived in time."""


class MalformedSmsError(RenewalError):
    """A queue message is not an SNS-wrapped SMS notification."""


class AuthFlowError(RenewalError):
    """The spaceauth process failed, timed out, or printed no session."""

    def __init__(self, message: str, transcript_tail: str = ""):
        super().__init__(message)
        self.transcript_tail = transcript_tail


class UnexpectedPromptError(AuthFlowError):
    """The spaceauth process asked for input we do not know how to answer."""
