"""Utility modules."""

from spaceauth_renewer.utils.logger import (
    bind_context,
    clear_context,
    get_logger,
    session_fingerprint,
)
from spaceauth_renewer.utils.sms_code import extract_code, mask_code

__all__ = [
    "bind_context",
    "clear_context",
    "get_logger",
    "session_fingerprint",
    "extract_code",
    "mask_code",
]
