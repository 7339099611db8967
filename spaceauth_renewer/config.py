"""Configuration and settings."""

import os

from dotenv import load_dotenv

load_dotenv()

# name -> type for settings that must parse as numbers
NUMERIC_SETTINGS = {
    "SPACEAUTH_TIMEOUT_SECONDS": float,
    "CODE_WAIT_SECONDS": float,
    "QUEUE_WAIT_TIME_SECONDS": int,
    "QUEUE_VISIBILITY_TIMEOUT": int,
    "STALE_MESSAGE_GRACE_SECONDS": float,
}


def _number(name: str, default: str):
    """Parse a numeric setting; invalid values fall back to default and show up in invalid_settings()."""
    cast = NUMERIC_SETTINGS[name]
    try:
        return cast(os.getenv(name, default))
    except ValueError:
        return cast(default)


# Queue fed by the SMS-to-SNS-to-SQS bridge
SQS_QUEUE_URL = os.getenv("SQS_QUEUE_URL", "")

# Secrets Manager secret holding the session JSON
SECRETS_MANAGER_SECRET_ID = os.getenv("SECRETS_MANAGER_SECRET_ID", "")
SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY", "FASTLANE_SESSION")

# Account credentials (read by fastlane itself from the inherited environment)
FASTLANE_USER = os.getenv("FASTLANE_USER", "")
FASTLANE_PASSWORD = os.getenv("FASTLANE_PASSWORD", "")
SMS_DEFAULT_PHONE_NUMBER = os.getenv("SPACESHIP_2FA_SMS_DEFAULT_PHONE_NUMBER", "")

# Auth flow
SPACEAUTH_COMMAND = os.getenv("SPACEAUTH_COMMAND", "fastlane spaceauth")
SPACEAUTH_TIMEOUT_SECONDS = _number("SPACEAUTH_TIMEOUT_SECONDS", "300")

# Two-factor code acquisition.
# SQS caps a single long poll at 20 seconds; 0 would turn polling into a busy loop.
CODE_WAIT_SECONDS = _number("CODE_WAIT_SECONDS", "120")
QUEUE_WAIT_TIME_SECONDS = max(1, min(_number("QUEUE_WAIT_TIME_SECONDS", "20"), 20))
QUEUE_VISIBILITY_TIMEOUT = _number("QUEUE_VISIBILITY_TIMEOUT", "30")
STALE_MESSAGE_GRACE_SECONDS = _number("STALE_MESSAGE_GRACE_SECONDS", "5")

# AWS (None = boto3 default resolution chain)
AWS_REGION = os.getenv("AWS_REGION") or None

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").lower()  # "json" | "console"

REQUIRED_SETTINGS = (
    "SQS_QUEUE_URL",
    "SECRETS_MANAGER_SECRET_ID",
    "FASTLANE_USER",
    "FASTLANE_PASSWORD",
)


def missing_settings() -> list[str]:
    """Return required environment variables that are unset or empty."""
    return [name for name in REQUIRED_SETTINGS if not os.getenv(name)]


def invalid_settings() -> list[str]:
    """Return numeric environment variables whose value does not parse."""
    invalid = []
    for name, cast in NUMERIC_SETTINGS.items():
        value = os.getenv(name)
        if value is None:
            continue
        try:
            cast(value)
        except ValueError:
            invalid.append(name)
    return invalid
