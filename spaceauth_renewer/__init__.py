"""Renew a fastlane (App Store Connect) session, answering SMS two-factor prompts from an SQS queue."""

__version__ = "0.1.0"
