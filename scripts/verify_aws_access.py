"""
Verify the AWS side of the renewal: the Lambda role (or your local profile) can read
and write the session secret and use the SMS queue.

Nothing is modified: the secret is read but not written, and queue messages are not
received.

Usage:
    uv run python scripts/verify_aws_access.py

Required environment variables in .env:
    SQS_QUEUE_URL=https://sqs.<region>.amazonaws.com/<account>/<queue>
    SECRETS_MANAGER_SECRET_ID=fastlane/session
"""

import json
import os
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv


def print_header(text: str) -> None:
    """Print a formatted header."""
    print(f"\n{'='*60}")
    print(f"  {text}")
    print(f"{'='*60}\n")


def print_success(text: str) -> None:
    print(f"[OK] {text}")


def print_error(text: str) -> None:
    print(f"[ERROR] {text}")


def print_info(text: str) -> None:
    print(f"[INFO] {text}")


def verify_secret(secret_id: str, session_key: str) -> bool:
    import boto3
    from botocore.exceptions import BotoCoreError, ClientError

    print_header("Secrets Manager")
    client = boto3.client("secretsmanager")
    try:
        response = client.get_secret_value(SecretId=secret_id)
    except (BotoCoreError, ClientError) as e:
        print_error(f"Cannot read secret {secret_id}: {e}")
        return False
    print_success(f"Read secret {response.get('ARN')}")

    try:
        values = json.loads(response.get("SecretString") or "")
    except ValueError:
        print_error("SecretString is not JSON; store a JSON object like {\"FASTLANE_SESSION\": \"\"}")
        return False
    if not isinstance(values, dict):
        print_error("SecretString is not a JSON object")
        return False
    if session_key in values:
        print_success(f"Key {session_key} present ({len(values[session_key] or '')} chars)")
    else:
        print_info(f"Key {session_key} not present yet; the first run will add it")
    return True


def verify_queue(queue_url: str) -> bool:
    import boto3
    from botocore.exceptions import BotoCoreError, ClientError

    print_header("SQS")
    client = boto3.client("sqs")
    try:
        attrs = client.get_queue_attributes(
            QueueUrl=queue_url,
            AttributeNames=["ApproximateNumberOfMessages", "VisibilityTimeout", "Policy"],
        )["Attributes"]
    except (BotoCoreError, ClientError) as e:
        print_error(f"Cannot read queue attributes: {e}")
        return False
    print_success(f"Queue reachable: {queue_url}")
    print(f"    Messages waiting: {attrs.get('ApproximateNumberOfMessages')}")
    print(f"    Visibility timeout: {attrs.get('VisibilityTimeout')}s")
    if "sns.amazonaws.com" not in attrs.get("Policy", ""):
        print_info("Queue policy does not mention sns.amazonaws.com; check the SNS subscription can deliver")
    if attrs.get("ApproximateNumberOfMessages", "0") != "0":
        print_info("Old messages are waiting; the next run deletes stale ones before reading a code")
    return True


def main() -> int:
    load_dotenv()
    print_header("spaceauth-renewer AWS access check")

    secret_id = os.getenv("SECRETS_MANAGER_SECRET_ID")
    queue_url = os.getenv("SQS_QUEUE_URL")
    missing = [
        name
        for name, value in (("SECRETS_MANAGER_SECRET_ID", secret_id), ("SQS_QUEUE_URL", queue_url))
        if not value
    ]
    if missing:
        print_error(f"Missing environment variables: {', '.join(missing)}")
        return 1

    ok = verify_secret(secret_id, os.getenv("SESSION_SECRET_KEY", "FASTLANE_SESSION"))
    ok = verify_queue(queue_url) and ok

    print_header("Verification Complete" if ok else "Verification Failed")
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
