"""AWS Secrets Manager secret store (boto3).

The secret is a JSON object; the session lives under one key (FASTLANE_SESSION by
default) next to whatever else the secret holds.
"""

import json
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from spaceauth_renewer.errors import SecretStoreError
from spaceauth_renewer.utils.logger import get_logger, session_fingerprint

logger = get_logger("spaceauth_renewer.secret_store.secrets_manager")


class SecretsManagerStore:
    """Reads and writes the session key of a JSON secret in Secrets Manager."""

    def __init__(
        self,
        secret_id: str,
        session_key: str = "FASTLANE_SESSION",
        client: Any = None,
        region_name: str | None = None,
    ):
        if not secret_id:
            raise ValueError("secret_id is required")
        self._secret_id = secret_id
        self._session_key = session_key
        self._client = client or boto3.client("secretsmanager", region_name=region_name)

    def _read(self) -> tuple[str, dict[str, Any]]:
        """Return (ARN, decoded secret object)."""
        try:
            response = self._client.get_secret_value(SecretId=self._secret_id)
        except (BotoCoreError, ClientError) as e:
            logger.error("secrets_manager.get.error", secret_id=self._secret_id, error=str(e))
            raise SecretStoreError(f"Cannot read secret {self._secret_id}: {e}") from e

        raw = response.get("SecretString")
        if raw is None:
            raise SecretStoreError(f"Secret {self._secret_id} has no SecretString")
        try:
            values = json.loads(raw)
        except ValueError as e:
            raise SecretStoreError(f"Secret {self._secret_id} is not valid JSON") from e
        if not isinstance(values, dict):
            raise SecretStoreError(f"Secret {self._secret_id} is not a JSON object")
        return response.get("ARN") or self._secret_id, values

    def get_session(self) -> str:
        _, values = self._read()
        session = values.get(self._session_key) or ""
        if not isinstance(session, str):
            raise SecretStoreError(f"Secret key {self._session_key} is not a string")
        logger.info(
            "secrets_manager.get",
            secret_id=self._secret_id,
            session=session_fingerprint(session),
        )
        return session

    def put_session(self, session: str) -> None:
        arn, values = self._read()
        values[self._session_key] = session
        try:
            self._client.put_secret_value(
                SecretId=arn,
                SecretString=json.dumps(values),
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("secrets_manager.put.error", secret_id=self._secret_id, error=str(e))
            raise SecretStoreError(f"Cannot write secret {self._secret_id}: {e}") from e
        logger.info(
            "secrets_manager.put",
            secret_id=self._secret_id,
            session=session_fingerprint(session),
        )
