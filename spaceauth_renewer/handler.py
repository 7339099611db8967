"""AWS Lambda entry point (scheduled by an EventBridge rule)."""

from typing import Any

from spaceauth_renewer import config
from spaceauth_renewer.auth_flow.spaceauth import SpaceauthFlow
from spaceauth_renewer.errors import ConfigurationError, RenewalError
from spaceauth_renewer.renewal import renew_session
from spaceauth_renewer.secret_store.secrets_manager import SecretsManagerStore
from spaceauth_renewer.sms_queue.sqs import SqsMessageQueue
from spaceauth_renewer.two_factor import CodeAcquirer
from spaceauth_renewer.utils.logger import bind_context, clear_context, get_logger

logger = get_logger("spaceauth_renewer.handler")


def build_collaborators() -> tuple[SecretsManagerStore, SpaceauthFlow, CodeAcquirer]:
    """Wire the boto3-backed store and queue and the spaceauth driver from settings."""
    missing = config.missing_settings()
    if missing:
        raise ConfigurationError(f"Missing environment variables: {', '.join(missing)}")
    invalid = config.invalid_settings()
    if invalid:
        raise ConfigurationError(f"Environment variables are not numbers: {', '.join(invalid)}")
    store = SecretsManagerStore(
        secret_id=config.SECRETS_MANAGER_SECRET_ID,
        session_key=config.SESSION_SECRET_KEY,
        region_name=config.AWS_REGION,
    )
    queue = SqsMessageQueue(queue_url=config.SQS_QUEUE_URL, region_name=config.AWS_REGION)
    acquirer = CodeAcquirer(queue)
    flow = SpaceauthFlow()
    return store, flow, acquirer


def lambda_handler(event: dict[str, Any] | None, context: Any) -> dict[str, Any]:
    request_id = getattr(context, "aws_request_id", None)
    bind_context(request_id=request_id)
    log = logger.bind(source=(event or {}).get("source"))
    log.info("handler.start")
    try:
        store, flow, acquirer = build_collaborators()
        result = renew_session(store, flow, acquirer)
        log.info("handler.done", updated=result.updated, used_two_factor=result.used_two_factor)
    except RenewalError as e:
        log.error(
            "handler.failed",
            error=str(e),
            error_type=type(e).__name__,
            transcript_tail=getattr(e, "transcript_tail", None) or None,
        )
        raise
    except Exception:
        log.exception("handler.crashed")
        raise
    finally:
        clear_context()

    return result.to_response(config.SESSION_SECRET_KEY)
