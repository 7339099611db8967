"""Renewal run: load the saved session, refresh it through the auth flow, save it if it changed."""

from datetime import datetime

from spaceauth_renewer.auth_flow.protocol import AuthFlow
from spaceauth_renewer.errors import AuthFlowError
from spaceauth_renewer.models import RenewalResult
from spaceauth_renewer.secret_store.protocol import SecretStore
from spaceauth_renewer.two_factor import CodeAcquirer
from spaceauth_renewer.utils.logger import get_logger, session_fingerprint

logger = get_logger("spaceauth_renewer.renewal")


def renew_session(store: SecretStore, flow: AuthFlow, acquirer: CodeAcquirer) -> RenewalResult:
    """Run one renewal. The store is written only when the session changed."""
    previous = store.get_session()
    log = logger.bind(previous_session=session_fingerprint(previous))
    log.info("renewal.start", has_previous_session=bool(previous))

    codes_requested = 0

    def provide_code(requested_at: datetime) -> str:
        nonlocal codes_requested
        codes_requested += 1
        log.info("renewal.two_factor_required", attempt=codes_requested)
        return acquirer.acquire(requested_at)

    session = flow.run(previous, provide_code)
    if not session:
        raise AuthFlowError("Auth flow returned an empty session")

    updated = session != previous
    if updated:
        store.put_session(session)
        log.info("renewal.session_updated", session=session_fingerprint(session))
    else:
        log.info("renewal.session_still_valid")

    return RenewalResult(session=session, updated=updated, used_two_factor=codes_requested > 0)
