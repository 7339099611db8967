"""Renew command: one renewal run from the command line."""

import typer

from spaceauth_renewer import config
from spaceauth_renewer.auth_flow.spaceauth import SpaceauthFlow
from spaceauth_renewer.errors import RenewalError
from spaceauth_renewer.handler import build_collaborators
from spaceauth_renewer.renewal import renew_session
from spaceauth_renewer.secret_store.memory import InMemorySecretStore
from spaceauth_renewer.sms_queue.sqs import SqsMessageQueue
from spaceauth_renewer.two_factor import CodeAcquirer
from spaceauth_renewer.utils.logger import session_fingerprint

from .shared import console, logger


def renew(
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Keep the session in memory instead of Secrets Manager"
    ),
    session: str = typer.Option("", "--session", help="Starting session for --dry-run"),
    show_session: bool = typer.Option(False, "--show-session", help="Print the resulting session"),
) -> None:
    """Refresh the saved session, answering an SMS code prompt from the queue if asked."""
    log = logger.bind(command="renew", dry_run=dry_run)
    log.info("renew.start")

    try:
        if dry_run:
            if not config.SQS_QUEUE_URL:
                console.print("[red]SQS_QUEUE_URL is required[/red]")
                raise typer.Exit(1)
            store = InMemorySecretStore(session=session, session_key=config.SESSION_SECRET_KEY)
            acquirer = CodeAcquirer(
                SqsMessageQueue(queue_url=config.SQS_QUEUE_URL, region_name=config.AWS_REGION)
            )
            flow = SpaceauthFlow()
        else:
            store, flow, acquirer = build_collaborators()
        result = renew_session(store, flow, acquirer)
    except RenewalError as e:
        console.print(f"[red]{type(e).__name__}: {e}[/red]")
        tail = getattr(e, "transcript_tail", "")
        if tail:
            console.print(tail, markup=False, highlight=False)
        log.error("renew.fail", error=str(e))
        raise typer.Exit(1) from e

    if result.updated:
        console.print("[green]Session updated[/green]")
    else:
        console.print("[green]Session is still valid[/green]")
    console.print(f"  Fingerprint: {session_fingerprint(result.session)}")
    console.print(f"  Two-factor used: {'yes' if result.used_two_factor else 'no'}")
    if show_session:
        console.print(result.session, markup=False, highlight=False, soft_wrap=True)
    log.info("renew.ok", updated=result.updated)
