"""Fetch-code command: check the SMS bridge by reading one code from the queue."""

import typer

from spaceauth_renewer import config
from spaceauth_renewer.errors import CodeNotFoundError, MalformedSmsError
from spaceauth_renewer.models import SmsNotification
from spaceauth_renewer.sms_queue.sqs import SqsMessageQueue
from spaceauth_renewer.utils.sms_code import extract_code

from .shared import console, logger


def fetch_code(
    wait: int = typer.Option(20, "--wait", "-w", min=0, max=20, help="Long-poll seconds"),
    keep: bool = typer.Option(False, "--keep", help="Leave the message in the queue"),
) -> None:
    """Receive one SMS notification, print its body and code, then delete it."""
    log = logger.bind(command="fetch-code")
    if not config.SQS_QUEUE_URL:
        console.print("[red]SQS_QUEUE_URL is required[/red]")
        raise typer.Exit(1)

    queue = SqsMessageQueue(queue_url=config.SQS_QUEUE_URL, region_name=config.AWS_REGION)
    messages = queue.receive(wait, config.QUEUE_VISIBILITY_TIMEOUT)
    if not messages:
        console.print("[yellow]No message in queue[/yellow]")
        log.warning("fetch_code.empty")
        raise typer.Exit(1)

    message = messages[0]
    try:
        sms = SmsNotification.from_queue_body(message.body)
        code = extract_code(sms.messageBody)
    except (MalformedSmsError, CodeNotFoundError) as e:
        console.print(f"[red]{e}[/red]")
        console.print(message.body, markup=False, highlight=False)
        log.warning("fetch_code.unusable", message_id=message.message_id, error=str(e))
        raise typer.Exit(1) from e

    console.print(f"  From: {sms.originationNumber or '(unknown)'}")
    console.print(f"  Sent: {message.sent_at.isoformat() if message.sent_at else '(unknown)'}")
    console.print(f"  SMS: {sms.messageBody}", markup=False, highlight=False)
    console.print(f"[bold]Code: {code}[/bold]")

    if keep:
        log.info("fetch_code.kept", message_id=message.message_id)
        return
    queue.delete(message.receipt_handle)
    log.info("fetch_code.deleted", message_id=message.message_id)
