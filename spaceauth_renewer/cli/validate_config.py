"""Validate settings: print a summary table, fail when required variables are missing."""

from rich.table import Table

from spaceauth_renewer import config

from .shared import console, logger

SECRET_SETTINGS = {"FASTLANE_PASSWORD"}


def _display(name: str, value: object) -> str:
    if value in (None, ""):
        return "[red](unset)[/red]"
    if name in SECRET_SETTINGS:
        return "********"
    return str(value)


def validate_config() -> None:
    """Print the effective settings and check the required ones are set and numbers parse."""
    log = logger.bind(command="validate-config")
    log.info("validate_config.start")

    rows = [
        ("SQS_QUEUE_URL", config.SQS_QUEUE_URL),
        ("SECRETS_MANAGER_SECRET_ID", config.SECRETS_MANAGER_SECRET_ID),
        ("SESSION_SECRET_KEY", config.SESSION_SECRET_KEY),
        ("FASTLANE_USER", config.FASTLANE_USER),
        ("FASTLANE_PASSWORD", config.FASTLANE_PASSWORD),
        ("SPACESHIP_2FA_SMS_DEFAULT_PHONE_NUMBER", config.SMS_DEFAULT_PHONE_NUMBER),
        ("SPACEAUTH_COMMAND", config.SPACEAUTH_COMMAND),
        ("SPACEAUTH_TIMEOUT_SECONDS", config.SPACEAUTH_TIMEOUT_SECONDS),
        ("CODE_WAIT_SECONDS", config.CODE_WAIT_SECONDS),
        ("QUEUE_WAIT_TIME_SECONDS", config.QUEUE_WAIT_TIME_SECONDS),
        ("QUEUE_VISIBILITY_TIMEOUT", config.QUEUE_VISIBILITY_TIMEOUT),
        ("STALE_MESSAGE_GRACE_SECONDS", config.STALE_MESSAGE_GRACE_SECONDS),
        ("AWS_REGION", config.AWS_REGION),
    ]

    table = Table(title="spaceauth-renewer settings")
    table.add_column("Variable", style="cyan")
    table.add_column("Value")
    for name, value in rows:
        table.add_row(name, _display(name, value))
    console.print(table)

    missing = config.missing_settings()
    if missing:
        console.print(f"[red]Missing environment variables: {', '.join(missing)}[/red]")
        log.error("validate_config.missing", missing=missing)
        raise SystemExit(1)
    invalid = config.invalid_settings()
    if invalid:
        console.print(f"[red]Environment variables are not numbers: {', '.join(invalid)}[/red]")
        log.error("validate_config.invalid", invalid=invalid)
        raise SystemExit(1)
    if not config.SMS_DEFAULT_PHONE_NUMBER:
        console.print(
            "[yellow]SPACESHIP_2FA_SMS_DEFAULT_PHONE_NUMBER is unset; "
            "spaceauth will ask which phone to use and the run will abort[/yellow]"
        )
    console.print("[green]Config valid.[/green]")
    log.info("validate_config.ok")
