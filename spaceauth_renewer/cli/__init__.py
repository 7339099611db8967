"""CLI commands: one module per command (renew, fetch-code, validate-config)."""

from typer import Typer

from spaceauth_renewer.cli import fetch_code, renew, validate_config as validate_config_module

app = Typer(help="fastlane session renewal with SMS two-factor codes from SQS")


def register_commands() -> None:
    """Register all CLI commands on the global app."""
    app.command()(renew.renew)
    app.command(name="fetch-code")(fetch_code.fetch_code)
    app.command(name="validate-config")(validate_config_module.validate_config)


register_commands()
