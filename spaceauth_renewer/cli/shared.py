"""Shared CLI helpers: console and logger."""

from rich.console import Console

from spaceauth_renewer.utils.logger import get_logger

console = Console()
logger = get_logger("spaceauth_renewer.cli")
