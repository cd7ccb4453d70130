"""Shared utilities for claw-hooks CLI commands."""

import sys

import click
from rich.console import Console
from rich.markup import escape

from claw_hooks.config import HooksConfig, load_config
from claw_hooks.errors import ClawHooksError, ConfigError, InputError
from claw_hooks.log import setup_logging

# stdout is reserved for the JSON the agent reads
console = Console(stderr=True)


def handle_error(e: Exception) -> None:
    """Handle and display errors nicely."""
    if isinstance(e, ConfigError):
        console.print(f"[red]Configuration Error:[/red] {escape(str(e))}")
        console.print("[dim]Run `claw-hooks init --force` to regenerate the default config.[/dim]")
    elif isinstance(e, InputError):
        console.print(f"[red]Input Error:[/red] {escape(str(e))}")
    elif isinstance(e, ClawHooksError):
        console.print(f"[red]Error:[/red] {escape(str(e))}")
    else:
        console.print(f"[red]Unexpected Error:[/red] {escape(str(e))}")
    sys.exit(1)


def get_config(ctx: click.Context) -> HooksConfig:
    """Load the config selected on the command line and set up logging for it.

    Raises:
        ConfigError: if the config cannot be loaded.
    """
    config = load_config(ctx.obj.get("config_path"))
    debug = ctx.obj.get("debug") or config.debug
    setup_logging(debug=debug, log_path=config.log_path, quiet=ctx.obj.get("quiet", False))
    return config
