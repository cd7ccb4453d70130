"""CLI interface for claw-hooks.

The `hook` command is what agents call: it reads one JSON event from stdin,
writes the JSON response to stdout and exits 0 (allow) or 2 (block). Every
other command is for humans and reports on stderr.
"""

import sys
from pathlib import Path

import click
from rich.markup import escape
from rich.table import Table

from claw_hooks import __version__
from claw_hooks.adapters import Format, FormatAdapter
from claw_hooks.cli_utils import console, get_config, handle_error
from claw_hooks.config import default_config_path, generate_config
from claw_hooks.errors import ClawHooksError
from claw_hooks.filters.chain import FilterChain
from claw_hooks.log import setup_logging
from claw_hooks.models import Block, Event, exit_code
from claw_hooks.parser import get_parser
from claw_hooks.service import HookService


@click.group()
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="CLAW_HOOKS_CONFIG",
    help="Config file (default: ~/.config/claw-hooks/config.toml)",
)
@click.option("--debug", is_flag=True, help="Write debug logs to the log directory")
@click.option("-q", "--quiet", is_flag=True, help="Suppress informational output")
@click.pass_context
def main(ctx: click.Context, config_path: Path | None, debug: bool, quiet: bool) -> None:
    """claw-hooks - policy gate for AI coding agent hooks.

    Blocks dangerous shell commands (rm, kill, dd, custom patterns) and runs
    formatters or notifications when files change or the agent stops.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["debug"] = debug
    ctx.obj["quiet"] = quiet
    setup_logging(debug=False, quiet=quiet)


# =============================================================================
# Hook Command
# =============================================================================


@main.command()
@click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice([f.value for f in Format]),
    default=Format.CLAUDE.value,
    show_default=True,
    help="Wire format of the calling agent",
)
@click.pass_context
def hook(ctx: click.Context, fmt: str) -> None:
    """Process one hook event from stdin (fail-closed)."""
    try:
        config = get_config(ctx)
    except ClawHooksError as e:
        adapter = FormatAdapter(fmt)
        click.echo(adapter.format_error(str(e)))
        ctx.exit(adapter.error_exit_code())

    result = HookService(config, fmt).run(sys.stdin.read())
    click.echo(result.output)
    ctx.exit(result.exit_code)


main.add_command(hook, name="run")


# =============================================================================
# Config Commands
# =============================================================================


@main.command()
@click.option(
    "-p",
    "--path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Where to write the config (default: ~/.config/claw-hooks/config.toml)",
)
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
@click.pass_context
def init(ctx: click.Context, path: Path | None, force: bool) -> None:
    """Write the default configuration file."""
    config_path = path or default_config_path()
    if config_path.exists() and not force:
        console.print(f"[yellow]Config already exists:[/yellow] {config_path}")
        console.print("[dim]Use --force to overwrite.[/dim]")
        sys.exit(1)

    try:
        generate_config(config_path)
    except ClawHooksError as e:
        handle_error(e)

    if not ctx.obj["quiet"]:
        console.print(f"[green]Configuration file created at:[/green] {config_path}")


@main.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Validate the configuration file."""
    try:
        config = get_config(ctx)
    except ClawHooksError as e:
        handle_error(e)

    if ctx.obj["quiet"]:
        return

    table = Table(title="Active Filters")
    table.add_column("Priority", style="cyan", justify="right")
    table.add_column("Filter", style="green")
    table.add_column("Enabled")
    for f in FilterChain(config).filters:
        table.add_row(str(f.priority), f.name, "yes" if getattr(f, "enabled", True) else "no")
    console.print(table)
    console.print("[green]Configuration is valid.[/green]")


@main.command()
def version() -> None:
    """Show version."""
    click.echo(f"claw-hooks {__version__}")


# =============================================================================
# Explain Command
# =============================================================================


@main.command()
@click.argument("command_line")
@click.pass_context
def explain(ctx: click.Context, command_line: str) -> None:
    """Show how COMMAND_LINE is parsed and what the filters decide."""
    try:
        config = get_config(ctx)
    except ClawHooksError as e:
        handle_error(e)

    parser = get_parser(config.parser)
    table = Table(title=f"Invocations ({config.parser} parser)")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Command", style="cyan")
    table.add_column("Arguments", style="green")
    for i, invocation in enumerate(parser.parse(command_line), 1):
        if invocation.truncated:
            table.add_row(str(i), "[red](nested too deeply)[/red]", escape(invocation.text[:60]))
        else:
            table.add_row(str(i), escape(invocation.name), escape(" ".join(invocation.args)))
    console.print(table)

    decision = FilterChain(config, parser).execute(Event.shell(command_line))
    if isinstance(decision, Block):
        console.print(f"[red]Decision: BLOCK[/red] {escape(decision.message)}")
    else:
        console.print("[green]Decision: ALLOW[/green]")
    ctx.exit(exit_code(decision))


if __name__ == "__main__":
    main()
