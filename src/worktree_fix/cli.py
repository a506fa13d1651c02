"""CLI entry points for bash-worktree-fix.

``bash-worktree-fix`` is the filter a host runs before each shell command: it
prints the command to execute, rewritten to start from the worktree root when
needed. ``worktree-fix`` groups the same filter with diagnostic commands.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Mapping, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from worktree_fix.config import HookConfig, load_config
from worktree_fix.core.locator import WorktreeLocator
from worktree_fix.core.rewriter import Rewriter
from worktree_fix.models.worktree_info import StepKind

console = Console()
logger = logging.getLogger(__name__)

DEBUG_PREFIX = "DEBUG [bash-worktree-fix]: "

PASSTHROUGH_SETTINGS = {
    "ignore_unknown_options": True,
    "allow_interspersed_args": False,
}


def configure_logging(debug: bool) -> logging.Logger:
    """
    Route package log records to stderr.

    Stdout carries the rewritten command and nothing else, so the handler
    writes to stderr and propagation to the root logger is turned off.

    Args:
        debug: Emit trace lines when True.

    Returns:
        The configured package logger.
    """
    package_logger = logging.getLogger("worktree_fix")

    for handler in list(package_logger.handlers):
        if getattr(handler, "_worktree_fix_handler", False):
            package_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(f"{DEBUG_PREFIX}%(message)s"))
    handler._worktree_fix_handler = True  # type: ignore[attr-defined]

    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    package_logger.propagate = False
    return package_logger


def current_directory(environ: Optional[Mapping[str, str]] = None) -> Path:
    """
    Get the working directory the way the shell reports it.

    The logical ``$PWD`` (which keeps symlinked path components) is used
    when it names the same directory as the process cwd.

    Raises:
        OSError: If the process cwd cannot be determined.
    """
    environ = os.environ if environ is None else environ
    physical = os.getcwd()
    logical = environ.get("PWD")

    if logical and os.path.isabs(logical):
        try:
            if os.path.samefile(logical, physical):
                return Path(logical)
        except OSError:
            pass

    return Path(physical)


def resolve_config(config_path: Optional[str], debug: Optional[bool]) -> HookConfig:
    """Load configuration, letting an explicit --debug/--no-debug win."""
    config = load_config(config_path)
    if debug is not None:
        config = config.model_copy(update={"debug": debug})
    return config


@click.command("rewrite", context_settings=PASSTHROUGH_SETTINGS)
@click.option(
    "--cwd",
    "cwd",
    type=click.Path(path_type=Path),
    help="Directory the command will be issued from (default: current directory).",
)
@click.option(
    "--debug/--no-debug",
    default=None,
    help="Write trace lines to stderr (default: $CLAUDE_HOOK_DEBUG).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="Path to a TOML config file.",
)
@click.argument("command_args", nargs=-1, type=click.UNPROCESSED)
def rewrite_command(
    cwd: Optional[Path],
    debug: Optional[bool],
    config_path: Optional[str],
    command_args: tuple[str, ...],
) -> None:
    """Print COMMAND, prefixed with a cd into the worktree root if needed.

    The words of COMMAND are joined with single spaces and otherwise left
    exactly as given. Always exits 0; on any problem the command is printed
    unchanged.

    Example:
        bash-worktree-fix pytest tests/ -v
        CLAUDE_HOOK_DEBUG=1 bash-worktree-fix make build
    """
    command = " ".join(command_args)

    # color=True keeps ANSI escapes in the command when stdout is not a tty.

    try:
        config = resolve_config(config_path, debug)
        configure_logging(config.debug)

        if cwd is None:
            try:
                cwd = current_directory()
            except OSError as e:
                logger.debug(f"Cannot determine working directory: {e}")
                click.echo(command, color=True)
                return

        click.echo(Rewriter(config).rewrite(cwd.absolute(), command), color=True)

    except Exception as e:
        logger.debug(f"Unexpected failure ({e}), passing through unchanged")
        click.echo(command, color=True)


@click.group()
@click.version_option(package_name="bash-worktree-fix")
def main() -> None:
    """bash-worktree-fix - run shell commands from the enclosing git worktree.

    Inspect worktree detection and command rewriting.
    """


main.add_command(rewrite_command)


@main.command("locate")
@click.argument(
    "path",
    required=False,
    type=click.Path(path_type=Path),
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Show every directory examined during the walk.",
)
def locate_worktree(path: Optional[Path], verbose: bool) -> None:
    """Print the root of the linked worktree containing PATH.

    PATH defaults to the current directory. Exits 1 when PATH is not inside
    a linked worktree.

    Example:
        worktree-fix locate
        worktree-fix locate ../proj-feature/src --verbose
    """
    try:
        start = path.absolute() if path else current_directory()
    except OSError as e:
        raise click.ClickException(f"Cannot determine working directory: {e}") from e

    result = WorktreeLocator().locate(start)

    if verbose:
        step_styles = {
            StepKind.CONTINUE: "dim",
            StepKind.FOUND: "green",
            StepKind.NOT_A_WORKTREE: "yellow",
        }

        table = Table(title="Worktree Detection", show_header=True, header_style="bold cyan")
        table.add_column("Directory", style="bold")
        table.add_column("Result", justify="center")
        table.add_column("Reason")

        for walk_step in result.steps:
            style = step_styles[walk_step.kind]
            table.add_row(
                escape(str(walk_step.directory)),
                f"[{style}]{walk_step.kind.value}[/{style}]",
                escape(walk_step.reason),
            )

        console.print()
        console.print(table)
        console.print()

    if not result.is_worktree:
        if verbose:
            console.print("[yellow]Not inside a linked worktree.[/yellow]")
        raise SystemExit(1)

    click.echo(result.worktree_root, color=True)


@main.command("explain", context_settings=PASSTHROUGH_SETTINGS)
@click.option(
    "--cwd",
    "cwd",
    type=click.Path(path_type=Path),
    help="Directory the command will be issued from (default: current directory).",
)
@click.argument("command_args", nargs=-1, type=click.UNPROCESSED)
def explain_command(cwd: Optional[Path], command_args: tuple[str, ...]) -> None:
    """Show how COMMAND would be rewritten, and why.

    Example:
        worktree-fix explain pytest tests/ -v
        worktree-fix explain --cwd ../proj-feature 'long_task &'
    """
    command = " ".join(command_args)

    try:
        start = cwd.absolute() if cwd else current_directory()
    except OSError as e:
        raise click.ClickException(f"Cannot determine working directory: {e}") from e

    result = Rewriter().rewrite_detailed(start, command)

    table = Table(title="Command Rewrite", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("Directory", escape(str(result.cwd)))
    table.add_row(
        "Worktree",
        escape(str(result.worktree_root)) if result.worktree_root else "[dim]none[/dim]",
    )
    if result.classification:
        table.add_row(
            "Decision",
            f"{result.classification.action.value} ({escape(result.classification.reason)})",
        )
    table.add_row("Backgrounded", "yes" if result.backgrounded else "no")
    table.add_row("Original", escape(result.original))
    table.add_row(
        "Result",
        f"[green]{escape(result.command)}[/green]" if result.changed else escape(result.command),
    )

    console.print()
    console.print(table)
    console.print()
