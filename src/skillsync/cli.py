"""
Main CLI for skillsync using Click.

Commands:
    init  Create .skillsrc interactively
    sync  Reconcile versions, fetch skills and write every tool directory
"""

import os
import sys
from pathlib import Path
from typing import Callable

import click
from pydantic import ValidationError

from . import __version__
from .config.loader import load_settings
from .config.schema import ToolSettings
from .errors import ConfigurationInvalid, ConfigurationMissing
from .init import Initializer
from .logging import configure_logging
from .prompts import ClickPrompter, NoTTYError
from .registry.client import RegistryClient
from .sync import SyncEngine

# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILED = 1
EXIT_CONFIG_ERROR = 3
EXIT_INTERRUPTED = 130


def _logging_options(func: Callable) -> Callable:
    """Shared -v/--quiet/--log-file options."""
    options = [
        click.option("-v", "--verbose", count=True, help="Technical logs: -v info, -vv debug"),
        click.option("--quiet", is_flag=True, help="Silence status output"),
        click.option(
            "--log-file",
            type=click.Path(dir_okay=False, path_type=Path),
            default=None,
            help="Write a JSON log of the run to this file",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _setup(verbose: int, quiet: bool, log_file: Path | None) -> ToolSettings:
    """Resolve settings and configure logging. Exits on invalid settings."""
    try:
        settings = load_settings({"verbose": verbose, "log_file": log_file})
    except ValidationError as e:
        click.echo(f"Invalid settings: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    configure_logging(settings.logging, quiet=quiet)
    return settings


def _error(message: str) -> None:
    click.echo(click.style(message, fg="red"), err=True)


@click.group()
@click.version_option(version=__version__, prog_name="agent-skills")
def main() -> None:
    """agent-skills - Manage and sync AI agent skills.

    Keeps the skills of Cursor, Claude Code, Copilot and other coding
    assistants in sync with a curated GitHub registry.
    """
    pass


@main.command("init")
@_logging_options
def init_cmd(verbose: int, quiet: bool, log_file: Path | None) -> None:
    """Initialize a .skillsrc configuration file interactively."""
    settings = _setup(verbose, quiet, log_file)

    try:
        with RegistryClient(settings.registry) as client:
            config = Initializer(os.getcwd(), ClickPrompter(), client).run()
    except NoTTYError as e:
        _error(f"Error: {e}")
        click.echo("Run `agent-skills init` from an interactive terminal.", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    except KeyboardInterrupt:
        click.echo("\nInterrupted.", err=True)
        sys.exit(EXIT_INTERRUPTED)

    if config is None:
        return

    click.echo(click.style("\nNext step: Run `agent-skills sync` to install the skills.", fg="cyan"))


@main.command("sync")
@_logging_options
def sync_cmd(verbose: int, quiet: bool, log_file: Path | None) -> None:
    """Sync skills to AI agent skill directories."""
    settings = _setup(verbose, quiet, log_file)

    engine = SyncEngine(os.getcwd(), ClickPrompter(), settings)
    try:
        report = engine.run()
    except ConfigurationMissing as e:
        _error(f"Error: {e}")
        click.echo(click.style("Run `agent-skills init` first.", fg="yellow"), err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    except ConfigurationInvalid as e:
        _error(f"Configuration error: {e}")
        sys.exit(EXIT_CONFIG_ERROR)
    except KeyboardInterrupt:
        click.echo("\nInterrupted.", err=True)
        sys.exit(EXIT_INTERRUPTED)
    except Exception as e:
        _error(f"Failed to sync skills: {e}")
        if verbose > 1:
            import traceback
            traceback.print_exc()
        sys.exit(EXIT_FAILED)

    if quiet:
        return
    click.echo(
        f"{len(report.skills)} skill(s), {len(report.write.written)} file(s) written"
        + (f", {len(report.write.overridden)} overridden" if report.write.overridden else ""),
        err=True,
    )


if __name__ == "__main__":
    main()
