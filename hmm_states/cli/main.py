"""
Main CLI application for HMMStates.

Provides command-line interface for decoding experiment data and estimating
prediction quality.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from .. import __version__
from ..config import get_config, load_config_file
from ..logger import enable_file_logging, set_log_level
from .decode import decode_command, run_command
from .errors import (
    EXIT_CODES,
    ConfigurationError,
    display_system_info,
    handle_cli_error
)

console = Console()

app = typer.Typer(
    name="hmm-states",
    help="Hidden state decoding and prediction estimation for discrete Hidden Markov Models",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True
)

app.command("run")(run_command)
app.command("decode")(decode_command)


@app.command("info")
def system_info():
    """Display system information and requirements status."""
    display_system_info()


@app.command("version")
def show_version():
    """Show HMMStates version information."""
    console.print(Panel.fit(
        f"[bold]HMMStates Version {__version__}[/bold]\n"
        f"Viterbi and Forward-Backward decoding for discrete HMMs\n"
        f"Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        border_style="blue"
    ))


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging and debug information"
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress all log output except errors"
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode with detailed error traces"
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to JSON configuration file",
        exists=True,
        file_okay=True,
        dir_okay=False
    )
):
    """
    HMMStates: hidden state decoding for discrete Hidden Markov Models

    \b
    Quick Start:
    1. Score both algorithms:  hmm-states run <model> <data>
    2. Inspect Viterbi path:   hmm-states decode <model> <data>
    """
    ctx.obj = {"verbose": verbose, "quiet": quiet, "debug": debug}

    if config_file:
        try:
            load_config_file(str(config_file))
        except ValueError as e:
            handle_cli_error(
                ConfigurationError(str(e), suggestions=["Check the file contains valid JSON"]),
                "configuration loading",
                debug
            )

    if quiet:
        set_log_level('ERROR')
    elif verbose or debug:
        set_log_level('DEBUG')
    else:
        log_level = get_config('logging', 'level') or 'INFO'
        if not isinstance(getattr(logging, str(log_level).upper(), None), int):
            handle_cli_error(
                ConfigurationError(
                    f"Invalid logging level: {log_level}",
                    suggestions=["Use one of DEBUG, INFO, WARNING, ERROR, CRITICAL"]
                ),
                "configuration loading",
                debug
            )
        set_log_level(str(log_level))

    if get_config('logging', 'file_logging'):
        enable_file_logging()


def cli_main():
    """Main entry point for CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(EXIT_CODES["general_error"])


if __name__ == "__main__":
    cli_main()
