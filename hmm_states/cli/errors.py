"""
Error handling for CLI commands.

Maps library exceptions to exit codes and renders them with suggestions.
"""

import sys
import traceback
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from ..exceptions import (
    EvaluationError,
    ExperimentDataError,
    HMMStatesError,
    ModelFormatError,
    ModelValidationError
)
from ..logger import get_logger

console = Console()
logger = get_logger(__name__)


# Exit codes for different error types
EXIT_CODES = {
    "success": 0,
    "general_error": 1,
    "invalid_usage": 2,
    "data_error": 10,
    "model_error": 11,
    "evaluation_error": 12,
    "config_error": 13
}


class HMMStatesCLIError(Exception):
    """Base exception for CLI-specific errors."""

    def __init__(self, message: str, exit_code: int = 1, suggestions: Optional[list] = None):
        self.message = message
        self.exit_code = exit_code
        self.suggestions = suggestions or []
        super().__init__(message)


class ConfigurationError(HMMStatesCLIError):
    """Configuration errors."""

    def __init__(self, message: str, suggestions: Optional[list] = None):
        super().__init__(message, EXIT_CODES["config_error"], suggestions)


def _library_error_details(error: Exception) -> tuple:
    """Exit code and suggestions for errors raised by the library."""
    if isinstance(error, (ModelFormatError, ModelValidationError)):
        return EXIT_CODES["model_error"], [
            "Check the state count matches the number of listed state names",
            "The first state is the begin state and the last one the end state",
            "Transitions into the begin state or out of the end state are not allowed"
        ]
    if isinstance(error, ExperimentDataError):
        return EXIT_CODES["data_error"], [
            "Time steps must start at 0 and increase by 1",
            "State names must match the ones declared in the model file",
            "Symbols must be single letters inside the model alphabet"
        ]
    if isinstance(error, EvaluationError):
        return EXIT_CODES["evaluation_error"], [
            "Check the output directory is writable"
        ]
    return EXIT_CODES["general_error"], []


def format_error_message(error: Exception, operation: str, debug: bool = False,
                         suggestions: Optional[list] = None) -> str:
    """Format error message with context and suggestions."""
    error_type = type(error).__name__

    message_parts = [
        f"[red]Error during {operation}:[/red]",
        f"[red]{error_type}: {escape(str(error))}[/red]"
    ]

    if suggestions:
        message_parts.append("")
        message_parts.append("[yellow]Suggestions:[/yellow]")
        for suggestion in suggestions:
            message_parts.append(f"  • {escape(suggestion)}")

    if debug:
        message_parts.append("")
        message_parts.append("[dim]Debug information:[/dim]")
        message_parts.append(f"[dim]{escape(traceback.format_exc())}[/dim]")

    return "\n".join(message_parts)


def handle_cli_error(error: Exception, operation: str, debug: bool = False) -> None:
    """Handle CLI errors with rich formatting and exit with a mapped code."""
    if isinstance(error, HMMStatesCLIError):
        exit_code = error.exit_code
        suggestions = error.suggestions
    elif isinstance(error, HMMStatesError):
        exit_code, suggestions = _library_error_details(error)
    else:
        exit_code, suggestions = EXIT_CODES["general_error"], []

    console.print(format_error_message(error, operation, debug, suggestions))
    console.print(f"\n[dim]For more help, run: hmm-states {operation.split()[0]} --help[/dim]")

    logger.error(f"CLI error in {operation}: {error}", exc_info=debug)

    raise typer.Exit(exit_code)


def check_system_requirements() -> Dict[str, Any]:
    """Check system requirements and return status."""
    requirements = {
        "python_version": {
            "required": "3.8+",
            "current": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
            "satisfied": sys.version_info >= (3, 8)
        }
    }

    for package in ["numpy", "typer", "rich"]:
        try:
            __import__(package)
            requirements[package] = {"installed": True}
        except ImportError:
            requirements[package] = {
                "installed": False,
                "install_command": f"pip install {package}"
            }

    return requirements


def display_system_info() -> None:
    """Display system information and requirements status."""
    requirements = check_system_requirements()

    console.print(Panel.fit(
        "[bold]System Information[/bold]",
        border_style="blue"
    ))

    python_req = requirements["python_version"]
    status = "[green]✓[/green]" if python_req["satisfied"] else "[red]✗[/red]"
    console.print(f"Python: {status} {python_req['current']} (required: {python_req['required']})")

    console.print("\n[bold]Package Status:[/bold]")
    for package, info in requirements.items():
        if package == "python_version":
            continue

        if info["installed"]:
            console.print(f"  [green]✓[/green] {package}")
        else:
            console.print(f"  [red]✗[/red] {package} - Install with: {info['install_command']}")


def validate_file_exists(path: Path, file_type: str = "file") -> Path:
    """Validate that an input file exists with helpful error messages."""
    if not path.exists():
        suggestions = []

        if path.parent.exists():
            similar_files = [
                item.name for item in path.parent.iterdir()
                if item.name.lower().startswith(path.stem.lower()[:3])
            ]
            if similar_files:
                suggestions.append(f"Did you mean one of: {', '.join(sorted(similar_files)[:3])}")

        raise HMMStatesCLIError(
            f"{file_type.capitalize()} not found: {path}",
            exit_code=EXIT_CODES["invalid_usage"],
            suggestions=suggestions
        )

    return path
