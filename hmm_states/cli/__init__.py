"""
Command-line interface module.

Typer application for decoding and prediction estimation.
"""

from .main import app, cli_main

__all__ = [
    "app",
    "cli_main"
]
