"""CLI package for fsreap.

This package contains the Typer application and its display helpers.
"""

from fsreap.cli.main import app, run

__all__ = ["app", "run"]
