"""Command-line interface."""

from opgate.cli.main import main

__all__ = ["main"]
