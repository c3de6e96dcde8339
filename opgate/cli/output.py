"""Output helpers for the opgate CLI.

Results go to stdout as plain JSON so they can be piped; diagnostics go to
stderr through a rich console.
"""

import json
from typing import Any

from rich.console import Console
from rich.markup import escape

# Diagnostics only; stdout stays machine-readable
console = Console(stderr=True)


def print_json(data: Any, compact: bool = False) -> None:
    """Print data as JSON to stdout."""
    if compact:
        print(json.dumps(data, separators=(",", ":"), default=str), flush=True)
    else:
        print(json.dumps(data, indent=2, default=str))


def print_error(message: str) -> None:
    """Print an error message in red to stderr."""
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")

