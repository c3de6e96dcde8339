"""Argument parsing for the opgate CLI."""

import argparse
from pathlib import Path

UNARY_COMMANDS = ("query", "mutate")
STREAM_COMMANDS = ("subscribe", "live")


def add_connection_args(parser: argparse.ArgumentParser) -> None:
    """Add --url, --token and --config arguments to a parser."""
    parser.add_argument(
        "--url",
        help="Gateway base URL (overrides config and $OPGATE_URL)",
    )
    parser.add_argument(
        "--token",
        help="Token forwarded as a query parameter (overrides $OPGATE_TOKEN)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a JSON config file (default: ./.opgate/config.json if present)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="opgate",
        description="Invoke gateway operations and print JSON results",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging to stderr",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name in UNARY_COMMANDS:
        sub = subparsers.add_parser(name, help=f"Run a {name} operation")
        sub.add_argument("subpath", help="Operation path, e.g. Users/Get")
        sub.add_argument(
            "--input", "-i",
            default="{}",
            help="Operation input as JSON (default: {})",
        )
        add_connection_args(sub)

    for name in STREAM_COMMANDS:
        sub = subparsers.add_parser(
            name,
            help="Open a subscription" if name == "subscribe" else "Open a live query",
        )
        sub.add_argument("subpath", help="Operation path, e.g. Users/Watch")
        sub.add_argument(
            "--input", "-i",
            default="{}",
            help="Operation input as JSON (default: {})",
        )
        sub.add_argument(
            "--limit", "-n",
            type=int,
            default=None,
            help="Stop after this many items",
        )
        add_connection_args(sub)

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)
