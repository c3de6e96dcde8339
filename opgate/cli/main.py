"""Entry point for the opgate CLI."""

import asyncio
import json
import logging

from opgate.cli.arg_parser import UNARY_COMMANDS, parse_args
from opgate.cli.client_commands import cmd_stream, cmd_unary
from opgate.cli.output import print_error
from opgate.config.loader import load_options
from opgate.core.errors import ConfigError


def main(argv: list[str] | None = None) -> None:
    """Parse arguments, run the command, and exit with its status code."""
    args = parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    try:
        variables = json.loads(args.input)
    except json.JSONDecodeError as e:
        print_error(f"--input is not valid JSON: {e}")
        raise SystemExit(2) from e

    try:
        options = load_options(args.config, url=args.url, token=args.token)
    except ConfigError as e:
        print_error(e.message)
        raise SystemExit(1) from e

    try:
        if args.command in UNARY_COMMANDS:
            exit_code = asyncio.run(cmd_unary(args.command, args.subpath, variables, options))
        else:
            exit_code = asyncio.run(
                cmd_stream(args.command, args.subpath, variables, options, args.limit)
            )
    except KeyboardInterrupt:
        exit_code = 130

    raise SystemExit(exit_code)
