"""CLI commands wrapping OperationsClient.

Each function prints JSON results to stdout and returns an exit code:
    opgate query Users/Get -i '{"id": 1}'
    opgate mutate Users/Rename -i '{"id": 1, "name": "Ada"}'
    opgate subscribe Users/Watch -i '{"id": 1}' --limit 10
    opgate live Users/Get -i '{"id": 1}'
"""

from typing import Any

import httpx

from opgate.cli.output import print_error, print_json
from opgate.client import OperationsClient
from opgate.config.schema import ClientOptions
from opgate.core.errors import ConfigError, OpgateError, ResponseError


def describe_error(error: OpgateError) -> str:
    """One-line description of an error for the terminal."""
    if isinstance(error, ResponseError) and error.code:
        return f"{error.message} (code: {error.code})"
    return error.message


def _build_client(
    options: ClientOptions, transport: httpx.AsyncBaseTransport | None
) -> OperationsClient | None:
    try:
        return OperationsClient(options, transport=transport)
    except ConfigError as e:
        print_error(e.message)
        return None


async def cmd_unary(
    command: str,
    subpath: str,
    variables: Any,
    options: ClientOptions,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    """Run a query or mutation and print the payload."""
    client = _build_client(options, transport)
    if client is None:
        return 1

    async with client:
        try:
            if command == "query":
                result = await client.query(subpath, variables)
            else:
                result = await client.mutate(subpath, variables)
        except OpgateError as e:
            print_error(describe_error(e))
            return 1

    print_json(result)
    return 0


async def cmd_stream(
    command: str,
    subpath: str,
    variables: Any,
    options: ClientOptions,
    limit: int | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    """Open a subscription or live query and print items as they arrive.

    Failed items are reported on stderr without stopping the stream.
    Returns 1 if the stream could not be opened or any item failed.
    """
    client = _build_client(options, transport)
    if client is None:
        return 1

    failures = 0
    async with client:
        open_stream = client.subscribe if command == "subscribe" else client.live_query
        try:
            stream = await open_stream(subpath, variables)
        except OpgateError as e:
            print_error(describe_error(e))
            return 1

        count = 0
        async with stream:
            async for item in stream:
                count += 1
                if item.error is not None:
                    failures += 1
                    print_error(describe_error(item.error))
                else:
                    print_json(item.value, compact=True)
                if limit is not None and count >= limit:
                    break

    return 1 if failures else 0
