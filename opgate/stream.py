"""Lazy sequence of decoded results for subscriptions and live queries."""

import logging
from collections.abc import AsyncGenerator
from typing import Any, Generic, TypeVar

import httpx

from opgate.core.errors import TransportError
from opgate.core.result import Result
from opgate.rpc.protocol import decode_response

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OperationStream(Generic[T]):
    """Forward-only, non-restartable async iterator of ``Result`` items.

    One item is produced per received body chunk, in arrival order. Every
    chunk is decoded on its own against the status code captured when the
    stream was opened; a chunk that fails to decode yields a failed Result
    and the stream continues. A transport read failure yields one final
    failed Result and ends the stream.

    Each chunk is expected to hold exactly one complete JSON message; chunks
    are not reassembled, so a message split across two chunks decodes as
    two failures.

    Usage:
        async with await client.subscribe("Messages/Watch", {}) as stream:
            async for item in stream:
                if item.ok:
                    print(item.value)

    Leaving the ``async with`` block (or calling ``aclose()``) releases the
    underlying connection, whether or not the stream was exhausted.
    """

    def __init__(
        self,
        response: httpx.Response,
        result_type: Any = Any,
        subpath: str = "",
    ) -> None:
        self._response = response
        self._result_type = result_type
        self._subpath = subpath
        self._items = self._iterate()
        self._closed = False

    @property
    def status_code(self) -> int:
        """Status received with the response headers."""
        return self._response.status_code

    @property
    def closed(self) -> bool:
        return self._closed or self._response.is_closed

    def __aiter__(self) -> "OperationStream[T]":
        return self

    async def __anext__(self) -> Result[T]:
        return await self._items.__anext__()

    async def __aenter__(self) -> "OperationStream[T]":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Stop decoding and release the connection. Safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True
        await self._items.aclose()
        await self._response.aclose()
        logger.debug("Stream closed: %s", self._subpath)

    async def _iterate(self) -> AsyncGenerator[Result[T], None]:
        status_code = self._response.status_code
        try:
            async for chunk in self._response.aiter_bytes():
                yield decode_response(status_code, chunk, self._result_type, self._subpath)
        except httpx.RequestError as e:
            logger.warning("Stream read failed for %s: %s", self._subpath, e)
            error = TransportError(f"failed to read response: {e}")
            error.__cause__ = e
            yield Result.failure(error)
        finally:
            await self._response.aclose()
        logger.debug("Stream ended: %s", self._subpath)
