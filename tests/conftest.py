"""Shared pytest fixtures for opgate tests."""

from collections.abc import AsyncIterator, Callable, Iterable

import httpx
import pytest

from opgate.config.schema import ClientOptions

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def options() -> ClientOptions:
    """Options pointing at a fake gateway with a token configured."""
    return ClientOptions(url="http://gateway.test/", token="app-hash")


@pytest.fixture
def recorded() -> list[httpx.Request]:
    """Requests seen by the mock transport."""
    return []


@pytest.fixture
def mock_transport(recorded: list[httpx.Request]) -> Callable[[Handler], httpx.MockTransport]:
    """Build a MockTransport that records every request before handling it."""

    def factory(handler: Handler) -> httpx.MockTransport:
        def recording_handler(request: httpx.Request) -> httpx.Response:
            recorded.append(request)
            return handler(request)

        return httpx.MockTransport(recording_handler)

    return factory


@pytest.fixture
def chunked() -> Callable[..., AsyncIterator[bytes]]:
    """Build an async response body that yields each chunk separately.

    If fail_with is given, it is raised after the last chunk.
    """

    def factory(
        chunks: Iterable[bytes], fail_with: Exception | None = None
    ) -> AsyncIterator[bytes]:
        async def body() -> AsyncIterator[bytes]:
            for chunk in chunks:
                yield chunk
            if fail_with is not None:
                raise fail_with

        return body()

    return factory
