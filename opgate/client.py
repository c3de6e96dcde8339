"""Async HTTP client for invoking gateway operations."""

import logging
from pathlib import Path
from typing import Any

import httpx

from opgate.config.loader import load_options
from opgate.config.schema import ClientOptions
from opgate.core.errors import ClientError, ConfigError, HTTPStatusError, TransportError
from opgate.rpc.protocol import decode_response, is_success_status, serialize_variables
from opgate.stream import OperationStream

logger = logging.getLogger(__name__)

_JSON_HEADERS = {"Accept": "application/json", "Content-Type": "application/json"}


class OperationsClient:
    """Async client for gateway operations (queries, mutations, subscriptions, live queries).

    The client holds no per-call state; one instance can serve many
    concurrent calls.

    Usage:
        async with OperationsClient(ClientOptions(token="abc")) as client:
            user = await client.query("Users/Get", {"id": 1})
            await client.mutate("Users/Rename", {"id": 1, "name": "Ada"})

            async with await client.subscribe("Users/Watch", {"id": 1}) as stream:
                async for item in stream:
                    print(item.unwrap())

    Unary calls return the decoded payload or raise one of ResponseError,
    HTTPStatusError, ResponseParseError, TransportError or SerializationError.
    """

    def __init__(
        self,
        options: ClientOptions | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            options: Client settings. Defaults to ClientOptions().
            transport: Optional httpx transport (e.g. httpx.MockTransport in tests).

        Raises:
            ConfigError: If the base URL cannot be parsed or joined.
        """
        self._options = options or ClientOptions()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        try:
            self._base_url = httpx.URL(self._options.url).join(self._options.operations_path)
        except httpx.InvalidURL as e:
            raise ConfigError(f"Invalid base URL {self._options.url!r}: {e}") from e

        logger.debug(
            "OperationsClient initialized: url=%s, timeout=%s",
            self._base_url,
            self._options.timeout,
        )

    @classmethod
    def from_config(cls, path: Path | None = None, **overrides: Any) -> "OperationsClient":
        """Create a client from config file and environment (see load_options)."""
        return cls(load_options(path, **overrides))

    @property
    def options(self) -> ClientOptions:
        return self._options

    @property
    def base_url(self) -> httpx.URL:
        """URL that operation subpaths are joined onto."""
        return self._base_url

    async def __aenter__(self) -> "OperationsClient":
        """Enter async context, create httpx client."""
        self._client = httpx.AsyncClient(
            timeout=self._options.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context, close httpx client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _require_client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise ClientError("Client not initialized. Use 'async with' context manager.")
        return self._client

    def operation_url(self, subpath: str) -> httpx.URL:
        """Join an operation subpath onto the base URL.

        Raises:
            TransportError: If the subpath cannot be joined.
        """
        try:
            return self._base_url.join(subpath)
        except httpx.InvalidURL as e:
            raise TransportError(f"failed to parse url subpath: {e}") from e

    def _params(self, variables: str | None = None, live: bool = False) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if variables is not None:
            params[self._options.variables_param] = variables
        if self._options.token is not None:
            params[self._options.token_param] = self._options.token
        if live:
            params[self._options.live_param] = "true"
        return params

    async def _send(
        self, request: httpx.Request, subpath: str, stream: bool = False
    ) -> httpx.Response:
        client = self._require_client()
        try:
            return await client.send(request, stream=stream)
        except httpx.RequestError as e:
            logger.warning("Request to %s failed: %s", subpath, e)
            raise TransportError(f"failed to send request: {e}") from e

    async def query(self, subpath: str, variables: Any, *, result_type: Any = Any) -> Any:
        """Run a query operation (GET, input as a JSON query parameter).

        Args:
            subpath: Operation path, e.g. "Users/Get".
            variables: Operation input; anything pydantic can serialize.
            result_type: Type the response payload is validated against.

        Returns:
            The decoded payload.
        """
        client = self._require_client()
        url = self.operation_url(subpath)
        params = self._params(serialize_variables(variables))

        request = client.build_request("GET", url, params=params, headers=_JSON_HEADERS)
        logger.debug("query: %s", subpath)

        response = await self._send(request, subpath)
        return decode_response(
            response.status_code, response.content, result_type, subpath
        ).unwrap()

    async def mutate(self, subpath: str, variables: Any, *, result_type: Any = Any) -> Any:
        """Run a mutation operation (POST, input as the JSON body).

        Args:
            subpath: Operation path, e.g. "Users/Rename".
            variables: Operation input; anything pydantic can serialize.
            result_type: Type the response payload is validated against.

        Returns:
            The decoded payload.
        """
        client = self._require_client()
        url = self.operation_url(subpath)
        body = serialize_variables(variables)

        request = client.build_request(
            "POST", url, params=self._params(), content=body, headers=_JSON_HEADERS
        )
        logger.debug("mutation: %s", subpath)

        response = await self._send(request, subpath)
        return decode_response(
            response.status_code, response.content, result_type, subpath
        ).unwrap()

    async def subscribe(
        self, subpath: str, variables: Any, *, result_type: Any = Any
    ) -> OperationStream[Any]:
        """Open a subscription.

        Returns:
            OperationStream yielding one Result per received chunk.

        Raises:
            HTTPStatusError: If the response headers carry a non-2xx status.
            TransportError: If the connection could not be opened.
        """
        return await self._open_stream(subpath, variables, result_type, live=False)

    async def live_query(
        self, subpath: str, variables: Any, *, result_type: Any = Any
    ) -> OperationStream[Any]:
        """Open a live query (a query re-sent by the server whenever it changes).

        Same as subscribe() with the live marker parameter added.
        """
        return await self._open_stream(subpath, variables, result_type, live=True)

    async def _open_stream(
        self, subpath: str, variables: Any, result_type: Any, live: bool
    ) -> OperationStream[Any]:
        client = self._require_client()
        url = self.operation_url(subpath)
        params = self._params(serialize_variables(variables), live=live)

        # Read timeout applies between chunks; None keeps long-lived streams open
        timeout = httpx.Timeout(self._options.timeout, read=self._options.stream_timeout)
        request = client.build_request(
            "GET", url, params=params, headers=_JSON_HEADERS, timeout=timeout
        )
        logger.debug("Opening stream: subpath=%s, live=%s", subpath, live)

        response = await self._send(request, subpath, stream=True)
        if not is_success_status(response.status_code):
            await response.aclose()
            logger.error(
                "subscription/live query failed with status: %d", response.status_code
            )
            raise HTTPStatusError(response.status_code)

        return OperationStream(response, result_type, subpath)
