"""Typed exception hierarchy for opgate."""

from __future__ import annotations


class OpgateError(Exception):
    """Base class for all opgate errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigError(OpgateError):
    """Raised for configuration issues (invalid JSON, validation failure)."""


class ClientError(OpgateError):
    """Raised when the client is used incorrectly (e.g. outside 'async with')."""


class SerializationError(OpgateError):
    """Raised when operation input cannot be serialized to JSON.

    No request is sent when this is raised.
    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"error serializing data: {detail}")


class TransportError(OpgateError):
    """Raised when a request could not be sent or its response could not be read.

    Covers connection refused, TLS failures, timeouts, invalid URLs and
    mid-stream read failures. Never raised for a response that arrived.
    """


class HTTPStatusError(OpgateError):
    """Non-2xx response whose body matched neither envelope shape.

    Only the status code is kept; the body carried nothing usable.
    """

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"invalid HTTP response status code {status_code}")


class ResponseError(OpgateError):
    """Error envelope reported by the server.

    Attributes:
        status_code: Transport status of the response that carried the envelope.
        code: Optional machine-readable error code.
        errors: Error messages in the order the server sent them.
    """

    def __init__(
        self,
        status_code: int,
        code: str | None = None,
        errors: tuple[str, ...] | list[str] = (),
    ) -> None:
        self.status_code = status_code
        self.code = code
        self.errors = tuple(errors)
        message = f"status code {status_code}"
        if self.errors:
            message += ": " + ", ".join(self.errors)
        super().__init__(message)


class ResponseParseError(OpgateError):
    """Successful (2xx) response whose body matched neither envelope shape.

    The underlying parse failure is available as ``__cause__``.
    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"error decoding response: {detail}")
