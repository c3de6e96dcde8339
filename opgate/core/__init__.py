"""Core types: error hierarchy and result values."""

from opgate.core.errors import (
    ClientError,
    ConfigError,
    HTTPStatusError,
    OpgateError,
    ResponseError,
    ResponseParseError,
    SerializationError,
    TransportError,
)
from opgate.core.result import Result

__all__ = [
    "OpgateError",
    "ConfigError",
    "ClientError",
    "SerializationError",
    "TransportError",
    # Response classification
    "HTTPStatusError",
    "ResponseError",
    "ResponseParseError",
    "Result",
]
