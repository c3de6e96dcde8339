"""Async client for invoking gateway operations over HTTP/JSON."""

from opgate.client import OperationsClient
from opgate.config import ClientOptions, load_options
from opgate.core import (
    ClientError,
    ConfigError,
    HTTPStatusError,
    OpgateError,
    ResponseError,
    ResponseParseError,
    Result,
    SerializationError,
    TransportError,
)
from opgate.rpc import (
    DataEnvelope,
    ErrorEnvelope,
    Malformed,
    decode_envelope,
    decode_response,
    reconcile,
)
from opgate.stream import OperationStream

__version__ = "0.1.0"

__all__ = [
    "OperationsClient",
    "OperationStream",
    "ClientOptions",
    "load_options",
    "Result",
    # Errors
    "OpgateError",
    "ConfigError",
    "ClientError",
    "SerializationError",
    "TransportError",
    "HTTPStatusError",
    "ResponseError",
    "ResponseParseError",
    # Envelope decoding
    "DataEnvelope",
    "ErrorEnvelope",
    "Malformed",
    "decode_envelope",
    "decode_response",
    "reconcile",
]
