"""Envelope decoding and outcome reconciliation for operation responses.

Every response body (or stream chunk) goes through two steps:

1. ``decode_envelope`` parses the raw bytes into exactly one of
   ``DataEnvelope``, ``ErrorEnvelope`` or ``Malformed``. The bytes alone decide
   which; nothing is assumed from the HTTP status.
2. ``reconcile`` combines that with the transport status code:

   ============  ==========  =========================
   decoded       status      outcome
   ============  ==========  =========================
   data          any         success
   error         any         ResponseError
   malformed     non-2xx     HTTPStatusError
   malformed     2xx         ResponseParseError
   ============  ==========  =========================

Note that a data envelope wins even over a non-2xx status.
"""

import json
import logging
from functools import lru_cache
from typing import Any

from pydantic import TypeAdapter, ValidationError

from opgate.core.errors import (
    HTTPStatusError,
    OpgateError,
    ResponseError,
    ResponseParseError,
    SerializationError,
)
from opgate.core.result import Result
from opgate.rpc.types import (
    DataEnvelope,
    DecodeResult,
    ErrorEnvelope,
    Malformed,
    WireErrorBody,
)

logger = logging.getLogger(__name__)

DATA_KEY = "data"
ERRORS_KEY = "errors"

_ANY_ADAPTER: TypeAdapter[Any] = TypeAdapter(Any)


class EnvelopeShapeError(OpgateError):
    """Raised (and wrapped in Malformed) when valid JSON matches neither envelope."""


@lru_cache(maxsize=256)
def _cached_adapter(result_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(result_type)


def _adapter_for(result_type: Any) -> TypeAdapter[Any]:
    if result_type is Any:
        return _ANY_ADAPTER
    try:
        return _cached_adapter(result_type)
    except TypeError:
        # Unhashable type expression
        return TypeAdapter(result_type)


def _validate_payload(payload: Any, result_type: Any) -> Any:
    """Validate a decoded payload in strict JSON mode (no coercion such as "1" -> 1)."""
    if result_type is Any:
        return payload
    return _adapter_for(result_type).validate_json(json.dumps(payload), strict=True)


def is_success_status(status_code: int) -> bool:
    """Return True for 2xx status codes."""
    return 200 <= status_code < 300


def decode_envelope(body: bytes | str, result_type: Any = Any) -> DecodeResult[Any]:
    """Decode a response body into one envelope variant.

    The key set is inspected before any variant is validated, so an
    unexpected body can never be accepted as success by default.

    Args:
        body: Raw response bytes (or text).
        result_type: Type the ``data`` payload is validated against.

    Returns:
        DataEnvelope, ErrorEnvelope, or Malformed carrying the parse failure.
    """
    try:
        parsed = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
        # RecursionError: nesting deeper than the decoder supports
        return Malformed(e)

    if not isinstance(parsed, dict):
        return Malformed(
            EnvelopeShapeError(f"expected JSON object, got {type(parsed).__name__}")
        )

    has_data = DATA_KEY in parsed
    has_errors = parsed.get(ERRORS_KEY) is not None

    if has_data and has_errors and parsed[DATA_KEY] is not None:
        return Malformed(
            EnvelopeShapeError("ambiguous envelope: both 'data' and 'errors' present")
        )

    if has_data and not has_errors:
        try:
            value = _validate_payload(parsed[DATA_KEY], result_type)
        except ValidationError as e:
            return Malformed(e)
        return DataEnvelope(value)

    if has_errors:
        try:
            wire = WireErrorBody.model_validate(parsed)
        except ValidationError as e:
            return Malformed(e)
        return ErrorEnvelope(
            code=wire.code,
            errors=tuple(entry.message for entry in wire.errors),
        )

    return Malformed(
        EnvelopeShapeError("expected 'data' or 'errors' key in response object")
    )


def reconcile(
    status_code: int,
    decoded: DecodeResult[Any],
    subpath: str = "",
) -> Result[Any]:
    """Turn a decoded envelope plus transport status into the caller's Result.

    Args:
        status_code: HTTP status of the response.
        decoded: Output of ``decode_envelope``.
        subpath: Operation path, used for logging only.

    Returns:
        Result holding the payload or a classified error.
    """
    if isinstance(decoded, DataEnvelope):
        return Result.success(decoded.data)

    if isinstance(decoded, ErrorEnvelope):
        return Result.failure(
            ResponseError(
                status_code=status_code,
                code=decoded.code,
                errors=decoded.errors,
            )
        )

    if not is_success_status(status_code):
        logger.error("request to %s failed with status: %d", subpath, status_code)
        return Result.failure(HTTPStatusError(status_code))

    error = ResponseParseError(decoded.reason)
    error.__cause__ = decoded.error
    return Result.failure(error)


def decode_response(
    status_code: int,
    body: bytes | str,
    result_type: Any = Any,
    subpath: str = "",
) -> Result[Any]:
    """Decode a body and reconcile it with its status code."""
    return reconcile(status_code, decode_envelope(body, result_type), subpath)


def serialize_variables(variables: Any) -> str:
    """Serialize operation input to a compact JSON string.

    Accepts anything pydantic can dump: plain JSON values, models,
    dataclasses, datetimes, etc.

    Raises:
        SerializationError: If the value cannot be serialized.
    """
    try:
        return _ANY_ADAPTER.dump_json(variables).decode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError(str(e)) from e
