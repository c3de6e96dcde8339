"""Wire format for gateway operation responses.

Responses are JSON objects in one of two shapes:

    {"data": <payload>}
    {"code": "NOT_FOUND", "errors": [{"message": "user not found"}]}

decode_envelope() picks the shape, reconcile() folds in the HTTP status.
"""

from opgate.rpc.protocol import (
    EnvelopeShapeError,
    decode_envelope,
    decode_response,
    is_success_status,
    reconcile,
    serialize_variables,
)
from opgate.rpc.types import DataEnvelope, DecodeResult, ErrorEnvelope, Malformed

__all__ = [
    # Envelope types
    "DataEnvelope",
    "DecodeResult",
    "ErrorEnvelope",
    "Malformed",
    "EnvelopeShapeError",
    # Decoding
    "decode_envelope",
    "decode_response",
    "is_success_status",
    "reconcile",
    "serialize_variables",
]
