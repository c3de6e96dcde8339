"""Unit tests for envelope decoding and outcome reconciliation."""

import json
from dataclasses import dataclass

import pytest
from pydantic import BaseModel, ValidationError

from opgate.core.errors import (
    HTTPStatusError,
    ResponseError,
    ResponseParseError,
    SerializationError,
)
from opgate.rpc.protocol import (
    EnvelopeShapeError,
    decode_envelope,
    decode_response,
    is_success_status,
    reconcile,
    serialize_variables,
)
from opgate.rpc.types import DataEnvelope, ErrorEnvelope, Malformed


class User(BaseModel):
    id: int
    name: str


# === decode_envelope ===


class TestDecodeEnvelopeData:
    """Tests for bodies carrying a data payload."""

    def test_data_object(self):
        """A data object decodes to DataEnvelope."""
        decoded = decode_envelope(b'{"data": {"x": 1}}')
        assert decoded == DataEnvelope({"x": 1})

    def test_data_null(self):
        """A null payload is still a success envelope."""
        decoded = decode_envelope(b'{"data": null}')
        assert isinstance(decoded, DataEnvelope)
        assert decoded.data is None

    def test_data_validated_against_model(self):
        """The payload is validated into the requested result type."""
        decoded = decode_envelope(b'{"data": {"id": 7, "name": "Ada"}}', User)
        assert isinstance(decoded, DataEnvelope)
        assert decoded.data == User(id=7, name="Ada")

    def test_data_validated_against_generic_alias(self):
        """Generic aliases like list[int] work as result types."""
        decoded = decode_envelope(b'{"data": [1, 2, 3]}', list[int])
        assert decoded == DataEnvelope([1, 2, 3])

    def test_data_not_matching_type_is_malformed(self):
        """A payload that fails validation is Malformed, never success."""
        decoded = decode_envelope(b'{"data": {"id": "seven"}}', User)
        assert isinstance(decoded, Malformed)
        assert isinstance(decoded.error, ValidationError)

    @pytest.mark.parametrize("body, result_type", [
        (b'{"data": "1"}', int),
        (b'{"data": "yes"}', bool),
        (b'{"data": 1}', str),
        (b'{"data": {"id": "7", "name": "Ada"}}', User),
    ])
    def test_payload_is_not_coerced(self, body, result_type):
        """Values of the wrong JSON type are rejected rather than converted."""
        decoded = decode_envelope(body, result_type)
        assert isinstance(decoded, Malformed)
        assert isinstance(decoded.error, ValidationError)

    def test_null_errors_does_not_hide_data(self):
        """An explicit "errors": null alongside data is a success envelope."""
        decoded = decode_envelope(b'{"data": {"x": 1}, "errors": null}')
        assert decoded == DataEnvelope({"x": 1})

    def test_accepts_text(self):
        """str bodies decode the same as bytes."""
        assert decode_envelope('{"data": 5}') == DataEnvelope(5)

    def test_extra_top_level_keys_ignored(self):
        """Keys other than data/errors do not affect the variant."""
        decoded = decode_envelope(b'{"data": 1, "extensions": {"trace": "abc"}}')
        assert decoded == DataEnvelope(1)


class TestDecodeEnvelopeErrors:
    """Tests for bodies carrying an error envelope."""

    def test_code_and_errors(self):
        """Code and messages are extracted."""
        decoded = decode_envelope(b'{"code": "BAD", "errors": [{"message": "nope"}]}')
        assert decoded == ErrorEnvelope(code="BAD", errors=("nope",))

    def test_code_optional(self):
        """A missing code decodes as None."""
        decoded = decode_envelope(b'{"errors": [{"message": "nope"}]}')
        assert decoded == ErrorEnvelope(code=None, errors=("nope",))

    def test_message_order_preserved(self):
        """Messages keep wire order."""
        body = json.dumps(
            {"errors": [{"message": "first"}, {"message": "second"}, {"message": "third"}]}
        )
        decoded = decode_envelope(body)
        assert isinstance(decoded, ErrorEnvelope)
        assert decoded.errors == ("first", "second", "third")

    def test_empty_error_list(self):
        """An empty error list is still an error envelope."""
        decoded = decode_envelope(b'{"code": "E", "errors": []}')
        assert decoded == ErrorEnvelope(code="E", errors=())

    def test_extra_entry_keys_ignored(self):
        """GraphQL-style locations/path on entries are ignored."""
        body = b'{"errors": [{"message": "m", "path": ["a"], "locations": []}]}'
        assert decode_envelope(body) == ErrorEnvelope(code=None, errors=("m",))

    def test_null_data_with_errors_is_error(self):
        """{"data": null, "errors": [...]} is an error envelope."""
        decoded = decode_envelope(b'{"data": null, "errors": [{"message": "m"}]}')
        assert decoded == ErrorEnvelope(code=None, errors=("m",))

    def test_entry_without_message_is_malformed(self):
        """Every entry needs a string message."""
        decoded = decode_envelope(b'{"errors": [{"msg": "m"}]}')
        assert isinstance(decoded, Malformed)
        assert isinstance(decoded.error, ValidationError)

    def test_non_string_code_is_malformed(self):
        """Numeric codes are not coerced to strings."""
        decoded = decode_envelope(b'{"code": 42, "errors": [{"message": "m"}]}')
        assert isinstance(decoded, Malformed)

    def test_errors_not_a_list_is_malformed(self):
        """errors must be an array."""
        decoded = decode_envelope(b'{"errors": "boom"}')
        assert isinstance(decoded, Malformed)


class TestDecodeEnvelopeMalformed:
    """Tests for bodies matching neither shape."""

    @pytest.mark.parametrize("body", [b"not json", b"", b"{", b"\xff\xfe\x00garbage"])
    def test_invalid_json(self, body):
        """Bodies that are not JSON are Malformed."""
        assert isinstance(decode_envelope(body), Malformed)

    def test_invalid_json_keeps_syntax_error(self):
        """The underlying JSON error is carried."""
        decoded = decode_envelope(b"not json")
        assert isinstance(decoded, Malformed)
        assert isinstance(decoded.error, json.JSONDecodeError)

    @pytest.mark.parametrize("body", [b"[1, 2]", b"42", b'"data"', b"null"])
    def test_non_object_json(self, body):
        """Top-level JSON must be an object."""
        decoded = decode_envelope(body)
        assert isinstance(decoded, Malformed)
        assert isinstance(decoded.error, EnvelopeShapeError)

    def test_deeply_nested_json(self):
        """Nesting beyond the decoder's depth limit is Malformed, not an exception."""
        body = b'{"data": ' + b"[" * 200_000 + b"]" * 200_000 + b"}"
        decoded = decode_envelope(body)
        assert isinstance(decoded, Malformed)
        assert isinstance(decoded.error, RecursionError)

    def test_null_errors_alone_is_malformed(self):
        decoded = decode_envelope(b'{"errors": null}')
        assert isinstance(decoded, Malformed)

    def test_object_without_known_keys(self):
        """An object with neither data nor errors is Malformed."""
        decoded = decode_envelope(b'{"result": 1}')
        assert isinstance(decoded, Malformed)
        assert "data" in decoded.reason

    def test_data_and_errors_is_ambiguous(self):
        """Both data and errors present is not treated as success."""
        decoded = decode_envelope(b'{"data": {"x": 1}, "errors": [{"message": "m"}]}')
        assert isinstance(decoded, Malformed)
        assert "ambiguous" in decoded.reason

    def test_decoding_is_idempotent(self):
        """The same bytes always decode to the same classification."""
        for body in (b'{"data": 1}', b'{"errors": [{"message": "m"}]}', b"nope"):
            first = decode_envelope(body)
            second = decode_envelope(body)
            assert type(first) is type(second)
            if not isinstance(first, Malformed):
                assert first == second


# === reconcile ===


class TestReconcile:
    """Tests for the status/decode-result decision table."""

    @pytest.mark.parametrize("status", [200, 201, 204, 400, 404, 500, 503])
    def test_data_wins_over_any_status(self, status):
        """A data envelope is a success whatever the status."""
        result = reconcile(status, DataEnvelope({"x": 1}))
        assert result.ok
        assert result.value == {"x": 1}

    @pytest.mark.parametrize("status", [200, 401, 500])
    def test_error_envelope_is_response_error(self, status):
        """An error envelope is a ResponseError carrying the status."""
        result = reconcile(status, ErrorEnvelope(code="BAD", errors=("nope",)))
        assert not result.ok
        assert isinstance(result.error, ResponseError)
        assert result.error.status_code == status
        assert result.error.code == "BAD"
        assert result.error.errors == ("nope",)

    @pytest.mark.parametrize("status", [301, 400, 404, 500, 502])
    def test_malformed_with_failure_status(self, status):
        """Malformed + non-2xx is an HTTPStatusError with only the status."""
        result = reconcile(status, Malformed(ValueError("bad")))
        assert isinstance(result.error, HTTPStatusError)
        assert result.error.status_code == status

    @pytest.mark.parametrize("status", [200, 202, 299])
    def test_malformed_with_success_status(self, status):
        """Malformed + 2xx is a ResponseParseError chaining the parse failure."""
        cause = ValueError("bad json")
        result = reconcile(status, Malformed(cause))
        assert isinstance(result.error, ResponseParseError)
        assert result.error.__cause__ is cause
        assert "bad json" in result.error.detail

    def test_failure_status_is_logged(self, caplog):
        """Undecodable non-2xx responses are logged with the subpath."""
        with caplog.at_level("ERROR", logger="opgate.rpc.protocol"):
            reconcile(502, Malformed(ValueError("x")), subpath="Users/Get")
        assert "Users/Get" in caplog.text
        assert "502" in caplog.text


class TestDecodeResponse:
    """End-to-end examples through decode_response."""

    def test_success_with_500(self):
        """status 500, {"data": {"x": 1}} -> success."""
        result = decode_response(500, b'{"data": {"x": 1}}')
        assert result.unwrap() == {"x": 1}

    def test_error_envelope_with_200(self):
        """status 200, error envelope -> structured error."""
        result = decode_response(200, b'{"code":"BAD","errors":[{"message":"nope"}]}')
        with pytest.raises(ResponseError) as exc_info:
            result.unwrap()
        assert exc_info.value.status_code == 200
        assert exc_info.value.code == "BAD"
        assert exc_info.value.errors == ("nope",)

    def test_not_json_with_404(self):
        """status 404, not json -> HTTPStatusError(404)."""
        result = decode_response(404, b"not json")
        assert isinstance(result.error, HTTPStatusError)
        assert result.error.status_code == 404

    def test_not_json_with_200(self):
        """status 200, not json -> ResponseParseError."""
        result = decode_response(200, b"not json")
        assert isinstance(result.error, ResponseParseError)
        assert isinstance(result.error.__cause__, json.JSONDecodeError)

    def test_deeply_nested_with_200(self):
        """Excessive nesting is classified like any other undecodable body."""
        result = decode_response(200, b"[" * 200_000)
        assert isinstance(result.error, ResponseParseError)
        assert isinstance(result.error.__cause__, RecursionError)

    def test_result_type_mismatch_with_200(self):
        """A payload of the wrong type on 2xx is a parse error, not success."""
        result = decode_response(200, b'{"data": "text"}', list[int])
        assert isinstance(result.error, ResponseParseError)


class TestIsSuccessStatus:
    @pytest.mark.parametrize("status,expected", [
        (199, False), (200, True), (250, True), (299, True), (300, False), (500, False),
    ])
    def test_range(self, status, expected):
        assert is_success_status(status) is expected


# === serialize_variables ===


@dataclass
class Filter:
    name: str
    limit: int


class TestSerializeVariables:
    """Tests for operation input serialization."""

    def test_dict(self):
        assert json.loads(serialize_variables({"id": 1})) == {"id": 1}

    def test_compact(self):
        """Output has no insignificant whitespace."""
        assert serialize_variables({"a": 1, "b": [1, 2]}) == '{"a":1,"b":[1,2]}'

    def test_none(self):
        assert serialize_variables(None) == "null"

    def test_pydantic_model(self):
        assert json.loads(serialize_variables(User(id=1, name="Ada"))) == {"id": 1, "name": "Ada"}

    def test_dataclass(self):
        assert json.loads(serialize_variables(Filter("x", 5))) == {"name": "x", "limit": 5}

    def test_unserializable_raises(self):
        """Values pydantic cannot dump raise SerializationError."""
        with pytest.raises(SerializationError) as exc_info:
            serialize_variables({"x": object()})
        assert "error serializing data" in str(exc_info.value)
