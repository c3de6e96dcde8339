"""Response envelope types for operation responses."""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from pydantic import BaseModel, ConfigDict, StrictStr

T = TypeVar("T")


@dataclass(frozen=True)
class DataEnvelope(Generic[T]):
    """Success envelope: ``{"data": <payload>}``.

    Attributes:
        data: Payload validated against the caller's result type.
    """

    data: T


@dataclass(frozen=True)
class ErrorEnvelope:
    """Error envelope: ``{"code": <str|null>, "errors": [{"message": <str>}, ...]}``.

    Attributes:
        code: Optional machine-readable error code.
        errors: Error messages, in wire order.
    """

    code: str | None
    errors: tuple[str, ...]


@dataclass(frozen=True)
class Malformed:
    """Body matched neither envelope shape.

    Attributes:
        error: The underlying failure (JSONDecodeError, pydantic ValidationError,
            or EnvelopeShapeError).
    """

    error: Exception

    @property
    def reason(self) -> str:
        return str(self.error)


DecodeResult = Union[DataEnvelope[T], ErrorEnvelope, Malformed]


# Wire models for the error envelope. Unknown keys (locations, path, extensions)
# are ignored; message and errors are required.


class WireErrorEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: StrictStr


class WireErrorBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: StrictStr | None = None
    errors: list[WireErrorEntry]
