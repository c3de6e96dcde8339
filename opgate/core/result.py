"""Success-or-error value returned for each decoded response."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from opgate.core.errors import OpgateError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of decoding one response body or one stream chunk.

    Exactly one of ``value`` / ``error`` is meaningful: ``error`` is None on
    success. ``value`` may itself be None when the server returned
    ``{"data": null}``, so check ``ok`` rather than the value.

    Attributes:
        value: Decoded payload on success.
        error: Classified error on failure.
    """

    value: T | None = None
    error: OpgateError | None = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: OpgateError) -> "Result[Any]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        """True when the result holds a value."""
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, or raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
