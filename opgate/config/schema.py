"""Pydantic models for opgate client configuration."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_URL = "http://localhost:9991/"
DEFAULT_OPERATIONS_PATH = "/operations/"


class ClientOptions(BaseModel):
    """Immutable settings shared by every call made through one client.

    Example in .opgate/config.json:
        {
            "url": "https://api.example.com/",
            "token": "d41d8cd9",
            "timeout": 30
        }
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    url: str = DEFAULT_URL
    """Base URL of the gateway."""

    operations_path: str = DEFAULT_OPERATIONS_PATH
    """Path joined onto url; operation subpaths are joined onto the result."""

    token: str | None = None
    """Opaque token forwarded as a query parameter. Omitted when None."""

    token_param: str = "wg_app_hash"
    """Query parameter name carrying the token."""

    variables_param: str = "variables"
    """Query parameter name carrying JSON-encoded input for GET-shaped calls."""

    live_param: str = "live"
    """Boolean query parameter marking live queries."""

    timeout: float = Field(default=60.0, gt=0)
    """Timeout in seconds for unary calls and for opening streams."""

    stream_timeout: float | None = Field(default=None, gt=0)
    """Read timeout between stream chunks. None waits indefinitely."""

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"url must start with http:// or https://, got: {v!r}")
        return v

    @field_validator("token_param", "variables_param", "live_param")
    @classmethod
    def validate_param_name(cls, v: str) -> str:
        if not v:
            raise ValueError("query parameter names must not be empty")
        return v
