"""Configuration loading and validation."""

from opgate.config.loader import load_options
from opgate.config.schema import DEFAULT_OPERATIONS_PATH, DEFAULT_URL, ClientOptions

__all__ = [
    "ClientOptions",
    "DEFAULT_OPERATIONS_PATH",
    "DEFAULT_URL",
    "load_options",
]
