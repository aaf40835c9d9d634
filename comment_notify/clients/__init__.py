"""Outbound HTTP client base and its exception hierarchy."""

from .base import HTTPClient, redact_url
from .exceptions import (
    ClientConfigurationError,
    ClientError,
    ClientHTTPError,
    ClientResponseError,
    ClientTimeoutError,
)

__all__ = [
    "HTTPClient",
    "redact_url",
    "ClientError",
    "ClientHTTPError",
    "ClientTimeoutError",
    "ClientResponseError",
    "ClientConfigurationError",
]
