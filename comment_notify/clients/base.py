"""Base HTTP client shared by the avatar, spam and push integrations.

All of them are best-effort side effects of a comment submission, so every
requests failure is translated into a ClientError the caller can catch in
one place. Several push gateways carry their secret in the URL path or
query string; URLs are therefore redacted before they reach a log line or
an exception message.
"""

import logging
import re
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

import requests

from comment_notify.config.models import AdvancedConfig
from comment_notify.logging import get_logger

from .exceptions import (
    ClientConfigurationError,
    ClientHTTPError,
    ClientResponseError,
    ClientTimeoutError,
)

logger = get_logger(__name__, component="http")

# Path segments this long, or shaped like "<id>:<secret>", are treated as credentials
_SECRET_SEGMENT = re.compile(r"^(?:[^/]{20,}|[^/]*:[^/]*)$")


def redact_url(url: str) -> str:
    """Drop the query string and mask credential-looking path segments.

    >>> redact_url("https://api.telegram.org/bot123:abc/sendMessage")
    'https://api.telegram.org/***/sendMessage'
    """
    parts = urlsplit(url)
    segments = ["***" if _SECRET_SEGMENT.match(seg) else seg for seg in parts.path.split("/")]
    return f"{parts.scheme}://{parts.netloc}{'/'.join(segments)}"


class HTTPClient:
    """Base class for clients of third-party HTTP APIs.

    Attributes:
        timeout: Request timeout in seconds
        user_agent: User-Agent header sent with every request
    """

    def __init__(
        self,
        timeout: int = 10,
        user_agent: str = "CommentNotify/1.0",
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Args:
            timeout: Request timeout in seconds (1-120)
            user_agent: User-Agent header
            session: Pre-built session, mostly for tests

        Raises:
            ClientConfigurationError: On an out-of-range timeout or blank user_agent
        """
        if not 1 <= timeout <= 120:
            raise ClientConfigurationError(
                f"Timeout must be between 1 and 120 seconds, got: {timeout}"
            )
        if not user_agent or not user_agent.strip():
            raise ClientConfigurationError("user_agent cannot be empty")

        self.timeout = timeout
        self.user_agent = user_agent.strip()

        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self.user_agent})

    @classmethod
    def from_config(cls, advanced_config: AdvancedConfig, **kwargs):
        """Build a client from the service's advanced settings."""
        return cls(
            timeout=advanced_config.http_request_timeout,
            user_agent=advanced_config.user_agent,
            **kwargs,
        )

    def _make_request(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
        form_data: Optional[Dict[str, Any]] = None,
        expect_json: bool = True,
    ) -> Any:
        """Send one request and return its body.

        Args:
            url: Request URL
            method: HTTP method
            headers: Headers merged over the session defaults
            params: Query parameters
            json_data: JSON body
            form_data: Form-encoded body (Akismet, ServerChan, PushDeer)
            expect_json: Parse the body as JSON, otherwise return the stripped text

        Raises:
            ClientHTTPError: On a 4xx/5xx status or a connection failure
            ClientTimeoutError: On timeout
            ClientResponseError: On a body that is not valid JSON
        """
        safe_url = redact_url(url)
        log_extra = {"method": method, "url": safe_url}

        logger.debug(
            f"HTTP {method} {safe_url}",
            extra={"event": "http.request", "timeout": self.timeout, **log_extra},
        )

        try:
            response = self._session.request(
                method=method,
                url=url,
                headers=headers,
                params=params,
                json=json_data,
                data=form_data,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.warning(
                f"HTTP {method} {safe_url} timed out after {self.timeout}s",
                extra={"event": "http.timeout", "timeout": self.timeout, **log_extra},
            )
            raise ClientTimeoutError(
                f"Request to {safe_url} timed out after {self.timeout} seconds",
                url=url,
            ) from e
        except requests.exceptions.RequestException as e:
            # requests repeats the request path in its messages; name the failure only
            logger.error(
                f"HTTP {method} {safe_url} failed: {type(e).__name__}",
                extra={"event": "http.error", "error_type": type(e).__name__, **log_extra},
            )
            raise ClientHTTPError(
                f"Request to {safe_url} failed: {type(e).__name__}",
                status_code=0,
                url=url,
            ) from e

        if response.status_code >= 400:
            # 5xx is the provider's problem; 4xx usually means a bad key or token
            log_level = logging.WARNING if response.status_code >= 500 else logging.ERROR
            logger.log(
                log_level,
                f"HTTP {response.status_code} from {safe_url}",
                extra={"event": "http.error", "status_code": response.status_code, **log_extra},
            )
            raise ClientHTTPError(
                f"HTTP {response.status_code}: {response.reason}",
                status_code=response.status_code,
                url=url,
            )

        if not expect_json:
            return response.text.strip()

        try:
            data = response.json()
        except ValueError as e:
            logger.error(
                f"Unparsable JSON from {safe_url}",
                extra={"event": "http.error", "error_type": "JSONDecodeError", **log_extra},
            )
            raise ClientResponseError(f"Failed to parse JSON response from {safe_url}: {e}") from e

        logger.debug(
            f"HTTP {response.status_code} from {safe_url}",
            extra={"event": "http.succeeded", "status_code": response.status_code, **log_extra},
        )
        return data
