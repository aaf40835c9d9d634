"""Exceptions for outbound HTTP clients."""


class ClientError(Exception):
    """Base exception for all outbound HTTP client errors.

    Callers doing best-effort work (spam checks, avatar lookups, pushes)
    catch this one type and treat the side effect as not having happened.
    """

    pass


class ClientHTTPError(ClientError):
    """Request failed at the transport level or returned a 4xx/5xx status."""

    def __init__(self, message: str, status_code: int, url: str) -> None:
        """
        Args:
            message: Human-readable error message
            status_code: HTTP status code, 0 when no response was received
            url: URL that failed
        """
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class ClientTimeoutError(ClientError):
    """Request did not complete within the configured timeout."""

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url


class ClientResponseError(ClientError):
    """A response arrived but could not be parsed or was not understood."""

    pass


class ClientConfigurationError(ClientError):
    """Client was constructed with invalid settings."""

    pass
