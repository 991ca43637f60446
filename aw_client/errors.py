"""Error types raised by the aw-client library."""

from __future__ import annotations


class AWClientError(RuntimeError):
    """Base class for every error raised by the client."""


class ConstructionError(AWClientError):
    """The client could not be constructed from the given arguments."""


class UrlError(ConstructionError):
    """Host and port do not form a valid base URL."""


class TransportError(AWClientError):
    """Connection, DNS, timeout or other I/O failure."""


class HttpStatusError(AWClientError):
    """The server answered with a status the operation does not accept."""

    def __init__(self, status_code: int, method: str, url: str, body: str = "") -> None:
        self.status_code = status_code
        self.method = method
        self.url = url
        self.body = body
        message = f"HTTP {status_code} for {method} {url}"
        if body:
            message = f"{message}. {body[:200]}"
        super().__init__(message)


class NotFoundError(HttpStatusError):
    """The requested resource does not exist (HTTP 404)."""


class DecodeError(AWClientError):
    """Response body does not parse into the expected shape."""


class MalformedCountError(DecodeError):
    """The event count endpoint returned something that is not an integer."""

    def __init__(self, body: str) -> None:
        self.body = body
        super().__init__(f"could not parse event count response: {body[:200]!r}")


class ConfigError(AWClientError):
    """An ``AW_*`` environment variable holds a value that cannot be parsed."""
