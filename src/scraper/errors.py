"""Scrape failure taxonomy.

Every failure the pipeline can surface is a ``ScrapeError``. Each subclass
carries a stable ``kind`` string used by the API layer to pick the HTTP
status, and ``status`` holds the upstream HTTP status where one exists.
"""

from __future__ import annotations


class ScrapeError(Exception):
    """Base class for all pipeline failures."""

    kind = "internal"

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class InvalidInputError(ScrapeError):
    """The target URL is missing, not a string, or not an http(s) URL."""

    kind = "invalid_input"


class TransportError(ScrapeError):
    """DNS, TLS, connection or timeout failure reaching the target."""

    kind = "transport"


class HttpStatusError(ScrapeError):
    """The target answered with a non-success HTTP status."""

    kind = "http_status"

    def __init__(self, status: int, reason: str = "") -> None:
        message = f"fetch failed {status}"
        if reason:
            message = f"{message} {reason}"
        super().__init__(message, status=status)


class NavigationError(ScrapeError):
    """The rendered page could not be loaded.

    ``reason`` is one of ``navigation``, ``no_response``, ``content_not_ready``
    or ``timeout``.
    """

    kind = "navigation"

    def __init__(self, message: str, *, reason: str = "navigation") -> None:
        super().__init__(message)
        self.reason = reason


class NavigationTimeoutError(NavigationError):
    kind = "navigation_timeout"

    def __init__(self, message: str = "navigation timed out") -> None:
        super().__init__(message, reason="timeout")


class SessionFatalError(ScrapeError):
    """The shared browser instance failed and has been retired."""

    kind = "session_fatal"


class SessionClosedError(SessionFatalError):
    """The browser session manager has been shut down."""

    kind = "session_closed"
