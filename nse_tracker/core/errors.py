"""Error hierarchy shared by the tracker subsystems.

Centralizing exception types lets the poll loop distinguish between an expired
session (re-handshake on the next cycle) and ordinary transport noise. HTTP
status codes are decoded once at the transport boundary and carried on the
exception instead of being searched for in error messages.
"""
from __future__ import annotations

AUTH_FAILURE_STATUSES = frozenset({401, 403})


class CoreError(Exception):
    """Base class for all custom exceptions in the application."""


class ConfigurationError(CoreError):
    """Raised when configuration files are missing or invalid."""


class MarketDataError(CoreError):
    """Raised for failures while fetching or parsing market data."""


class TransportError(MarketDataError):
    """Network, timeout or HTTP failure talking to the NSE endpoints.

    ``status_code`` is ``None`` when no HTTP response was received.
    """

    def __init__(self, message: str, *, status_code: int | None = None, url: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class AuthExpiredError(TransportError):
    """The endpoint rejected the session cookies (HTTP 401/403)."""


class MalformedResponseError(MarketDataError):
    """The snapshot payload cannot be turned into stock records."""


class PersistenceError(CoreError):
    """Raised when the portfolio JSON file cannot be read or written."""


def transport_error_for_status(status_code: int, message: str, *, url: str | None = None) -> TransportError:
    """Return the most specific transport error for an HTTP status."""

    if status_code in AUTH_FAILURE_STATUSES:
        return AuthExpiredError(message, status_code=status_code, url=url)
    return TransportError(message, status_code=status_code, url=url)
