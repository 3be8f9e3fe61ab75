"""Custom exceptions for signal-source connectors."""

from __future__ import annotations


class ConnectorError(Exception):
    """Base exception for connector errors."""

    pass


class AuthenticationError(ConnectorError):
    """Raised when authentication with a signal source fails."""

    pass


class FetchError(ConnectorError):
    """Raised when fetching signals from a source fails."""

    pass
