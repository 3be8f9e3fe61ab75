"""Custom exceptions for the marketing events store."""

from __future__ import annotations


class MarketingEventsError(Exception):
    """Raised when a marketing events API call fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
