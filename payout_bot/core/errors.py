"""
Exception classes for the payout bot.

Every failure that aborts an invocation is raised as a subclass of
PayoutBotError so the entry points can log it with a stable code.
"""

from typing import Any, Dict, Optional


class PayoutBotError(Exception):
    """Base exception class for the payout bot."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


class AuthError(PayoutBotError):
    """Raised when the bearer token is missing or wrong."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "AUTH_ERROR", details)


class UpstreamFetchError(PayoutBotError):
    """Raised when the subgraph cannot be queried or returns unusable data."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "UPSTREAM_FETCH_ERROR", details)


class PersistenceError(PayoutBotError):
    """Raised when the payout ledger cannot be opened, read or written."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "PERSISTENCE_ERROR", details)


class NotificationError(PayoutBotError):
    """Raised when an announcement channel rejects a post.

    Earlier channels may already have delivered when this is raised.
    """

    def __init__(
        self,
        message: str,
        channel: str,
        details: Optional[Dict[str, Any]] = None
    ):
        details = dict(details or {})
        details["channel"] = channel
        super().__init__(message, "NOTIFICATION_ERROR", details)
        self.channel = channel
