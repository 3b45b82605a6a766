"""Data models and exceptions for the notification pipeline.

Every failure that can happen while notifying one endpoint is a
NotificationError subclass, so the dispatcher can log the failure class and
move on to the next endpoint.
"""

from dataclasses import dataclass
from typing import Optional


class NotificationError(Exception):
    """Base exception for notification-related errors."""

    pass


class NotificationConfigurationError(NotificationError):
    """Raised for an unsupported protocol or format tag."""

    pass


class ExpansionError(NotificationError):
    """Raised when an endpoint URL template cannot be expanded."""

    pass


class SerializationError(NotificationError):
    """Raised when a snapshot cannot be encoded in the endpoint's format."""

    pass


class TransportError(NotificationError):
    """Raised when a payload could not be delivered."""

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url


class TransportHTTPError(TransportError):
    """The endpoint answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int, url: str) -> None:
        super().__init__(message, url=url)
        self.status_code = status_code


class TransportTimeoutError(TransportError):
    """The send did not complete within the endpoint's timeout."""

    pass


@dataclass(frozen=True)
class NotificationResult:
    """Outcome of notifying one endpoint for one phase.

    Attributes:
        endpoint: Endpoint identity (protocol and URL template)
        status: "sent", "skipped" (not subscribed) or "failed"
        url: Expanded destination, when expansion succeeded
        error_type: Exception class name on failure
        error: Exception message on failure
        duration_seconds: Time spent on this endpoint
    """

    endpoint: str
    status: str
    url: Optional[str] = None
    error_type: Optional[str] = None
    error: Optional[str] = None
    duration_seconds: float = 0.0

    def is_success(self) -> bool:
        return self.status == "sent"
