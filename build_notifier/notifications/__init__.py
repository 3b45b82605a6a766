"""Build lifecycle notifications.

This package provides the notification pipeline:
- NotificationService: fans a phase out to a job's endpoints
- SnapshotBuilder: assembles the JobState sent to each endpoint
- Formats: JSON and XML serializers (get_format)
- Protocols: HTTP, TCP and UDP transports (get_protocol)
- expand_variables: URL template expansion against the build environment

Failures are contained per endpoint and reported as NotificationResult values.
"""

from .expansion import expand_variables
from .formats import BaseFormat, JsonFormat, XmlFormat, get_format
from .models import (
    ExpansionError,
    NotificationConfigurationError,
    NotificationError,
    NotificationResult,
    SerializationError,
    TransportError,
    TransportHTTPError,
    TransportTimeoutError,
)
from .protocols import BaseProtocol, HttpProtocol, TcpProtocol, UdpProtocol, get_protocol
from .service import NotificationService
from .snapshot import SnapshotBuilder

__all__ = [
    # Main service
    "NotificationService",
    "SnapshotBuilder",
    # Results
    "NotificationResult",
    # Exceptions
    "NotificationError",
    "NotificationConfigurationError",
    "ExpansionError",
    "SerializationError",
    "TransportError",
    "TransportHTTPError",
    "TransportTimeoutError",
    # Formats
    "BaseFormat",
    "JsonFormat",
    "XmlFormat",
    "get_format",
    # Protocols
    "BaseProtocol",
    "HttpProtocol",
    "TcpProtocol",
    "UdpProtocol",
    "get_protocol",
    # Utilities
    "expand_variables",
]
