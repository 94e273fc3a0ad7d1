"""
Transport layer for the release-hosting service.

- client.py: httpx implementation (HostingClient)
- base_client.py: Abstract interface used by resolution and the facade
- outcome.py: Classification of HTTP attempts
- listing.py: Lazy, restartable paginated listing
- exceptions.py: TransportError family
"""

from .base_client import BaseTransportClient
from .client import HostingClient, auth_headers
from .exceptions import (
    FatalTransportError,
    GaveUpAfterRetries,
    TransportCancelled,
    TransportError,
)
from .listing import ReleaseListing
from .outcome import Success, classify_exception, classify_response, parse_retry_after

__all__ = [
    "BaseTransportClient",
    "HostingClient",
    "auth_headers",
    "ReleaseListing",
    "TransportError",
    "FatalTransportError",
    "GaveUpAfterRetries",
    "TransportCancelled",
    "Success",
    "classify_response",
    "classify_exception",
    "parse_retry_after",
]
