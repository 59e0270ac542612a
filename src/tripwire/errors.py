"""Error types raised while validating, rendering and delivering alerts.

Every error carries a ``stage`` so callers can tell where a send stopped:
validation, configuration, serialization, transport or delivery.
"""

from __future__ import annotations


class NotificationError(Exception):
    """Base class for every failure raised by the alert pipeline."""

    stage = "notification"


class EventValidationError(NotificationError, ValueError):
    """Raised when an event is missing required metadata."""

    stage = "validation"

    def __init__(self, field: str, reason: str = "is required") -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"invalid event: {field} {reason}")


class EndpointConfigError(NotificationError, ValueError):
    """Raised when a destination URL is blank or not an absolute http(s) URL."""

    stage = "configuration"

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        super().__init__(message)


class PayloadSerializationError(NotificationError):
    """Raised when a rendered payload cannot be encoded as JSON."""

    stage = "serialization"


class TransportError(NotificationError):
    """Raised when a request could not be sent or no response arrived."""

    stage = "transport"


class DeliveryTimeoutError(TransportError):
    """Raised when the endpoint did not answer before the deadline."""


class DeliveryError(NotificationError):
    """Raised when the endpoint answered with a non-2xx status."""

    stage = "delivery"

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"webhook returned status {status_code}")
