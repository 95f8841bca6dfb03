"""
Exception hierarchy for the image gateway.

Every error raised by the core derives from GatewayError so the HTTP entry
point can convert it into a uniform error envelope. Upstream failures share
the BackendError base and surface as HTTP 500; authentication failures
surface as HTTP 401.
"""

from typing import Optional


class GatewayError(Exception):
    """Base class for all gateway errors."""

    status_code: int = 500

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.provider = provider


class AuthenticationError(GatewayError):
    """Missing or unclassifiable credential."""

    status_code = 401


class ConfigurationError(GatewayError):
    """Invalid gateway configuration (e.g. an empty failover pool). Never retried."""


class BackendError(GatewayError):
    """Base class for failures talking to an image backend."""


class BackendHttpError(BackendError):
    """Backend answered with a non-success HTTP status."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        upstream_status: Optional[int] = None,
        body: str = "",
    ):
        super().__init__(message, provider)
        self.upstream_status = upstream_status
        self.body = body


class BackendDataError(BackendError):
    """Backend answered successfully but the payload is empty or malformed."""


class BackendTimeoutError(BackendError):
    """A bounded wait was exceeded (HTTP timeout or polling budget)."""


class BackendTransportError(BackendError):
    """Connection-level failure before a response was received."""
