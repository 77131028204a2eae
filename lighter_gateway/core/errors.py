"""Custom exception hierarchy for the gateway."""

from __future__ import annotations


class GatewayError(RuntimeError):
    """Base class for all domain-specific exceptions."""


class ConfigurationError(GatewayError):
    """Raised when required configuration (e.g. the L1 address) is missing."""


class UpstreamError(GatewayError):
    """Represents a failed interaction with the upstream exchange.

    Carries the request method, path, HTTP status (``None`` for transport
    failures) and the response body as diagnostic text.
    """

    def __init__(
        self,
        message: str,
        *,
        method: str | None = None,
        path: str | None = None,
        status: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.path = path
        self.status = status
        self.body = body


class RequestCancelledError(UpstreamError):
    """Raised when the request scope was cancelled or its deadline passed."""


class OrderValidationError(GatewayError):
    """Raised when a submitted trade intent breaks an intake rule."""
