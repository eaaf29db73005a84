"""
Error taxonomy shared by services, adapters and the HTTP layer.
Each error carries the HTTP status the API renders it with.
"""
from __future__ import annotations

from typing import Any, Optional


class ServiceError(Exception):
    """Base class for failures surfaced to API clients."""

    status_code: int = 500

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def public_message(self) -> str:
        return self.message


class ValidationError(ServiceError):
    """Malformed client input. The caller may fix it and resubmit."""

    status_code = 400


class AuthenticationError(ServiceError):
    status_code = 401


class PermissionDenied(ServiceError):
    status_code = 403


class NotFound(ServiceError):
    status_code = 404


class NoDataFound(NotFound):
    """Upstream answered but had nothing usable for the symbol."""

    def __init__(self, message: str = "No data found", **kwargs):
        super().__init__(message, **kwargs)


class UpstreamError(ServiceError):
    """Non-success status or transport failure from an external provider."""

    status_code = 500

    def __init__(self, message: str, upstream_status: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.upstream_status = upstream_status

    def public_message(self) -> str:
        if self.upstream_status is not None:
            return f"Upstream request failed (status {self.upstream_status})"
        return "Upstream request failed"


class AllocationExhausted(ServiceError):
    """No free UID was found within the attempt budget.

    Transient: retrying the whole registration later is safe.
    """

    status_code = 500

    def __init__(self, message: str = "Failed to generate unique UID", attempts: int = 0, **kwargs):
        super().__init__(message, **kwargs)
        self.attempts = attempts

    def public_message(self) -> str:
        return "Failed to create user"
