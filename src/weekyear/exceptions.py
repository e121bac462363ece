"""Custom exception hierarchy for weekyear."""

from __future__ import annotations


class WeekYearError(Exception):
    """Base exception for all weekyear errors."""


class WeekYearConfigError(WeekYearError):
    """Invalid or missing configuration."""


class WeekYearStorageError(WeekYearError):
    """The durable key-value store could not be read or written."""


class WeekYearTransportError(WeekYearError):
    """HTTP-level failure (non-200 without an RPC error body, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class WeekYearOfflineError(WeekYearTransportError):
    """The server could not be reached at all.

    Raised for connection refusals, DNS failures and timeouts. The
    auto-save coordinator treats it as a connectivity failure and moves
    the payload to the offline queue instead of surfacing an error.
    """


class WeekYearApiError(WeekYearError):
    """The server answered with an RPC error envelope."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        procedure: str = "",
        http_status: int | None = None,
    ) -> None:
        self.code = code
        self.procedure = procedure
        self.http_status = http_status
        super().__init__(message)


class WeekYearAuthenticationError(WeekYearApiError):
    """Missing or expired session cookie (``UNAUTHORIZED``)."""


class WeekYearValidationError(WeekYearApiError):
    """Input rejected by the server-side schema (``BAD_REQUEST``)."""


class WeekYearNotFoundError(WeekYearApiError):
    """Record does not exist or is not owned by the session user."""
