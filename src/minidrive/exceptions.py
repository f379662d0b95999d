"""Custom exception hierarchy for the minidrive client."""

from __future__ import annotations


class DriveError(Exception):
    """Base exception for all minidrive errors."""


class NetworkOrServerError(DriveError):
    """Raised when a call to the drive API fails for any reason."""


class ApiError(NetworkOrServerError):
    """Raised when the API answers with a non-2xx status.

    Attributes:
        status_code: HTTP status of the response.
        detail: Server-provided explanation (body text or JSON ``message``).
    """

    def __init__(self, status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"HTTP {status_code}: {detail}" if detail else f"HTTP {status_code}")


class TransportError(NetworkOrServerError):
    """Raised when no usable response arrives (connect error, timeout, etc.)."""


class ShareNotConfirmedError(NetworkOrServerError):
    """Raised when a share request failed without a response.

    The share may still have been applied server-side; re-read the file
    list to find out.
    """


class AuthenticationRequiredError(DriveError):
    """Raised when a file operation is attempted without a session token."""


class ValidationError(DriveError):
    """Raised when client-side input checks fail (signup form, share email)."""
