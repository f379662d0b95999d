"""Result types: AuthResult, ListResult, UploadResult, etc.

Facade operations never raise for API failures.  They return one of
these with ``success=False`` and a user-facing ``message`` instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from minidrive.models import FileRecord, UserProfile


@dataclass
class AuthResult:
    """Result of a login operation."""

    success: bool
    message: str
    user: UserProfile | None = None


@dataclass
class SignupResult:
    """Result of a signup operation. Signup never logs the user in."""

    success: bool
    message: str
    email: str | None = None


@dataclass
class ListResult:
    """Result of refreshing the file list."""

    success: bool
    message: str
    files: list[FileRecord] = field(default_factory=list)


@dataclass
class UploadResult:
    """Result of an upload operation."""

    success: bool
    message: str
    file: FileRecord | None = None


@dataclass
class DownloadResult:
    """Result of a download operation.

    ``content`` is always populated on success; ``saved_to`` only when a
    destination was given.
    """

    success: bool
    message: str
    file_id: str | None = None
    file_name: str | None = None
    content_type: str | None = None
    content: bytes | None = None
    saved_to: Path | None = None


@dataclass
class DeleteResult:
    """Result of a delete operation."""

    success: bool
    message: str
    file_id: str | None = None


@dataclass
class ShareResult:
    """Result of a share operation.

    ``unconfirmed`` is set when the request failed without a response and
    the refreshed list did not show the recipient either.  The share may
    or may not have been applied.
    """

    success: bool
    message: str
    file_id: str | None = None
    recipient: str | None = None
    unconfirmed: bool = False
