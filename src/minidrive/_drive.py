"""Drive — synchronous wrapper around DriveAsync."""

from __future__ import annotations

import asyncio
import threading
from typing import TYPE_CHECKING, Any

from minidrive._drive_async import DriveAsync

if TYPE_CHECKING:
    from datetime import datetime
    from pathlib import Path

    import httpx

    from minidrive.config import DriveConfig
    from minidrive.models import FileRecord, UserProfile
    from minidrive.session import SessionStorage
    from minidrive.types import (
        AuthResult,
        DeleteResult,
        DownloadResult,
        ListResult,
        ShareResult,
        SignupResult,
        UploadResult,
    )
    from minidrive.views import ViewSelector, ViewState


class Drive:
    """Synchronous drive client backed by a private event loop in a daemon thread.

    All work happens in ``DriveAsync``; the loop bridges the gap so
    callers can use the drive from plain scripts, the CLI, or a REPL.

    Usage::

        with Drive() as drive:
            if not drive.is_authenticated:
                drive.login("alice@example.com", "secret")
            drive.upload("notes.txt")
            print([f.original_file_name for f in drive.visible_files()])
    """

    def __init__(
        self,
        config: DriveConfig | None = None,
        *,
        storage: SessionStorage | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._closed = False

        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._loop.run_forever, daemon=True)
        self._thread.start()

        # Build on the loop thread so storage connections live there
        self._async: DriveAsync = self._run(self._create(config, storage, transport))

    @staticmethod
    async def _create(
        config: DriveConfig | None,
        storage: SessionStorage | None,
        transport: httpx.AsyncBaseTransport | None,
    ) -> DriveAsync:
        return DriveAsync(config, storage=storage, transport=transport)

    def _run(self, coro: Any) -> Any:
        """Submit *coro* to the private loop and block for the result."""
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the HTTP client, stop the event loop and join the thread."""
        if self._closed:
            return
        self._closed = True

        try:
            self._run(self._async.close())
        finally:
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join(timeout=5)

    def __enter__(self) -> Drive:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def signup(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        confirm_password: str,
    ) -> SignupResult:
        return self._run(
            self._async.signup(first_name, last_name, email, password, confirm_password)
        )

    def login(self, email: str, password: str) -> AuthResult:
        return self._run(self._async.login(email, password))

    def logout(self) -> None:
        self._run(self._async.logout())

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def refresh(self) -> ListResult:
        return self._run(self._async.refresh())

    def upload(
        self,
        source: str | Path | bytes,
        file_name: str | None = None,
        content_type: str | None = None,
    ) -> UploadResult:
        return self._run(self._async.upload(source, file_name, content_type))

    def download(self, file_id: str, dest: str | Path | None = None) -> DownloadResult:
        return self._run(self._async.download(file_id, dest))

    def delete(self, file_id: str) -> DeleteResult:
        return self._run(self._async.delete(file_id))

    def share(self, file_id: str, recipient_email: str) -> ShareResult:
        return self._run(self._async.share(file_id, recipient_email))

    # ------------------------------------------------------------------
    # Views (sync already; the pipeline does no I/O)
    # ------------------------------------------------------------------

    def visible_files(self, *, now: datetime | None = None) -> list[FileRecord]:
        return self._async.visible_files(now=now)

    def counts(self, *, now: datetime | None = None) -> dict[ViewSelector, int]:
        return self._async.counts(now=now)

    def get_file(self, file_id: str) -> FileRecord | None:
        return self._async.get_file(file_id)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def user(self) -> UserProfile | None:
        return self._async.user

    @property
    def is_authenticated(self) -> bool:
        return self._async.is_authenticated

    @property
    def files(self) -> list[FileRecord]:
        return self._async.files

    @property
    def view_state(self) -> ViewState:
        return self._async.view_state

    @property
    def aio(self) -> DriveAsync:
        """The underlying ``DriveAsync`` (for advanced async use)."""
        return self._async
