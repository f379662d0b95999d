"""DriveAsync — primary async facade: session, API client, file cache, view state."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from minidrive.client import DriveClient
from minidrive.config import DriveConfig
from minidrive.exceptions import (
    ApiError,
    AuthenticationRequiredError,
    DriveError,
    NetworkOrServerError,
    ShareNotConfirmedError,
    ValidationError,
)
from minidrive.session import SessionContext, SQLiteStorage
from minidrive.types import (
    AuthResult,
    DeleteResult,
    DownloadResult,
    ListResult,
    ShareResult,
    SignupResult,
    UploadResult,
)
from minidrive.utils import validate_email, validate_signup
from minidrive.views import ViewSelector, ViewState, group_by_view

if TYPE_CHECKING:
    from datetime import datetime

    import httpx

    from minidrive.models import FileRecord, UserProfile
    from minidrive.session import SessionStorage

logger = logging.getLogger(__name__)

LOGIN_REQUIRED = "Please log in first"
LOAD_FAILED = "Failed to load files"
UPLOAD_FAILED = "Failed to upload file"
DOWNLOAD_FAILED = "Failed to download file"
DELETE_FAILED = "Failed to delete file"
SHARE_FAILED = "Failed to share file"
SHARE_UNCONFIRMED = "Share request could not be confirmed"
LOGIN_FAILED = "Login failed. Please check your credentials."
SIGNUP_FAILED = "Signup failed. Please try again."


def _safe_file_name(name: str | None) -> str:
    """Last path component of *name*, or ``""`` if nothing usable is left."""
    if not name:
        return ""
    base = PurePosixPath(name.replace("\\", "/")).name
    return "" if base in (".", "..") else base


class DriveAsync:
    """Async facade over the drive API.

    The server's file list is the single source of truth.  ``files`` is
    a cache that is re-read in full after every upload, delete and share;
    nothing is patched locally.  API failures come back as results with
    ``success=False`` and leave the cache and view state as they were.

    Usage::

        async with DriveAsync(DriveConfig(base_url="http://localhost:8080/api")) as drive:
            await drive.login("alice@example.com", "secret")
            await drive.upload("report.pdf")
            drive.view_state.sort_key = SortKey.NAME
            for f in drive.visible_files():
                print(f.original_file_name)
    """

    def __init__(
        self,
        config: DriveConfig | None = None,
        *,
        storage: SessionStorage | None = None,
        client: DriveClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._owned_storage: SQLiteStorage | None = None
        if client is not None:
            self._config = config or client.config
            self._session = client.session
            self._client = client
        else:
            self._config = config or DriveConfig()
            if storage is None:
                if self._config.session_db is None:
                    raise ValueError("DriveConfig.session_db must be set")
                storage = self._owned_storage = SQLiteStorage(self._config.session_db)
            self._session = SessionContext(storage)
            self._client = DriveClient(self._session, self._config, transport=transport)

        self._files: list[FileRecord] = []
        self._view_state = ViewState()
        self._loading = False
        self._closed = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> DriveAsync:
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.close()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._client.aclose()
        finally:
            if self._owned_storage is not None:
                self._owned_storage.close()

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    async def signup(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        confirm_password: str,
    ) -> SignupResult:
        """Create an account.  Does not log in; call ``login`` next."""
        try:
            validate_signup(first_name, last_name, email, password, confirm_password)
        except ValidationError as e:
            return SignupResult(success=False, message=str(e))

        email = email.strip()
        try:
            user = await self._client.register(first_name.strip(), last_name.strip(), email, password)
        except ApiError as e:
            logger.warning("Signup failed for %s: %s", email, e)
            return SignupResult(success=False, message=e.detail or SIGNUP_FAILED)
        except NetworkOrServerError as e:
            logger.warning("Signup failed for %s: %s", email, e)
            return SignupResult(success=False, message=SIGNUP_FAILED)

        return SignupResult(
            success=True,
            message=f"Account created for {user.email}. Please log in.",
            email=user.email,
        )

    async def login(self, email: str, password: str) -> AuthResult:
        """Authenticate, persist the session and load the file list."""
        email = email.strip()
        try:
            token, user = await self._client.authenticate(email, password)
        except ApiError as e:
            logger.warning("Login failed for %s: %s", email, e)
            return AuthResult(success=False, message=e.detail or LOGIN_FAILED)
        except NetworkOrServerError as e:
            logger.warning("Login failed for %s: %s", email, e)
            return AuthResult(success=False, message=LOGIN_FAILED)

        self._session.login(token, user)
        self._view_state.reset()
        self._files = []
        await self.refresh()
        return AuthResult(success=True, message=f"Logged in as {user.email}", user=user)

    async def logout(self) -> None:
        """Destroy the session and drop the cache and view selections."""
        self._session.logout()
        await self._client.logout()
        self._files = []
        self._view_state.reset()

    # ------------------------------------------------------------------
    # File list
    # ------------------------------------------------------------------

    async def refresh(self) -> ListResult:
        """Re-read the full file list from the API into the cache."""
        if not self._session.is_authenticated():
            return ListResult(success=False, message=LOGIN_REQUIRED)

        self._loading = True
        try:
            files = await self._client.list_files()
        except AuthenticationRequiredError:
            return ListResult(success=False, message=LOGIN_REQUIRED)
        except NetworkOrServerError as e:
            logger.warning("List files failed: %s", e)
            return ListResult(success=False, message=LOAD_FAILED)
        finally:
            self._loading = False

        self._files = files
        return ListResult(
            success=True,
            message=f"Loaded {len(files)} file(s)",
            files=list(files),
        )

    async def _refresh_after_mutation(self) -> None:
        result = await self.refresh()
        if not result.success:
            logger.warning("Refresh after mutation failed: %s", result.message)

    def visible_files(self, *, now: datetime | None = None) -> list[FileRecord]:
        """The cached list run through the pipeline with the current view state."""
        user = self._session.user
        if user is None:
            return []
        return self._view_state.apply(self._files, user.email, now=now)

    def counts(self, *, now: datetime | None = None) -> dict[ViewSelector, int]:
        """Number of files in each view, ignoring search and filters."""
        user = self._session.user
        if user is None:
            return {view: 0 for view in ViewSelector}
        groups = group_by_view(self._files, user.email, now=now)
        return {view: len(files) for view, files in groups.items()}

    def get_file(self, file_id: str) -> FileRecord | None:
        """Look up a cached record by id."""
        for f in self._files:
            if f.id == file_id:
                return f
        return None

    # ------------------------------------------------------------------
    # Mutations (each followed by a full refresh)
    # ------------------------------------------------------------------

    async def upload(
        self,
        source: str | Path | bytes,
        file_name: str | None = None,
        content_type: str | None = None,
    ) -> UploadResult:
        """Upload a local file (path) or raw bytes (``file_name`` required)."""
        if not self._session.is_authenticated():
            return UploadResult(success=False, message=LOGIN_REQUIRED)

        if isinstance(source, bytes):
            if not file_name:
                raise ValueError("file_name is required when uploading raw bytes")
            content = source
        else:
            path = Path(source).expanduser()
            try:
                content = path.read_bytes()
            except OSError as e:
                logger.warning("Cannot read %s: %s", path, e)
                return UploadResult(success=False, message=f"Cannot read {path}: {e.strerror or e}")
            file_name = file_name or path.name

        self._loading = True
        try:
            record = await self._client.upload_file(content, file_name, content_type)
        except DriveError as e:
            logger.warning("Upload failed for %s: %s", file_name, e)
            return UploadResult(success=False, message=UPLOAD_FAILED)
        finally:
            self._loading = False

        await self._refresh_after_mutation()
        return UploadResult(success=True, message=f"Uploaded: {file_name}", file=record)

    async def download(self, file_id: str, dest: str | Path | None = None) -> DownloadResult:
        """Fetch a file's bytes, writing them to *dest* when given.

        If *dest* is an existing directory the file is saved inside it
        under its original name.
        """
        if not self._session.is_authenticated():
            return DownloadResult(success=False, message=LOGIN_REQUIRED, file_id=file_id)

        try:
            download = await self._client.download_file(file_id)
        except DriveError as e:
            logger.warning("Download failed for %s: %s", file_id, e)
            return DownloadResult(success=False, message=DOWNLOAD_FAILED, file_id=file_id)

        cached = self.get_file(file_id)
        server_name = (
            cached.original_file_name if cached is not None and cached.original_file_name
            else download.file_name
        )
        # Server-supplied names never carry directory parts
        file_name = _safe_file_name(server_name) or file_id

        saved_to: Path | None = None
        if dest is not None:
            target = Path(dest).expanduser()
            if target.is_dir():
                target = target / file_name
            try:
                target.write_bytes(download.content)
            except OSError as e:
                logger.warning("Cannot write %s: %s", target, e)
                return DownloadResult(success=False, message=DOWNLOAD_FAILED, file_id=file_id)
            saved_to = target

        return DownloadResult(
            success=True,
            message=f"Downloaded: {file_name}",
            file_id=file_id,
            file_name=file_name,
            content_type=download.content_type,
            content=download.content,
            saved_to=saved_to,
        )

    async def delete(self, file_id: str) -> DeleteResult:
        if not self._session.is_authenticated():
            return DeleteResult(success=False, message=LOGIN_REQUIRED, file_id=file_id)

        try:
            await self._client.delete_file(file_id)
        except DriveError as e:
            logger.warning("Delete failed for %s: %s", file_id, e)
            return DeleteResult(success=False, message=DELETE_FAILED, file_id=file_id)

        await self._refresh_after_mutation()
        return DeleteResult(success=True, message=f"Deleted: {file_id}", file_id=file_id)

    async def share(self, file_id: str, recipient_email: str) -> ShareResult:
        """Share *file_id* with *recipient_email*.

        A request that fails without a response is not reported as
        success.  The list is refreshed anyway, and if the recipient now
        shows up in ``shared_with`` the share counts as confirmed.
        Otherwise the result carries ``unconfirmed=True``.
        """
        user = self._session.user
        if user is None or not self._session.is_authenticated():
            return ShareResult(success=False, message=LOGIN_REQUIRED, file_id=file_id)

        try:
            recipient = validate_email(recipient_email)
        except ValidationError as e:
            return ShareResult(success=False, message=str(e), file_id=file_id)

        cached = self.get_file(file_id)
        if cached is not None and not cached.is_owned_by(user.email):
            return ShareResult(
                success=False,
                message="Only the owner can share this file",
                file_id=file_id,
                recipient=recipient,
            )
        if recipient == user.email:
            return ShareResult(
                success=False,
                message="You cannot share a file with yourself",
                file_id=file_id,
                recipient=recipient,
            )

        try:
            await self._client.share_file(file_id, recipient)
        except ShareNotConfirmedError as e:
            logger.warning("Share of %s with %s not confirmed: %s", file_id, recipient, e)
            await self._refresh_after_mutation()
            refreshed = self.get_file(file_id)
            if refreshed is not None and refreshed.is_shared_with(recipient):
                return ShareResult(
                    success=True,
                    message=f"Shared with {recipient}",
                    file_id=file_id,
                    recipient=recipient,
                )
            return ShareResult(
                success=False,
                message=SHARE_UNCONFIRMED,
                file_id=file_id,
                recipient=recipient,
                unconfirmed=True,
            )
        except DriveError as e:
            logger.warning("Share failed for %s: %s", file_id, e)
            return ShareResult(
                success=False, message=SHARE_FAILED, file_id=file_id, recipient=recipient
            )

        await self._refresh_after_mutation()
        return ShareResult(
            success=True,
            message=f"Shared with {recipient}",
            file_id=file_id,
            recipient=recipient,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def user(self) -> UserProfile | None:
        return self._session.user

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated()

    @property
    def files(self) -> list[FileRecord]:
        """Cached file list as last read from the API (unordered)."""
        return list(self._files)

    @property
    def view_state(self) -> ViewState:
        return self._view_state

    @property
    def loading(self) -> bool:
        """True while the list is being fetched or an upload is in flight."""
        return self._loading

    @property
    def session(self) -> SessionContext:
        return self._session

    @property
    def client(self) -> DriveClient:
        return self._client

    @property
    def config(self) -> DriveConfig:
        return self._config
