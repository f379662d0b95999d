"""DriveClient — thin async HTTP wrapper around the drive REST API.

Every method is a single request.  There is no retry, no backoff and no
request deduplication: a failed call raises a ``NetworkOrServerError``
subclass and the caller decides what to show.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from email.message import Message
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from minidrive.config import DriveConfig
from minidrive.exceptions import (
    ApiError,
    AuthenticationRequiredError,
    ShareNotConfirmedError,
    TransportError,
)
from minidrive.models import FileRecord, UserProfile
from minidrive.utils import guess_content_type

if TYPE_CHECKING:
    from collections.abc import Generator

    from minidrive.session import SessionContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Download:
    """Raw bytes of a downloaded file.

    Attributes:
        content: File body.
        content_type: MIME type reported by the server.
        file_name: Name from ``Content-Disposition`` when the server sends one.
    """

    content: bytes
    content_type: str
    file_name: str | None = None


class BearerAuth(httpx.Auth):
    """Attach ``Authorization: Bearer <token>`` from the session, when there is one."""

    def __init__(self, session: SessionContext) -> None:
        self._session = session

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        token = self._session.token
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        yield request


def _error_detail(response: httpx.Response) -> str:
    """Best-effort server explanation: JSON ``message``/``error`` or the body text."""
    try:
        payload = response.json()
    except ValueError:
        return response.text.strip()
    if isinstance(payload, dict):
        for key in ("message", "error", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
        return ""
    if isinstance(payload, str):
        return payload
    return ""


def _filename_from_disposition(header: str | None) -> str | None:
    if not header:
        return None
    msg = Message()
    msg["content-disposition"] = header
    name = msg.get_filename()
    return name or None


class DriveClient:
    """Async client for the drive API.

    The session is injected, not looked up: the client reads the current
    token from it on every request.

    Usage::

        session = SessionContext(SQLiteStorage("~/.minidrive/session.db"))
        async with DriveClient(session) as client:
            token, user = await client.authenticate("a@b.com", "secret")
            session.login(token, user)
            files = await client.list_files()
    """

    def __init__(
        self,
        session: SessionContext,
        config: DriveConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._session = session
        self._config = config or DriveConfig()
        self._transport = transport
        self._owns_http = http_client is None
        self._http = http_client or self._new_http()
        self._auth = BearerAuth(session)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _new_http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            transport=self._transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> DriveClient:
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http and not self._http.is_closed:
            await self._http.aclose()

    async def logout(self) -> None:
        """Drop pooled connections held for the old session.

        The API keeps no server-side session, so there is nothing to
        invalidate remotely.
        """
        if self._owns_http and not self._http.is_closed:
            await self._http.aclose()
            self._http = self._new_http()

    @property
    def session(self) -> SessionContext:
        return self._session

    @property
    def config(self) -> DriveConfig:
        return self._config

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        logger.debug("%s %s", method, url)
        try:
            response = await self._http.request(method, url, auth=self._auth, **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e
        if response.is_error:
            raise ApiError(response.status_code, _error_detail(response))
        return response

    def _require_token(self) -> None:
        if not self._session.is_authenticated():
            raise AuthenticationRequiredError("No session token; log in first")

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(response.status_code, "Response body is not JSON") from e

    @staticmethod
    def _file_record(payload: Any) -> FileRecord:
        if not isinstance(payload, dict):
            raise ApiError(200, "Unexpected file payload")
        try:
            return FileRecord.from_api(payload)
        except PydanticValidationError as e:
            raise ApiError(200, f"Malformed file record: {e}") from e

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    async def authenticate(self, email: str, password: str) -> tuple[str, UserProfile]:
        """Exchange credentials for ``(token, profile)``.

        Accepts both the flat ``{token, email, firstName, lastName}`` shape
        and a nested ``{token, user: {...}}`` shape.
        """
        response = await self._request(
            "POST", "/auth/login", json={"email": email, "password": password}
        )
        payload = self._json(response)
        if not isinstance(payload, dict) or not payload.get("token"):
            raise ApiError(response.status_code, "Login response has no token")
        profile_data = payload.get("user") if isinstance(payload.get("user"), dict) else payload
        user = UserProfile.from_api(profile_data)
        if not user.email:
            user = UserProfile(email=email, first_name=user.first_name, last_name=user.last_name)
        return str(payload["token"]), user

    async def register(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
    ) -> UserProfile:
        """Create an account.  The returned token, if any, is ignored."""
        response = await self._request(
            "POST",
            "/auth/signup",
            json={
                "firstName": first_name,
                "lastName": last_name,
                "email": email,
                "password": password,
            },
        )
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if isinstance(payload, dict) and payload.get("email"):
            return UserProfile.from_api(payload)
        return UserProfile(email=email, first_name=first_name, last_name=last_name)

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    async def list_files(self) -> list[FileRecord]:
        """All files the user owns or has been shared, unordered, one entry per id."""
        self._require_token()
        response = await self._request("GET", "/files")
        payload = self._json(response)
        if not isinstance(payload, list):
            raise ApiError(response.status_code, "Expected a list of files")

        files: dict[str, FileRecord] = {}
        for item in payload:
            record = self._file_record(item)
            files.setdefault(record.id, record)
        return list(files.values())

    async def upload_file(
        self,
        content: bytes,
        file_name: str,
        content_type: str | None = None,
    ) -> FileRecord:
        """Upload *content* as a multipart ``file`` field."""
        self._require_token()
        mime = content_type or guess_content_type(file_name)
        response = await self._request(
            "POST",
            "/files/upload",
            files={"file": (file_name, content, mime)},
        )
        return self._file_record(self._json(response))

    async def download_file(self, file_id: str) -> Download:
        self._require_token()
        response = await self._request("GET", f"/files/download/{file_id}")
        return Download(
            content=response.content,
            content_type=response.headers.get("content-type", "application/octet-stream"),
            file_name=_filename_from_disposition(response.headers.get("content-disposition")),
        )

    async def delete_file(self, file_id: str) -> None:
        self._require_token()
        await self._request("DELETE", f"/files/{file_id}")

    async def share_file(self, file_id: str, recipient_email: str) -> FileRecord | None:
        """Grant *recipient_email* read access to *file_id*.

        Raises ``ShareNotConfirmedError`` when no response arrived, since
        the share may have been applied anyway.  Returns the updated record
        when the server sends one.
        """
        self._require_token()
        try:
            response = await self._request(
                "POST",
                "/files/share",
                json={"fileId": file_id, "shareWithEmail": recipient_email},
            )
        except TransportError as e:
            raise ShareNotConfirmedError(str(e)) from e

        if not response.content:
            return None
        try:
            payload = response.json()
        except ValueError:
            return None
        if not isinstance(payload, dict) or "id" not in payload:
            return None
        return self._file_record(payload)
