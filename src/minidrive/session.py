"""Session storage backends and the SessionContext lifecycle object.

The session is two durable string entries, ``token`` and ``user``, that
must be present together.  ``SessionContext`` owns them in memory, mirrors
every change to a ``SessionStorage`` backend, and is handed to the API
client explicitly rather than read from a global.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from sqlmodel import Session, create_engine, select

from minidrive.models import SessionEntry, UserProfile

if TYPE_CHECKING:
    from sqlalchemy import Engine

    from minidrive.models import SessionEntryBase

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"


# ------------------------------------------------------------------
# Storage backends
# ------------------------------------------------------------------


@runtime_checkable
class SessionStorage(Protocol):
    """Durable string key/value store for session entries."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStorage:
    """Dict-backed storage.  Survives nothing; useful for tests and one-off scripts."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __len__(self) -> int:
        return len(self._data)


class SQLiteStorage:
    """SQLite-backed storage using a SQLModel key/value table.

    Constructor receives the database path (created on first use) and,
    optionally, a custom entry model with a different table name.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        entry_model: type[SessionEntryBase] = SessionEntry,
    ) -> None:
        self._path = Path(path).expanduser()
        self._model = entry_model
        self._engine: Engine | None = None

    @property
    def path(self) -> Path:
        return self._path

    def _ensure_engine(self) -> Engine:
        if self._engine is None:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            engine = create_engine(f"sqlite:///{self._path}", echo=False)
            self._model.__table__.create(engine, checkfirst=True)  # type: ignore[attr-defined]
            self._engine = engine
        return self._engine

    def get(self, key: str) -> str | None:
        with Session(self._ensure_engine()) as session:
            entry = session.get(self._model, key)
            return entry.value if entry is not None else None

    def set(self, key: str, value: str) -> None:
        with Session(self._ensure_engine()) as session:
            entry = session.get(self._model, key)
            if entry is None:
                entry = self._model(key=key, value=value)
            else:
                entry.value = value
                entry.updated_at = datetime.now(UTC)
            session.add(entry)
            session.commit()

    def remove(self, key: str) -> None:
        with Session(self._ensure_engine()) as session:
            entry = session.get(self._model, key)
            if entry is not None:
                session.delete(entry)
                session.commit()

    def keys(self) -> list[str]:
        """All stored keys, sorted."""
        model = self._model
        with Session(self._ensure_engine()) as session:
            return sorted(session.exec(select(model.key)).all())

    def close(self) -> None:
        """Dispose of the engine.  The storage reopens lazily on next use."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None


# ------------------------------------------------------------------
# Session context
# ------------------------------------------------------------------


class SessionContext:
    """Current user and bearer token, mirrored to durable storage.

    Lifecycle: ``restore()`` once at start (done by the constructor),
    ``login()`` on successful authentication, ``logout()`` to destroy.
    """

    def __init__(self, storage: SessionStorage | None = None, *, restore: bool = True) -> None:
        self._storage: SessionStorage = storage if storage is not None else MemoryStorage()
        self._token: str | None = None
        self._user: UserProfile | None = None
        if restore:
            self.restore()

    @property
    def storage(self) -> SessionStorage:
        return self._storage

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def user(self) -> UserProfile | None:
        return self._user

    def is_authenticated(self) -> bool:
        return bool(self._token)

    def restore(self) -> bool:
        """Rehydrate from storage.  Returns True if a session was found.

        Both entries must be present and the profile must parse.  Any
        partial leftover is cleared so storage and memory agree.
        """
        token = self._storage.get(TOKEN_KEY)
        raw_user = self._storage.get(USER_KEY)

        if not token and not raw_user:
            self._token = None
            self._user = None
            return False

        user: UserProfile | None = None
        if token and raw_user:
            try:
                user = UserProfile.from_json(raw_user)
            except ValueError:
                logger.warning("Discarding unreadable stored user profile", exc_info=True)

        if user is None:
            logger.warning("Stored session is incomplete; starting logged out")
            self._clear()
            return False

        self._token = token
        self._user = user
        logger.debug("Restored session for %s", user.email)
        return True

    def login(self, token: str, user: UserProfile) -> None:
        """Persist *token* and *user* and make them current."""
        if not token:
            raise ValueError("Cannot log in with an empty token")
        self._storage.set(TOKEN_KEY, token)
        self._storage.set(USER_KEY, user.to_json())
        self._token = token
        self._user = user

    def logout(self) -> None:
        """Forget the session in memory and in storage."""
        self._clear()

    def _clear(self) -> None:
        self._storage.remove(TOKEN_KEY)
        self._storage.remove(USER_KEY)
        self._token = None
        self._user = None
