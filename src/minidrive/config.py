"""DriveConfig — API location, timeouts and local data paths."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_API_URL = "http://localhost:8080/api"
DEFAULT_TIMEOUT = 30.0
DEFAULT_DATA_DIR = Path.home() / ".minidrive"


@dataclass
class DriveConfig:
    """Configuration for a drive client."""

    base_url: str = DEFAULT_API_URL
    """Root of the drive API, e.g. ``http://localhost:8080/api``."""

    timeout: float = DEFAULT_TIMEOUT
    """Per-request timeout in seconds."""

    data_dir: Path = field(default_factory=lambda: DEFAULT_DATA_DIR)
    """Directory for client-side state (the session database)."""

    session_db: Path | None = None
    """SQLite file holding the session.  Defaults to ``data_dir / "session.db"``."""

    def __post_init__(self) -> None:
        self.base_url = self.base_url.rstrip("/")
        self.data_dir = Path(self.data_dir).expanduser()
        if self.session_db is None:
            self.session_db = self.data_dir / "session.db"
        else:
            self.session_db = Path(self.session_db).expanduser()

    @classmethod
    def from_env(cls, **overrides: object) -> DriveConfig:
        """Build a config from ``MINIDRIVE_*`` environment variables.

        Keyword *overrides* that are not ``None`` win over the environment.
        """
        env = os.environ
        kw: dict[str, object] = {}
        if env.get("MINIDRIVE_API_URL"):
            kw["base_url"] = env["MINIDRIVE_API_URL"]
        timeout = env.get("MINIDRIVE_TIMEOUT")
        if timeout:
            try:
                kw["timeout"] = float(timeout)
            except ValueError:
                raise ValueError(
                    f"MINIDRIVE_TIMEOUT must be a number, got {timeout!r}"
                ) from None
        if env.get("MINIDRIVE_DATA_DIR"):
            kw["data_dir"] = Path(env["MINIDRIVE_DATA_DIR"])
        kw.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**kw)  # type: ignore[arg-type]
