"""SessionEntry model — durable key/value rows backing the client session.

Provides ``SessionEntryBase`` (non-table) and ``SessionEntry`` (concrete table).
Subclass ``SessionEntryBase`` with ``table=True`` and a custom ``__tablename__``
to keep several profiles in one database.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class SessionEntryBase(SQLModel):
    """Base fields for a stored session value. Subclass with ``table=True`` for a concrete table."""

    key: str = Field(primary_key=True)
    value: str = Field(default="")
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )


class SessionEntry(SessionEntryBase, table=True):
    """Default session table — ``minidrive_session_entries``."""

    __tablename__ = "minidrive_session_entries"
