"""SQLModel models for minidrive."""

from minidrive.models.files import FileRecord, unique_emails
from minidrive.models.sessions import SessionEntry, SessionEntryBase
from minidrive.models.users import UserProfile

__all__ = [
    "FileRecord",
    "SessionEntry",
    "SessionEntryBase",
    "UserProfile",
    "unique_emails",
]
