"""FileRecord model — metadata for one stored file as the API reports it.

The API speaks camelCase JSON; ``FileRecord.from_api`` maps it onto the
snake_case fields.  The model has no table: records live only in the
client's in-memory cache and are re-read from the API after each mutation.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlmodel import Field, SQLModel

# API key -> model field
_API_FIELDS: dict[str, str] = {
    "id": "id",
    "originalFileName": "original_file_name",
    "fileType": "file_type",
    "fileSize": "file_size",
    "uploadedAt": "uploaded_at",
    "ownerEmail": "owner_email",
}


def unique_emails(emails: Any) -> tuple[str, ...]:
    """Collapse *emails* to a tuple with duplicates removed, first-seen order kept."""
    if not emails:
        return ()
    seen: dict[str, None] = {}
    for email in emails:
        if email:
            seen.setdefault(str(email), None)
    return tuple(seen)


class FileRecord(SQLModel):
    """A file owned by exactly one user and readable by the users in ``shared_with``."""

    id: str
    original_file_name: str = Field(default="")
    file_type: str | None = Field(default=None)
    file_size: int = Field(default=0, ge=0)
    uploaded_at: datetime
    owner_email: str
    shared_with: tuple[str, ...] = Field(default=())

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> FileRecord:
        """Build a record from an API payload, ignoring server-only keys."""
        fields: dict[str, Any] = {}
        for api_key, name in _API_FIELDS.items():
            value = data.get(api_key)
            if value is not None:
                fields[name] = value
        if "id" in fields:
            fields["id"] = str(fields["id"])
        fields["shared_with"] = unique_emails(data.get("sharedWith"))
        return cls.model_validate(fields)

    def is_owned_by(self, email: str) -> bool:
        return self.owner_email == email

    def is_shared_with(self, email: str) -> bool:
        return email in self.shared_with
