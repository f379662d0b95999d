"""Tests for FileRecord, UserProfile and SessionEntry models."""

from __future__ import annotations

from datetime import datetime

import pytest
from pydantic import ValidationError

from minidrive.models import FileRecord, SessionEntry, UserProfile, unique_emails

API_PAYLOAD = {
    "id": "65f0c0ffee",
    "fileName": "uuid_report.pdf",
    "originalFileName": "report.pdf",
    "fileType": "application/pdf",
    "fileSize": 2048,
    "filePath": "s3://bucket/report.pdf",
    "ownerEmail": "alice@example.com",
    "uploadedAt": "2026-05-01T10:15:30",
    "encryptionKey": "secret",
    "sharedWith": ["bob@example.com"],
}


# ---------------------------------------------------------------------------
# FileRecord
# ---------------------------------------------------------------------------


class TestFileRecordFromApi:
    def test_maps_camel_case(self):
        record = FileRecord.from_api(API_PAYLOAD)
        assert record.id == "65f0c0ffee"
        assert record.original_file_name == "report.pdf"
        assert record.file_type == "application/pdf"
        assert record.file_size == 2048
        assert record.owner_email == "alice@example.com"
        assert record.uploaded_at == datetime(2026, 5, 1, 10, 15, 30)
        assert record.shared_with == ("bob@example.com",)

    def test_server_only_keys_dropped(self):
        dumped = FileRecord.from_api(API_PAYLOAD).model_dump()
        assert "encryption_key" not in dumped
        assert "encryptionKey" not in dumped
        assert "file_path" not in dumped

    def test_optional_fields(self):
        record = FileRecord.from_api(
            {"id": 7, "ownerEmail": "a@b.co", "uploadedAt": "2026-05-01T10:15:30", "fileType": None}
        )
        assert record.id == "7"
        assert record.file_type is None
        assert record.file_size == 0
        assert record.original_file_name == ""
        assert record.shared_with == ()

    def test_shared_with_deduped(self):
        payload = {**API_PAYLOAD, "sharedWith": ["b@x.co", "c@x.co", "b@x.co"]}
        assert FileRecord.from_api(payload).shared_with == ("b@x.co", "c@x.co")

    @pytest.mark.parametrize(
        "missing",
        [
            pytest.param("id", id="id"),
            pytest.param("ownerEmail", id="owner"),
            pytest.param("uploadedAt", id="uploaded-at"),
        ],
    )
    def test_required_fields(self, missing: str):
        payload = {k: v for k, v in API_PAYLOAD.items() if k != missing}
        with pytest.raises(ValidationError):
            FileRecord.from_api(payload)

    def test_negative_size_rejected(self):
        with pytest.raises(ValidationError):
            FileRecord.from_api({**API_PAYLOAD, "fileSize": -1})


class TestFileRecordHelpers:
    def test_ownership_and_sharing(self):
        record = FileRecord.from_api(API_PAYLOAD)
        assert record.is_owned_by("alice@example.com")
        assert not record.is_owned_by("bob@example.com")
        assert record.is_shared_with("bob@example.com")
        assert not record.is_shared_with("carol@example.com")


class TestUniqueEmails:
    def test_keeps_first_seen_order(self):
        assert unique_emails(["b", "a", "b", "c", "a"]) == ("b", "a", "c")

    def test_empty_and_none(self):
        assert unique_emails(None) == ()
        assert unique_emails([]) == ()
        assert unique_emails(["", None, "a"]) == ("a",)


# ---------------------------------------------------------------------------
# UserProfile
# ---------------------------------------------------------------------------


class TestUserProfile:
    def test_from_api(self):
        user = UserProfile.from_api(
            {"token": "t", "email": "a@b.co", "firstName": "Ada", "lastName": "Lovelace"}
        )
        assert user.email == "a@b.co"
        assert user.display_name == "Ada Lovelace"

    def test_json_preserves_fields(self):
        user = UserProfile(email="a@b.co", first_name="Ada", last_name="Lovelace")
        assert UserProfile.from_json(user.to_json()) == user

    def test_display_name_falls_back_to_email(self):
        assert UserProfile(email="a@b.co").display_name == "a@b.co"

    @pytest.mark.parametrize(
        "raw",
        [
            pytest.param("{broken", id="bad-json"),
            pytest.param("{}", id="no-email"),
            pytest.param('"a@b.co"', id="not-object"),
        ],
    )
    def test_from_json_rejects(self, raw: str):
        with pytest.raises(ValueError):
            UserProfile.from_json(raw)


# ---------------------------------------------------------------------------
# SessionEntry
# ---------------------------------------------------------------------------


class TestSessionEntry:
    def test_table_name(self):
        assert SessionEntry.__tablename__ == "minidrive_session_entries"

    def test_updated_at_is_aware(self):
        entry = SessionEntry(key="token", value="t")
        assert entry.updated_at.tzinfo is not None
