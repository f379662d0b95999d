"""Tests for the minidrive command-line front end."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

import pytest

from minidrive import Drive
from minidrive.cli import build_parser, main, render_grid, render_list
from minidrive.models import FileRecord
from minidrive.session import MemoryStorage
from tests.fakes import ALICE, BOB, PASSWORD

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from minidrive.config import DriveConfig
    from tests.fakes import FakeDriveServer


@pytest.fixture
def cli_drive(server: FakeDriveServer, config: DriveConfig) -> Iterator[Drive]:
    d = Drive(config, storage=MemoryStorage(), transport=server.transport())
    yield d
    d.close()


@pytest.fixture
def logged_in(cli_drive: Drive) -> Drive:
    assert cli_drive.login(ALICE, PASSWORD).success
    return cli_drive


def _record(name: str, size: int = 1536) -> FileRecord:
    return FileRecord(
        id=f"id-{name}",
        original_file_name=name,
        file_type="text/plain",
        file_size=size,
        uploaded_at=datetime(2026, 3, 4, 9, 30),
        owner_email=ALICE,
    )


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestRender:
    def test_empty(self):
        assert render_list([]) == "No files found."
        assert render_grid([]) == "No files found."

    def test_list_rows(self):
        out = render_list([_record("a.txt"), _record("b.txt")])
        lines = out.splitlines()
        assert lines[0].startswith("ID")
        assert len(lines) == 3
        assert "a.txt" in lines[1]
        assert "1.5 KB" in lines[1]
        assert "2026-03-04 09:30" in lines[1]

    def test_long_names_truncated(self):
        out = render_list([_record("x" * 80)])
        assert "x" * 80 not in out
        assert "…" in out

    def test_grid_rows_of_three(self):
        out = render_grid([_record(f"f{i}.txt") for i in range(4)])
        first_row = out.splitlines()[0]
        assert "f0.txt" in first_row
        assert "f2.txt" in first_row
        assert "f3.txt" not in first_row
        assert "f3.txt" in out
        assert "Mar 04, 2026" in out


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class TestParser:
    def test_ls_defaults(self):
        args = build_parser().parse_args(["ls"])
        assert args.view == "myDocuments"
        assert args.sort == "newest"
        assert args.mode == "list"

    def test_rejects_unknown_sort(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["ls", "--sort", "random"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


class TestCommands:
    def test_login_and_whoami(self, cli_drive: Drive, capsys: pytest.CaptureFixture[str]):
        assert main(["login", "--email", ALICE, "--password", PASSWORD], drive=cli_drive) == 0
        assert main(["whoami"], drive=cli_drive) == 0
        out = capsys.readouterr().out
        assert f"Logged in as {ALICE}" in out
        assert f"Alice Liddell <{ALICE}>" in out

    def test_login_failure(self, cli_drive: Drive, capsys: pytest.CaptureFixture[str]):
        assert main(["login", "--email", ALICE, "--password", "wrong"], drive=cli_drive) == 1
        assert "error: Invalid credentials" in capsys.readouterr().err

    def test_whoami_logged_out(self, cli_drive: Drive, capsys: pytest.CaptureFixture[str]):
        assert main(["whoami"], drive=cli_drive) == 1
        assert "Not logged in" in capsys.readouterr().err

    def test_signup(self, cli_drive: Drive, capsys: pytest.CaptureFixture[str]):
        argv = [
            "signup",
            "--first-name", "Carol",
            "--last-name", "Danvers",
            "--email", "carol@example.com",
            "--password", "hunter22",
        ]
        assert main(argv, drive=cli_drive) == 0
        assert "Account created" in capsys.readouterr().out

    def test_ls(self, logged_in: Drive, server: FakeDriveServer, capsys: pytest.CaptureFixture[str]):
        server.add_file(ALICE, "report.pdf", file_type="application/pdf")
        server.add_file(ALICE, "photo.png", file_type="image/png")
        assert main(["ls", "--type", "pdf"], drive=logged_in) == 0
        out = capsys.readouterr().out
        assert out.startswith("My Documents")
        assert "My Documents: 2" in out
        assert "report.pdf" in out
        assert "photo.png" not in out

    def test_ls_shared_grid(
        self, logged_in: Drive, server: FakeDriveServer, capsys: pytest.CaptureFixture[str]
    ):
        server.add_file(BOB, "bobs.txt", shared_with=[ALICE])
        assert main(["ls", "--view", "shared", "--mode", "grid"], drive=logged_in) == 0
        out = capsys.readouterr().out
        assert out.startswith("Shared with me")
        assert "bobs.txt" in out

    def test_ls_requires_login(self, cli_drive: Drive, capsys: pytest.CaptureFixture[str]):
        assert main(["ls"], drive=cli_drive) == 1
        assert "Please log in first" in capsys.readouterr().err

    def test_upload_download_rm(
        self, logged_in: Drive, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ):
        src = tmp_path / "notes.txt"
        src.write_bytes(b"hello")
        assert main(["upload", str(src)], drive=logged_in) == 0
        file_id = logged_in.files[0].id

        out_dir = tmp_path / "out"
        out_dir.mkdir()
        assert main(["download", file_id, "-o", str(out_dir)], drive=logged_in) == 0
        assert (out_dir / "notes.txt").read_bytes() == b"hello"

        assert main(["rm", file_id], drive=logged_in) == 0
        out = capsys.readouterr().out
        assert "Uploaded: notes.txt" in out
        assert "Downloaded: notes.txt" in out
        assert f"Deleted: {file_id}" in out

    def test_upload_missing_file(
        self, logged_in: Drive, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ):
        assert main(["upload", str(tmp_path / "nope.txt")], drive=logged_in) == 1
        assert "Cannot read" in capsys.readouterr().err

    def test_share(self, logged_in: Drive, server: FakeDriveServer, capsys: pytest.CaptureFixture[str]):
        file_id = server.add_file(ALICE, "a.txt")
        assert main(["share", file_id, BOB], drive=logged_in) == 0
        assert f"Shared with {BOB}" in capsys.readouterr().out

    def test_share_unconfirmed(
        self, logged_in: Drive, server: FakeDriveServer, capsys: pytest.CaptureFixture[str]
    ):
        file_id = server.add_file(ALICE, "a.txt")
        server.unreachable.add("share")
        assert main(["share", file_id, BOB], drive=logged_in) == 1
        assert "warning: Share request could not be confirmed" in capsys.readouterr().err

    def test_logout(self, logged_in: Drive, capsys: pytest.CaptureFixture[str]):
        assert main(["logout"], drive=logged_in) == 0
        assert not logged_in.is_authenticated
        assert "Logged out" in capsys.readouterr().out

    def test_bad_timeout_env(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ):
        monkeypatch.setenv("MINIDRIVE_TIMEOUT", "soon")
        assert main(["whoami"]) == 1
        assert "MINIDRIVE_TIMEOUT" in capsys.readouterr().err
