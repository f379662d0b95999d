"""Command-line front end for minidrive.

Usage:
    minidrive signup --first-name Ada --last-name Lovelace --email ada@example.com
    minidrive login --email ada@example.com
    minidrive ls --view dashboard --sort name --mode list
    minidrive upload report.pdf
    minidrive download <file-id> -o ~/Downloads
    minidrive share <file-id> bob@example.com
    minidrive rm <file-id>
    minidrive logout
"""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from typing import TYPE_CHECKING

from minidrive._drive import Drive
from minidrive.config import DriveConfig
from minidrive.utils import format_size
from minidrive.views import DateFilter, SortKey, TypeFilter, ViewMode, ViewSelector

if TYPE_CHECKING:
    from collections.abc import Sequence

    from minidrive.models import FileRecord

_VIEW_TITLES = {
    ViewSelector.DASHBOARD: "Dashboard (last 7 days)",
    ViewSelector.MY_DOCUMENTS: "My Documents",
    ViewSelector.SHARED: "Shared with me",
}

_GRID_COLUMNS = 3
_GRID_WIDTH = 26


# ------------------------------------------------------------------
# Rendering
# ------------------------------------------------------------------


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 1] + "…"


def render_list(files: Sequence[FileRecord]) -> str:
    """Table view: one row per file."""
    if not files:
        return "No files found."
    header = f"{'ID':<26} {'NAME':<32} {'TYPE':<22} {'SIZE':>9}  {'UPLOADED':<16}  OWNER"
    rows = [header]
    for f in files:
        rows.append(
            f"{_truncate(f.id, 26):<26} "
            f"{_truncate(f.original_file_name, 32):<32} "
            f"{_truncate(f.file_type or '-', 22):<22} "
            f"{format_size(f.file_size):>9}  "
            f"{f.uploaded_at.strftime('%Y-%m-%d %H:%M'):<16}  "
            f"{f.owner_email}"
        )
    return "\n".join(rows)


def render_grid(files: Sequence[FileRecord]) -> str:
    """Card view: name, size and date per card, several cards per row."""
    if not files:
        return "No files found."
    cards = [
        (
            _truncate(f.original_file_name, _GRID_WIDTH),
            f"{format_size(f.file_size)} · {f.uploaded_at.strftime('%b %d, %Y')}",
            _truncate(f"id: {f.id}", _GRID_WIDTH),
        )
        for f in files
    ]
    lines: list[str] = []
    for start in range(0, len(cards), _GRID_COLUMNS):
        row = cards[start : start + _GRID_COLUMNS]
        for part in range(3):
            lines.append("  ".join(f"{card[part]:<{_GRID_WIDTH}}" for card in row).rstrip())
        lines.append("")
    return "\n".join(lines).rstrip()


# ------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------


def _fail(message: str) -> int:
    print(f"error: {message}", file=sys.stderr)
    return 1


def _password(args: argparse.Namespace, prompt: str = "Password: ") -> str:
    return args.password if args.password is not None else getpass.getpass(prompt)


def cmd_signup(drive: Drive, args: argparse.Namespace) -> int:
    password = _password(args)
    confirm = args.password if args.password is not None else getpass.getpass("Confirm password: ")
    result = drive.signup(args.first_name, args.last_name, args.email, password, confirm)
    if not result.success:
        return _fail(result.message)
    print(result.message)
    return 0


def cmd_login(drive: Drive, args: argparse.Namespace) -> int:
    result = drive.login(args.email, _password(args))
    if not result.success:
        return _fail(result.message)
    print(result.message)
    return 0


def cmd_logout(drive: Drive, args: argparse.Namespace) -> int:
    drive.logout()
    print("Logged out")
    return 0


def cmd_whoami(drive: Drive, args: argparse.Namespace) -> int:
    user = drive.user
    if user is None:
        return _fail("Not logged in")
    print(f"{user.display_name} <{user.email}>")
    return 0


def cmd_ls(drive: Drive, args: argparse.Namespace) -> int:
    result = drive.refresh()
    if not result.success:
        return _fail(result.message)

    state = drive.view_state
    state.view = ViewSelector(args.view)
    state.type_filter = TypeFilter(args.type)
    state.date_filter = DateFilter(args.date)
    state.sort_key = SortKey(args.sort)
    state.search = args.search or ""
    state.view_mode = ViewMode(args.mode)

    counts = drive.counts()
    summary = "  ".join(f"{_VIEW_TITLES[v]}: {n}" for v, n in counts.items())
    print(f"{_VIEW_TITLES[state.view]}\n{summary}\n")

    files = drive.visible_files()
    print(render_grid(files) if state.view_mode is ViewMode.GRID else render_list(files))
    return 0


def cmd_upload(drive: Drive, args: argparse.Namespace) -> int:
    status = 0
    for path in args.paths:
        result = drive.upload(path, content_type=args.content_type)
        if result.success:
            print(result.message)
        else:
            status = _fail(f"{path}: {result.message}")
    return status


def cmd_download(drive: Drive, args: argparse.Namespace) -> int:
    drive.refresh()
    result = drive.download(args.file_id, args.output or ".")
    if not result.success:
        return _fail(result.message)
    print(f"{result.message} -> {result.saved_to}")
    return 0


def cmd_rm(drive: Drive, args: argparse.Namespace) -> int:
    result = drive.delete(args.file_id)
    if not result.success:
        return _fail(result.message)
    print(result.message)
    return 0


def cmd_share(drive: Drive, args: argparse.Namespace) -> int:
    drive.refresh()
    result = drive.share(args.file_id, args.email)
    if result.unconfirmed:
        print(
            f"warning: {result.message}; run 'minidrive ls' to check whether it applied",
            file=sys.stderr,
        )
        return 1
    if not result.success:
        return _fail(result.message)
    print(result.message)
    return 0


# ------------------------------------------------------------------
# Parser
# ------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="minidrive", description="Mini drive client")
    parser.add_argument("--api-url", help="Drive API root (env: MINIDRIVE_API_URL)")
    parser.add_argument("--data-dir", help="Local state directory (env: MINIDRIVE_DATA_DIR)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("signup", help="Create an account")
    p.add_argument("--first-name", required=True)
    p.add_argument("--last-name", required=True)
    p.add_argument("--email", required=True)
    p.add_argument("--password", help="Prompted when omitted")
    p.set_defaults(func=cmd_signup)

    p = sub.add_parser("login", help="Log in and store the session")
    p.add_argument("--email", required=True)
    p.add_argument("--password", help="Prompted when omitted")
    p.set_defaults(func=cmd_login)

    p = sub.add_parser("logout", help="Forget the stored session")
    p.set_defaults(func=cmd_logout)

    p = sub.add_parser("whoami", help="Show the logged-in user")
    p.set_defaults(func=cmd_whoami)

    p = sub.add_parser("ls", help="List files")
    p.add_argument("--view", choices=[v.value for v in ViewSelector], default=ViewSelector.MY_DOCUMENTS.value)
    p.add_argument("--type", choices=[t.value for t in TypeFilter], default=TypeFilter.ALL.value)
    p.add_argument("--date", choices=[d.value for d in DateFilter], default=DateFilter.ALL.value)
    p.add_argument("--sort", choices=[s.value for s in SortKey], default=SortKey.NEWEST.value)
    p.add_argument("--search", default="")
    p.add_argument("--mode", choices=[m.value for m in ViewMode], default=ViewMode.LIST.value)
    p.set_defaults(func=cmd_ls)

    p = sub.add_parser("upload", help="Upload one or more files")
    p.add_argument("paths", nargs="+")
    p.add_argument("--content-type", help="Override the guessed MIME type")
    p.set_defaults(func=cmd_upload)

    p = sub.add_parser("download", help="Download a file by id")
    p.add_argument("file_id")
    p.add_argument("-o", "--output", help="Destination file or directory (default: .)")
    p.set_defaults(func=cmd_download)

    p = sub.add_parser("rm", help="Delete a file by id")
    p.add_argument("file_id")
    p.set_defaults(func=cmd_rm)

    p = sub.add_parser("share", help="Share a file with another user by email")
    p.add_argument("file_id")
    p.add_argument("email")
    p.set_defaults(func=cmd_share)

    return parser


def main(argv: Sequence[str] | None = None, *, drive: Drive | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.ERROR,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    owns = drive is None
    if drive is None:
        try:
            config = DriveConfig.from_env(base_url=args.api_url, data_dir=args.data_dir)
        except ValueError as e:
            return _fail(str(e))
        drive = Drive(config)
    try:
        return args.func(drive, args)
    finally:
        if owns:
            drive.close()


if __name__ == "__main__":
    sys.exit(main())
