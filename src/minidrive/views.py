"""View pipeline — turn the cached file list into what the user sees.

``compute_visible_files`` runs five stages in a fixed order:

1. partition by view (ownership / sharing, plus a 7-day window for the
   dashboard),
2. search on the original file name,
3. type filter,
4. date filter,
5. sort.

Each stage returns a new list and never mutates its input.  The pipeline
is pure and synchronous; callers recompute it from scratch whenever any
input changes.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from minidrive.models import FileRecord

DASHBOARD_WINDOW = timedelta(days=7)
WEEK_WINDOW = timedelta(days=7)
MONTH_WINDOW = timedelta(days=30)

# ------------------------------------------------------------------
# Selectors
# ------------------------------------------------------------------


class ViewSelector(str, Enum):
    """Top-level file scope."""

    DASHBOARD = "dashboard"
    MY_DOCUMENTS = "myDocuments"
    SHARED = "shared"


class TypeFilter(str, Enum):
    """File-type filter, matched against the MIME-like ``file_type``."""

    ALL = "all"
    PDF = "pdf"
    IMAGE = "image"
    DOCUMENT = "document"


class DateFilter(str, Enum):
    """Upload-date filter."""

    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"


class SortKey(str, Enum):
    """Sort order for the visible list."""

    NEWEST = "newest"
    OLDEST = "oldest"
    LARGEST = "largest"
    SMALLEST = "smallest"
    NAME = "name"


class ViewMode(str, Enum):
    """Presentation of the visible list."""

    GRID = "grid"
    LIST = "list"


# Substrings of ``file_type`` that satisfy each type filter
_TYPE_MARKERS: dict[TypeFilter, tuple[str, ...]] = {
    TypeFilter.PDF: ("pdf",),
    TypeFilter.IMAGE: ("image",),
    TypeFilter.DOCUMENT: ("text", "document"),
}


@dataclass(frozen=True, slots=True)
class ViewFilters:
    """The two list filters applied after search.

    Attributes:
        type: File-type filter.
        date: Upload-date filter.
    """

    type: TypeFilter = TypeFilter.ALL
    date: DateFilter = DateFilter.ALL


# ------------------------------------------------------------------
# Time helpers
# ------------------------------------------------------------------


def _local(dt: datetime) -> datetime:
    """Aware datetime in the local zone.  Naive values are read as local time."""
    return dt.astimezone()


def _now(now: datetime | None) -> datetime:
    return _local(now) if now is not None else datetime.now().astimezone()


# ------------------------------------------------------------------
# Stages
# ------------------------------------------------------------------


def partition_by_view(
    files: Iterable[FileRecord],
    user_email: str,
    view: ViewSelector | str,
    *,
    now: datetime | None = None,
) -> list[FileRecord]:
    """Select the files belonging to *view* for *user_email*.

    - ``myDocuments``: files the user owns.
    - ``shared``: files owned by someone else whose ``shared_with``
      contains the user.  Self-shared files never appear here.
    - ``dashboard``: owned files uploaded within the last 7 days.
    """
    view = ViewSelector(view)
    if view is ViewSelector.SHARED:
        return [f for f in files if not f.is_owned_by(user_email) and f.is_shared_with(user_email)]

    owned = [f for f in files if f.is_owned_by(user_email)]
    if view is ViewSelector.DASHBOARD:
        cutoff = _now(now) - DASHBOARD_WINDOW
        return [f for f in owned if _local(f.uploaded_at) >= cutoff]
    return owned


def filter_by_search(files: Iterable[FileRecord], search: str) -> list[FileRecord]:
    """Case-insensitive substring match on the original file name."""
    query = search.strip().casefold() if search else ""
    if not query:
        return list(files)
    return [f for f in files if query in f.original_file_name.casefold()]


def filter_by_type(files: Iterable[FileRecord], type_filter: TypeFilter | str) -> list[FileRecord]:
    """Keep files whose ``file_type`` contains a marker for *type_filter*.

    A file without a ``file_type`` only passes ``all``.
    """
    type_filter = TypeFilter(type_filter)
    if type_filter is TypeFilter.ALL:
        return list(files)
    markers = _TYPE_MARKERS[type_filter]
    result: list[FileRecord] = []
    for f in files:
        if not f.file_type:
            continue
        file_type = f.file_type.lower()
        if any(marker in file_type for marker in markers):
            result.append(f)
    return result


def filter_by_date(
    files: Iterable[FileRecord],
    date_filter: DateFilter | str,
    *,
    now: datetime | None = None,
) -> list[FileRecord]:
    """Keep files uploaded today (local calendar day) or within 7/30 days."""
    date_filter = DateFilter(date_filter)
    if date_filter is DateFilter.ALL:
        return list(files)

    current = _now(now)
    if date_filter is DateFilter.TODAY:
        today = current.date()
        return [f for f in files if _local(f.uploaded_at).date() == today]

    window = WEEK_WINDOW if date_filter is DateFilter.WEEK else MONTH_WINDOW
    cutoff = current - window
    return [f for f in files if _local(f.uploaded_at) >= cutoff]


def _name_key(f: FileRecord) -> tuple[str, str]:
    """Accent- and case-insensitive key, independent of the process locale.

    Accents only break ties: ``"eclair"`` sorts before ``"éclair"``.
    """
    folded = f.original_file_name.casefold()
    decomposed = unicodedata.normalize("NFKD", folded)
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return base, folded


def sort_files(files: Iterable[FileRecord], sort_key: SortKey | str) -> list[FileRecord]:
    """Return a sorted copy.  Ties keep their input order in every direction."""
    sort_key = SortKey(sort_key)
    items = list(files)
    # sorted() is stable, including with reverse=True
    if sort_key is SortKey.NEWEST:
        return sorted(items, key=lambda f: _local(f.uploaded_at), reverse=True)
    if sort_key is SortKey.OLDEST:
        return sorted(items, key=lambda f: _local(f.uploaded_at))
    if sort_key is SortKey.LARGEST:
        return sorted(items, key=lambda f: f.file_size, reverse=True)
    if sort_key is SortKey.SMALLEST:
        return sorted(items, key=lambda f: f.file_size)
    return sorted(items, key=_name_key)


# ------------------------------------------------------------------
# Pipeline
# ------------------------------------------------------------------


def compute_visible_files(
    all_files: Iterable[FileRecord],
    current_user_email: str,
    view: ViewSelector | str = ViewSelector.MY_DOCUMENTS,
    filters: ViewFilters | None = None,
    sort_key: SortKey | str = SortKey.NEWEST,
    search: str = "",
    *,
    now: datetime | None = None,
) -> list[FileRecord]:
    """Run partition → search → type → date → sort over *all_files*.

    *now* pins the clock for the dashboard window and the date filter;
    it defaults to the wall-clock time of the call.
    """
    filters = filters or ViewFilters()
    current = _now(now)
    files = partition_by_view(all_files, current_user_email, view, now=current)
    files = filter_by_search(files, search)
    files = filter_by_type(files, filters.type)
    files = filter_by_date(files, filters.date, now=current)
    return sort_files(files, sort_key)


def group_by_view(
    all_files: Sequence[FileRecord],
    current_user_email: str,
    *,
    now: datetime | None = None,
) -> dict[ViewSelector, list[FileRecord]]:
    """Partition *all_files* into every view, unfiltered, newest first."""
    current = _now(now)
    return {
        view: sort_files(
            partition_by_view(all_files, current_user_email, view, now=current),
            SortKey.NEWEST,
        )
        for view in ViewSelector
    }


# ------------------------------------------------------------------
# View state
# ------------------------------------------------------------------


@dataclass
class ViewState:
    """Ephemeral UI selections.  Never persisted; ``reset()`` restores defaults."""

    view: ViewSelector = ViewSelector.MY_DOCUMENTS
    type_filter: TypeFilter = TypeFilter.ALL
    date_filter: DateFilter = DateFilter.ALL
    sort_key: SortKey = SortKey.NEWEST
    search: str = ""
    view_mode: ViewMode = ViewMode.GRID

    def __post_init__(self) -> None:
        self.view = ViewSelector(self.view)
        self.type_filter = TypeFilter(self.type_filter)
        self.date_filter = DateFilter(self.date_filter)
        self.sort_key = SortKey(self.sort_key)
        self.view_mode = ViewMode(self.view_mode)

    @property
    def filters(self) -> ViewFilters:
        return ViewFilters(type=self.type_filter, date=self.date_filter)

    def reset(self) -> None:
        self.view = ViewSelector.MY_DOCUMENTS
        self.type_filter = TypeFilter.ALL
        self.date_filter = DateFilter.ALL
        self.sort_key = SortKey.NEWEST
        self.search = ""
        self.view_mode = ViewMode.GRID

    def toggle_view_mode(self) -> ViewMode:
        self.view_mode = ViewMode.LIST if self.view_mode is ViewMode.GRID else ViewMode.GRID
        return self.view_mode

    def apply(
        self,
        files: Iterable[FileRecord],
        current_user_email: str,
        *,
        now: datetime | None = None,
    ) -> list[FileRecord]:
        """Run the pipeline with this state's selections."""
        return compute_visible_files(
            files,
            current_user_email,
            self.view,
            self.filters,
            self.sort_key,
            self.search,
            now=now,
        )
