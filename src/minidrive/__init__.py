"""minidrive: client for a small file-storage and sharing service.

Login, upload, download, delete and share-by-email over the drive REST API,
with a client-side view pipeline for filtering and sorting the file list.
"""

__version__ = "0.1.0"

from minidrive._drive import Drive
from minidrive._drive_async import DriveAsync
from minidrive.client import Download, DriveClient
from minidrive.config import DriveConfig
from minidrive.exceptions import (
    ApiError,
    AuthenticationRequiredError,
    DriveError,
    NetworkOrServerError,
    ShareNotConfirmedError,
    TransportError,
    ValidationError,
)
from minidrive.models import FileRecord, UserProfile
from minidrive.session import MemoryStorage, SessionContext, SessionStorage, SQLiteStorage
from minidrive.types import (
    AuthResult,
    DeleteResult,
    DownloadResult,
    ListResult,
    ShareResult,
    SignupResult,
    UploadResult,
)
from minidrive.views import (
    DateFilter,
    SortKey,
    TypeFilter,
    ViewFilters,
    ViewMode,
    ViewSelector,
    ViewState,
    compute_visible_files,
    group_by_view,
)

__all__ = [
    "ApiError",
    "AuthResult",
    "AuthenticationRequiredError",
    "DateFilter",
    "DeleteResult",
    "Download",
    "DownloadResult",
    "Drive",
    "DriveAsync",
    "DriveClient",
    "DriveConfig",
    "DriveError",
    "FileRecord",
    "ListResult",
    "MemoryStorage",
    "NetworkOrServerError",
    "SQLiteStorage",
    "SessionContext",
    "SessionStorage",
    "ShareNotConfirmedError",
    "ShareResult",
    "SignupResult",
    "SortKey",
    "TransportError",
    "TypeFilter",
    "UploadResult",
    "UserProfile",
    "ValidationError",
    "ViewFilters",
    "ViewMode",
    "ViewSelector",
    "ViewState",
    "__version__",
    "compute_visible_files",
    "group_by_view",
]
