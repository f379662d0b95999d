"""Shared fixtures for minidrive tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from minidrive._drive_async import DriveAsync
from minidrive.client import DriveClient
from minidrive.config import DriveConfig
from minidrive.session import MemoryStorage, SessionContext
from tests.fakes import ALICE, BASE_URL, BOB, PASSWORD, FakeDriveServer

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path


# ------------------------------------------------------------------
# Fixtures
# ------------------------------------------------------------------


@pytest.fixture
def server() -> FakeDriveServer:
    srv = FakeDriveServer()
    srv.add_user(ALICE, first="Alice", last="Liddell")
    srv.add_user(BOB, first="Bob", last="Builder")
    return srv


@pytest.fixture
def config(tmp_path: Path) -> DriveConfig:
    return DriveConfig(base_url=BASE_URL, data_dir=tmp_path / "minidrive")


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
async def client(
    server: FakeDriveServer, config: DriveConfig, storage: MemoryStorage
) -> AsyncIterator[DriveClient]:
    """Unauthenticated client wired to the fake server."""
    async with DriveClient(SessionContext(storage), config, transport=server.transport()) as c:
        yield c


@pytest.fixture
async def drive(
    server: FakeDriveServer, config: DriveConfig, storage: MemoryStorage
) -> AsyncIterator[DriveAsync]:
    """Logged-out async facade wired to the fake server."""
    d = DriveAsync(config, storage=storage, transport=server.transport())
    yield d
    await d.close()


@pytest.fixture
async def alice_drive(drive: DriveAsync) -> DriveAsync:
    """Async facade logged in as Alice."""
    result = await drive.login(ALICE, PASSWORD)
    assert result.success
    return drive
