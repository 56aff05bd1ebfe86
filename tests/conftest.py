from __future__ import annotations

from collections.abc import Iterator
from datetime import date

import pytest

from bios_manager.data import BiosPackageRepository, DatabaseConfig, DatabaseManager
from tests.stubs import StubCatalog


FIXED_TODAY = date(2024, 3, 5)


@pytest.fixture
def database(tmp_path) -> Iterator[DatabaseManager]:
    """Create an isolated SQLite MDT database for repository tests."""

    db_path = tmp_path / "mdt.db"
    manager = DatabaseManager(DatabaseConfig(url=f"sqlite:///{db_path}"))
    manager.ensure_schema()
    yield manager
    manager.dispose()


@pytest.fixture
def repository(database: DatabaseManager) -> BiosPackageRepository:
    return BiosPackageRepository(database)


@pytest.fixture
def catalog() -> StubCatalog:
    return StubCatalog()


@pytest.fixture
def today() -> date:
    return FIXED_TODAY
