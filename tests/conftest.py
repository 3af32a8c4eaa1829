"""Shared test fixtures."""

import pytest

from cycleload import create_service


@pytest.fixture
def db_service(tmp_path):
    """Provide a fresh SQLite DatabaseService for each test."""
    db_path = tmp_path / "test.db"
    service = create_service(f"sqlite:///{db_path}")
    service.connect()
    yield service
    service.close()


@pytest.fixture
def write_export(tmp_path):
    """Write a cycle export the way the shop-floor spreadsheet saves it."""

    def _write(lines: list[str], encoding: str = "cp1250", name: str = "cycles.csv"):
        path = tmp_path / name
        path.write_bytes("\r\n".join(lines).encode(encoding) + b"\r\n")
        return path

    return _write
