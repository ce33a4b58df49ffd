# tests/conftest.py

"""Shared pytest fixtures for all dye_budget tests."""

from collections.abc import Generator
from pathlib import Path

import pytest

from dye_budget.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_paths(tmp_path: Path) -> Generator[None, None, None]:
    """Point log and database paths at a per-test temp directory."""
    saved = (Settings.LOGS_DIR, Settings.KV_DB_PATH)
    Settings.LOGS_DIR = tmp_path / "logs"
    Settings.KV_DB_PATH = tmp_path / "data" / "kv_store.db"
    try:
        yield
    finally:
        Settings.LOGS_DIR, Settings.KV_DB_PATH = saved
