"""Shared pytest fixtures."""

from __future__ import annotations

import logging

import pytest

import reclaim.config as config_module
from reclaim.db.connection import Database
from reclaim.db.repository import Repository
from reclaim.db.schema import initialize
from reclaim.index.base import VectorIndex, VectorIndexError


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep user config, RECLAIM_* env vars and log handlers out of every test."""
    monkeypatch.setattr(config_module, "_GLOBAL_CONFIG_PATH", tmp_path / "no-global" / "config.yaml")
    for var in ("RECLAIM_VECTOR_BACKEND", "RECLAIM_BATCH_SIZE", "RECLAIM_LOG_LEVEL", "QDRANT_API_KEY"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    logger = logging.getLogger("reclaim")
    logger.handlers = []
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def tmp_db(tmp_path):
    """File-based DB in tmp_path with schema initialized, closed after test."""
    db = Database(tmp_path / ".reclaim.db")
    conn = db.connect()
    initialize(conn)
    yield conn
    conn.close()


@pytest.fixture
def repo(tmp_db):
    return Repository(tmp_db)


class RecordingIndex(VectorIndex):
    """In-memory index that records every batch call; optionally fails one."""

    name = "recording"

    def __init__(self, batch_size: int = 500, fail_on_call: int | None = None) -> None:
        super().__init__(batch_size)
        self.calls: list[list[str]] = []
        self.fail_on_call = fail_on_call

    def _delete_batch(self, batch: list[str]) -> None:
        self.calls.append(list(batch))
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise VectorIndexError(f"batch {len(self.calls)} rejected")

    @property
    def deleted_ids(self) -> list[str]:
        return [vid for call in self.calls for vid in call]


@pytest.fixture
def make_index():
    """Factory for RecordingIndex instances."""
    return RecordingIndex
