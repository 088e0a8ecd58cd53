"""Shared setup for CLI commands: config, database, deleter."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import typer
from rich.console import Console

from reclaim.cli.errors import err_config, err_no_db
from reclaim.config import ConfigError, ReclaimConfig, load_config
from reclaim.db.connection import open_database
from reclaim.db.repository import Repository
from reclaim.index.factory import IndexPair, open_vector_indexes
from reclaim.logging_setup import configure_logging
from reclaim.purge.deleter import AssetDeleter


def load_cli_config(console: Console, verbose: bool = False) -> ReclaimConfig:
    """Load config and configure logging, exiting 1 on an invalid config."""
    try:
        cfg = load_config()
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1) from None
    configure_logging("DEBUG" if verbose else cfg.logging.level)
    return cfg


def resolve_db(db: Path | None, cfg: ReclaimConfig) -> Path:
    return db if db is not None else Path(cfg.database.path)


def open_existing_db(db_path: Path, console: Console) -> sqlite3.Connection:
    """Open *db_path*, exiting 1 when it does not exist."""
    if not db_path.exists():
        console.print(err_no_db(str(db_path)))
        raise typer.Exit(1)
    return open_database(db_path)


def build_deleter(
    conn: sqlite3.Connection, cfg: ReclaimConfig
) -> tuple[AssetDeleter, IndexPair]:
    """Return a deleter wired to the configured indexes. Caller closes the pair."""
    indexes = open_vector_indexes(cfg, conn)
    deleter = AssetDeleter(Repository(conn), indexes.main, library_index=indexes.library)
    return deleter, indexes
