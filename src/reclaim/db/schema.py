"""Table layout per asset kind and schema initialization."""

from __future__ import annotations

import sqlite3

from reclaim.db.models import AssetKind

CURRENT_VERSION = 1

# Metadata row table for each asset kind.
ASSET_TABLES: dict[AssetKind, str] = {
    AssetKind.DOCUMENT: "documents",
    AssetKind.LIBRARY: "library_documents",
    AssetKind.IMAGE: "image_analyses",
}

# Image analyses carry no chunks and no vector entries.
CHUNK_TABLES: dict[AssetKind, str] = {
    AssetKind.DOCUMENT: "document_chunks",
    AssetKind.LIBRARY: "library_chunks",
}

# Normalised SELECT per kind so every row maps onto the same Asset columns.
ASSET_SELECTS: dict[AssetKind, str] = {
    AssetKind.DOCUMENT: (
        "SELECT id, owner_id, chat_id, file_name, file_key, file_url, mime_type,"
        " status, created_at FROM documents"
    ),
    AssetKind.LIBRARY: (
        "SELECT id, owner_id, NULL AS chat_id, file_name, file_key, file_url, mime_type,"
        " status, created_at FROM library_documents"
    ),
    AssetKind.IMAGE: (
        "SELECT id, owner_id, chat_id, file_name, NULL AS file_key, file_url, mime_type,"
        " 'ready' AS status, created_at FROM image_analyses"
    ),
}


def initialize(conn: sqlite3.Connection) -> None:
    """Initialize the database schema via the migration runner (idempotent)."""
    from reclaim.db.migrations import run_migrations

    run_migrations(conn)
