"""Forward-only migration runner for the reclaim database schema.

Vec tables (vec_assets_*) are NOT migration-managed; SqliteVecIndex creates
them on first write.
"""

from __future__ import annotations

import sqlite3

# schema_version is the bootstrap table, created before migrations run.
_CREATE_SCHEMA_VERSION = """
CREATE TABLE IF NOT EXISTS schema_version (
    version     INTEGER NOT NULL,
    applied_at  DATETIME NOT NULL DEFAULT (datetime('now'))
)
"""

_V1_SQL = """
CREATE TABLE IF NOT EXISTS chats (
    id          TEXT PRIMARY KEY,
    owner_id    TEXT NOT NULL,
    title       TEXT NOT NULL DEFAULT '',
    created_at  DATETIME NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS messages (
    id          TEXT PRIMARY KEY,
    chat_id     TEXT NOT NULL REFERENCES chats(id) ON DELETE CASCADE,
    role        TEXT NOT NULL,
    parts       TEXT NOT NULL DEFAULT '[]',
    created_at  DATETIME NOT NULL DEFAULT (datetime('now'))
);
CREATE INDEX IF NOT EXISTS idx_messages_chat ON messages(chat_id);

CREATE TABLE IF NOT EXISTS documents (
    id          TEXT PRIMARY KEY,
    owner_id    TEXT NOT NULL,
    chat_id     TEXT REFERENCES chats(id) ON DELETE SET NULL,
    file_name   TEXT NOT NULL,
    file_key    TEXT,
    file_url    TEXT,
    mime_type   TEXT,
    status      TEXT NOT NULL DEFAULT 'processing',
    created_at  DATETIME NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS document_chunks (
    id          TEXT PRIMARY KEY,
    document_id TEXT NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
    vector_id   TEXT NOT NULL UNIQUE,
    chunk_index INTEGER NOT NULL,
    page_number TEXT,
    text        TEXT NOT NULL,
    created_at  DATETIME NOT NULL DEFAULT (datetime('now'))
);
CREATE INDEX IF NOT EXISTS idx_document_chunks_doc ON document_chunks(document_id);

CREATE TABLE IF NOT EXISTS library_documents (
    id          TEXT PRIMARY KEY,
    owner_id    TEXT NOT NULL,
    file_name   TEXT NOT NULL,
    file_key    TEXT,
    file_url    TEXT,
    mime_type   TEXT,
    status      TEXT NOT NULL DEFAULT 'processing',
    created_at  DATETIME NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS library_chunks (
    id          TEXT PRIMARY KEY,
    document_id TEXT NOT NULL REFERENCES library_documents(id) ON DELETE CASCADE,
    vector_id   TEXT NOT NULL UNIQUE,
    chunk_index INTEGER NOT NULL,
    page_number TEXT,
    text        TEXT NOT NULL,
    created_at  DATETIME NOT NULL DEFAULT (datetime('now'))
);
CREATE INDEX IF NOT EXISTS idx_library_chunks_doc ON library_chunks(document_id);

CREATE TABLE IF NOT EXISTS image_analyses (
    id          TEXT PRIMARY KEY,
    owner_id    TEXT NOT NULL,
    chat_id     TEXT REFERENCES chats(id) ON DELETE CASCADE,
    message_id  TEXT,
    file_name   TEXT NOT NULL,
    file_url    TEXT NOT NULL,
    mime_type   TEXT,
    analysis    TEXT NOT NULL DEFAULT '',
    created_at  DATETIME NOT NULL DEFAULT (datetime('now'))
);

-- String vector IDs -> rowids of the local vec0 tables.
CREATE TABLE IF NOT EXISTS vector_ids (
    id          INTEGER PRIMARY KEY,
    vec_table   TEXT NOT NULL,
    vector_id   TEXT NOT NULL,
    UNIQUE (vec_table, vector_id)
);
"""

# Append-only. Each entry: (version: int, sql: str).
# executescript() issues an implicit COMMIT before running.
MIGRATIONS: list[tuple[int, str]] = [
    (1, _V1_SQL),
]


def run_migrations(conn: sqlite3.Connection) -> None:
    """Apply all pending migrations in ascending version order.

    Idempotent: safe to call on a database at any version.
    """
    conn.execute(_CREATE_SCHEMA_VERSION)
    conn.commit()

    row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
    current = row[0] if row[0] is not None else 0

    for version, sql in MIGRATIONS:
        if version > current:
            conn.executescript(sql)
            conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)", (version,)
            )
            conn.commit()
