"""Repository pattern for all reclaim database operations.

Single interface for: asset metadata (documents, library documents, image
analyses), chunk references, chat messages and their parts payloads.
Vector entries live in the index adapters (see reclaim.index).
"""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterable
from typing import Any

from reclaim.db.models import USER_ASSET_KINDS, Asset, AssetKind, Chunk, Message
from reclaim.db.schema import ASSET_SELECTS, ASSET_TABLES, CHUNK_TABLES


class Repository:
    """Data access layer for every store the deletion engine touches.

    Wraps an open sqlite3.Connection. The connection is owned by the caller
    and must be closed after use. Every mutating method commits on its own;
    no method spans more than one logical store.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialise with an open database connection.

        Args:
            conn: An open sqlite3.Connection with the schema initialised
                (see reclaim.db.schema.initialize).
        """
        self._conn = conn

    # ------------------------------------------------------------------
    # Chats + messages
    # ------------------------------------------------------------------

    def add_chat(self, chat_id: str, owner_id: str, title: str = "") -> None:
        self._conn.execute(
            "INSERT INTO chats (id, owner_id, title) VALUES (?, ?, ?)",
            (chat_id, owner_id, title),
        )
        self._conn.commit()

    def add_message(self, message: Message) -> None:
        """Insert a message; ``parts`` is serialised to JSON as-is."""
        self._conn.execute(
            """
            INSERT INTO messages (id, chat_id, role, parts, created_at)
            VALUES (?, ?, ?, ?, COALESCE(?, datetime('now')))
            """,
            (
                message.id,
                message.chat_id,
                message.role,
                json.dumps(message.parts),
                message.created_at,
            ),
        )
        self._conn.commit()

    def get_message(self, message_id: str) -> Message | None:
        row = self._conn.execute(
            "SELECT id, chat_id, role, parts, created_at FROM messages WHERE id = ?",
            (message_id,),
        ).fetchone()
        return _row_to_message(row) if row else None

    def get_message_parts_raw(self, message_id: str) -> str | None:
        """Return the stored ``parts`` text exactly as persisted."""
        row = self._conn.execute(
            "SELECT parts FROM messages WHERE id = ?", (message_id,)
        ).fetchone()
        return row["parts"] if row else None

    def list_messages_by_chat(self, chat_id: str) -> list[Message]:
        """Return every message of *chat_id* in conversation order (oldest first).

        A chat is a bounded conversation, so no pagination is applied.
        """
        rows = self._conn.execute(
            """
            SELECT id, chat_id, role, parts, created_at FROM messages
            WHERE chat_id = ? ORDER BY created_at, rowid
            """,
            (chat_id,),
        ).fetchall()
        return [_row_to_message(r) for r in rows]

    def update_message_parts(self, message_id: str, parts: list[Any]) -> bool:
        """Rewrite the ``parts`` payload of one message in place.

        Returns:
            False if the message no longer exists, True otherwise.
        """
        cur = self._conn.execute(
            "UPDATE messages SET parts = ? WHERE id = ?",
            (json.dumps(parts), message_id),
        )
        self._conn.commit()
        return cur.rowcount > 0

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------

    def add_asset(self, asset: Asset) -> None:
        """Insert an asset metadata row into the table for its kind.

        Raises:
            ValueError: If the asset carries a field its kind cannot store
                (a chat on a library document, a storage key on an image,
                or an image without a URL).
        """
        if asset.kind is AssetKind.DOCUMENT:
            self._conn.execute(
                """
                INSERT INTO documents
                    (id, owner_id, chat_id, file_name, file_key, file_url, mime_type,
                     status, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, COALESCE(?, datetime('now')))
                """,
                (
                    asset.id,
                    asset.owner_id,
                    asset.chat_id,
                    asset.file_name,
                    asset.file_key,
                    asset.file_url,
                    asset.mime_type,
                    asset.status,
                    asset.created_at,
                ),
            )
        elif asset.kind is AssetKind.LIBRARY:
            if asset.chat_id is not None:
                raise ValueError("Library documents are not tied to a chat.")
            self._conn.execute(
                """
                INSERT INTO library_documents
                    (id, owner_id, file_name, file_key, file_url, mime_type, status,
                     created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, COALESCE(?, datetime('now')))
                """,
                (
                    asset.id,
                    asset.owner_id,
                    asset.file_name,
                    asset.file_key,
                    asset.file_url,
                    asset.mime_type,
                    asset.status,
                    asset.created_at,
                ),
            )
        else:
            if asset.file_key is not None:
                raise ValueError("Image analyses have no storage key column.")
            if not asset.file_url:
                raise ValueError("Image analyses require a file_url.")
            self._conn.execute(
                """
                INSERT INTO image_analyses
                    (id, owner_id, chat_id, file_name, file_url, mime_type, created_at)
                VALUES (?, ?, ?, ?, ?, ?, COALESCE(?, datetime('now')))
                """,
                (
                    asset.id,
                    asset.owner_id,
                    asset.chat_id,
                    asset.file_name,
                    asset.file_url,
                    asset.mime_type,
                    asset.created_at,
                ),
            )
        self._conn.commit()

    def get_asset(self, asset_id: str) -> Asset | None:
        """Return the asset with *asset_id* from whichever kind table holds it.

        Asset IDs are unique across kinds, so the first hit wins.
        """
        for kind, select in ASSET_SELECTS.items():
            row = self._conn.execute(f"{select} WHERE id = ?", (asset_id,)).fetchone()
            if row is not None:
                return _row_to_asset(row, kind)
        return None

    def list_assets_by_owner(
        self,
        owner_id: str,
        kinds: Iterable[AssetKind] = USER_ASSET_KINDS,
    ) -> list[Asset]:
        """Return the assets owned by *owner_id*, newest first.

        Args:
            owner_id: Owner (uploader) identifier.
            kinds: Asset kinds to include. Defaults to the user-owned kinds;
                shared library documents are listed only when asked for.
        """
        assets: list[Asset] = []
        for kind in kinds:
            rows = self._conn.execute(
                f"{ASSET_SELECTS[kind]} WHERE owner_id = ? ORDER BY created_at DESC, rowid DESC",
                (owner_id,),
            ).fetchall()
            assets.extend(_row_to_asset(r, kind) for r in rows)
        # Stable sort keeps per-kind insertion order for equal timestamps.
        assets.sort(key=lambda a: a.created_at or "", reverse=True)
        return assets

    def count_assets_by_kind(self) -> dict[AssetKind, int]:
        return {
            kind: self._conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]  # noqa: S608
            for kind, table in ASSET_TABLES.items()
        }

    def delete_asset_row(self, asset: Asset) -> bool:
        """Delete the metadata row of *asset*.

        Returns:
            False if the row was already gone, True if it was deleted.
        """
        cur = self._conn.execute(
            f"DELETE FROM {ASSET_TABLES[asset.kind]} WHERE id = ?",  # noqa: S608
            (asset.id,),
        )
        self._conn.commit()
        return cur.rowcount > 0

    # ------------------------------------------------------------------
    # Chunks
    # ------------------------------------------------------------------

    def add_chunk(self, kind: AssetKind, chunk: Chunk) -> None:
        """Insert a chunk reference row for a document of *kind*."""
        self._conn.execute(
            f"""
            INSERT INTO {_chunk_table(kind)}
                (id, document_id, vector_id, chunk_index, page_number, text)
            VALUES (?, ?, ?, ?, ?, ?)
            """,  # noqa: S608
            (
                chunk.id,
                chunk.document_id,
                chunk.vector_id,
                chunk.chunk_index,
                chunk.page_number,
                chunk.text,
            ),
        )
        self._conn.commit()

    def add_chunks(self, kind: AssetKind, chunks: Iterable[Chunk]) -> int:
        """Bulk-insert chunk rows in one transaction. Returns the row count."""
        rows = [
            (c.id, c.document_id, c.vector_id, c.chunk_index, c.page_number, c.text)
            for c in chunks
        ]
        self._conn.executemany(
            f"""
            INSERT INTO {_chunk_table(kind)}
                (id, document_id, vector_id, chunk_index, page_number, text)
            VALUES (?, ?, ?, ?, ?, ?)
            """,  # noqa: S608
            rows,
        )
        self._conn.commit()
        return len(rows)

    def list_chunks(self, asset: Asset) -> list[Chunk]:
        """Return the chunks of *asset* ordered by ``chunk_index``.

        Point-in-time read without locking; chunks are immutable once
        ingested. Assets without chunks (including every image analysis)
        yield an empty list.
        """
        table = CHUNK_TABLES.get(asset.kind)
        if table is None:
            return []
        rows = self._conn.execute(
            f"""
            SELECT id, document_id, chunk_index, vector_id, text, page_number, created_at
            FROM {table} WHERE document_id = ? ORDER BY chunk_index
            """,  # noqa: S608
            (asset.id,),
        ).fetchall()
        return [_row_to_chunk(r) for r in rows]

    def count_chunks(self, asset: Asset) -> int:
        table = CHUNK_TABLES.get(asset.kind)
        if table is None:
            return 0
        return self._conn.execute(
            f"SELECT COUNT(*) FROM {table} WHERE document_id = ?",  # noqa: S608
            (asset.id,),
        ).fetchone()[0]

    def count_all_chunks(self) -> int:
        return sum(
            self._conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]  # noqa: S608
            for table in CHUNK_TABLES.values()
        )

    def delete_chunks(self, asset: Asset) -> int:
        """Delete the chunk rows of *asset*. Returns the number of rows removed."""
        table = CHUNK_TABLES.get(asset.kind)
        if table is None:
            return 0
        cur = self._conn.execute(
            f"DELETE FROM {table} WHERE document_id = ?",  # noqa: S608
            (asset.id,),
        )
        self._conn.commit()
        return cur.rowcount

    # ------------------------------------------------------------------
    # Cross-store diagnostics
    # ------------------------------------------------------------------

    def count_orphaned_vectors(self) -> int:
        """Count local vector entries whose vector ID no chunk row references."""
        return self._conn.execute(
            """
            SELECT COUNT(*) FROM vector_ids v
            WHERE NOT EXISTS (SELECT 1 FROM document_chunks c WHERE c.vector_id = v.vector_id)
              AND NOT EXISTS (SELECT 1 FROM library_chunks c WHERE c.vector_id = v.vector_id)
            """
        ).fetchone()[0]


# ------------------------------------------------------------------
# Row → model helpers
# ------------------------------------------------------------------

def _chunk_table(kind: AssetKind) -> str:
    try:
        return CHUNK_TABLES[kind]
    except KeyError:
        raise ValueError(f"Assets of kind '{kind.value}' have no chunks.") from None


def _row_to_asset(row: sqlite3.Row, kind: AssetKind) -> Asset:
    return Asset(
        id=row["id"],
        kind=kind,
        owner_id=row["owner_id"],
        file_name=row["file_name"],
        file_url=row["file_url"],
        file_key=row["file_key"],
        mime_type=row["mime_type"],
        chat_id=row["chat_id"],
        status=row["status"],
        created_at=row["created_at"],
    )


def _row_to_chunk(row: sqlite3.Row) -> Chunk:
    return Chunk(
        id=row["id"],
        document_id=row["document_id"],
        chunk_index=row["chunk_index"],
        vector_id=row["vector_id"],
        text=row["text"],
        page_number=row["page_number"],
        created_at=row["created_at"],
    )


def _row_to_message(row: sqlite3.Row) -> Message:
    # Undecodable payloads surface as the raw string; the scrubber skips them.
    try:
        parts = json.loads(row["parts"])
    except (TypeError, ValueError):
        parts = row["parts"]
    return Message(
        id=row["id"],
        chat_id=row["chat_id"],
        role=row["role"],
        parts=parts,
        created_at=row["created_at"],
    )
