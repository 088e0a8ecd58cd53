"""Local vector index on a sqlite-vec ``vec0`` virtual table.

vec0 tables are keyed by integer rowid while the relational chunk rows carry
opaque string vector IDs; the ``vector_ids`` table maps one onto the other.
"""

from __future__ import annotations

import json
import re
import sqlite3

from reclaim.config import MAX_DELETE_BATCH
from reclaim.index.base import VectorIndex, VectorIndexError


def model_to_slug(model: str) -> str:
    """Convert a provider/model string to a valid table name suffix.

    Examples:
        "openai/text-embedding-3-small" -> "openai_text_embedding_3_small"
    """
    return re.sub(r"[^a-z0-9]", "_", model.lower())


def vec_table_name(model: str) -> str:
    """Return the vec0 table name for an embedding *model*."""
    return f"vec_assets_{model_to_slug(model)}"


class SqliteVecIndex(VectorIndex):
    """Vector index stored next to the relational rows in the same database.

    Args:
        conn: Open connection with sqlite-vec loaded and schema initialised.
        table: vec0 table name (see vec_table_name()).
        batch_size: Maximum IDs per delete call.
    """

    def __init__(
        self, conn: sqlite3.Connection, table: str, batch_size: int = MAX_DELETE_BATCH
    ) -> None:
        super().__init__(batch_size)
        if not re.fullmatch(r"[a-z0-9_]+", table):
            raise ValueError(f"Invalid vec table name '{table}' — use vec_table_name().")
        self._conn = conn
        self.table = table
        self.name = f"sqlite-vec:{table}"

    # ------------------------------------------------------------------
    # Table management + writes (ingestion-side helpers)
    # ------------------------------------------------------------------

    def table_exists(self) -> bool:
        row = self._conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?", (self.table,)
        ).fetchone()
        return row is not None

    def ensure_table(self, dimensions: int) -> None:
        """Create the vec0 table with *dimensions* if it doesn't already exist."""
        if dimensions < 1:
            raise ValueError(f"dimensions must be >= 1, got {dimensions}")
        if not self.table_exists():
            self._conn.execute(
                f"CREATE VIRTUAL TABLE {self.table} USING vec0(embedding float[{dimensions}])"
            )
            self._conn.commit()

    def add(self, vector_id: str, embedding: list[float]) -> int:
        """Store *embedding* under *vector_id*. Returns the vec0 rowid."""
        self.ensure_table(len(embedding))
        cur = self._conn.execute(
            "INSERT INTO vector_ids (vec_table, vector_id) VALUES (?, ?)",
            (self.table, vector_id),
        )
        rowid = cur.lastrowid
        self._conn.execute(
            f"INSERT INTO {self.table}(rowid, embedding) VALUES (?, ?)",
            (rowid, json.dumps(embedding)),
        )
        self._conn.commit()
        return rowid

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def contains(self, vector_id: str) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM vector_ids WHERE vec_table = ? AND vector_id = ?",
            (self.table, vector_id),
        ).fetchone()
        return row is not None

    def count(self) -> int:
        """Number of vectors stored in the vec0 table (0 if it doesn't exist)."""
        if not self.table_exists():
            return 0
        return self._conn.execute(f"SELECT COUNT(*) FROM {self.table}").fetchone()[0]  # noqa: S608

    # ------------------------------------------------------------------
    # Deletes
    # ------------------------------------------------------------------

    def _delete_batch(self, batch: list[str]) -> None:
        placeholders = ",".join("?" * len(batch))
        try:
            rowids = [
                r[0]
                for r in self._conn.execute(
                    f"SELECT id FROM vector_ids WHERE vec_table = ? AND vector_id IN ({placeholders})",  # noqa: S608
                    (self.table, *batch),
                ).fetchall()
            ]
            if not rowids:
                return
            row_marks = ",".join("?" * len(rowids))
            self._conn.execute(
                f"DELETE FROM {self.table} WHERE rowid IN ({row_marks})",  # noqa: S608
                rowids,
            )
            self._conn.execute(
                f"DELETE FROM vector_ids WHERE id IN ({row_marks})",  # noqa: S608
                rowids,
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            self._conn.rollback()
            raise VectorIndexError(f"{self.name}: delete failed: {exc}") from exc
