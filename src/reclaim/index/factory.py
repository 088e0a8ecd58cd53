"""Build the vector index clients described by a ReclaimConfig."""

from __future__ import annotations

import os
import sqlite3
from dataclasses import dataclass

from reclaim.config import ReclaimConfig
from reclaim.index.base import VectorIndex
from reclaim.index.qdrant import QdrantIndex
from reclaim.index.sqlite_vec import SqliteVecIndex, vec_table_name


@dataclass
class IndexPair:
    """Index used for chat documents/images, and the one for library documents."""

    main: VectorIndex
    library: VectorIndex

    def close(self) -> None:
        self.main.close()
        if self.library is not self.main:
            self.library.close()


def open_vector_indexes(cfg: ReclaimConfig, conn: sqlite3.Connection) -> IndexPair:
    """Return the configured indexes. Library deletes use their own batch size."""
    if cfg.vector.backend == "qdrant":
        api_key = os.environ.get("QDRANT_API_KEY") or None
        main = QdrantIndex(
            cfg.qdrant.url,
            cfg.qdrant.collection,
            api_key=api_key,
            timeout=cfg.qdrant.timeout,
            batch_size=cfg.vector.batch_size,
        )
        library = QdrantIndex(
            cfg.qdrant.url,
            cfg.qdrant.library_collection or cfg.qdrant.collection,
            api_key=api_key,
            timeout=cfg.qdrant.timeout,
            batch_size=cfg.vector.library_batch_size,
        )
        return IndexPair(main=main, library=library)

    table = vec_table_name(cfg.vector.model)
    return IndexPair(
        main=SqliteVecIndex(conn, table, batch_size=cfg.vector.batch_size),
        library=SqliteVecIndex(conn, table, batch_size=cfg.vector.library_batch_size),
    )
