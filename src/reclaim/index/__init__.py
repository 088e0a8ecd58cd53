"""Vector index clients."""

from reclaim.index.base import VectorIndex, VectorIndexError
from reclaim.index.factory import IndexPair, open_vector_indexes
from reclaim.index.qdrant import QdrantIndex
from reclaim.index.sqlite_vec import SqliteVecIndex, model_to_slug, vec_table_name

__all__ = [
    "VectorIndex",
    "VectorIndexError",
    "IndexPair",
    "open_vector_indexes",
    "QdrantIndex",
    "SqliteVecIndex",
    "model_to_slug",
    "vec_table_name",
]
