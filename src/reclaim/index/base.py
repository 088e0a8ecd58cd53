"""Vector index client contract with bounded-batch deletion."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable

from reclaim.config import MAX_DELETE_BATCH

logger = logging.getLogger(__name__)


class VectorIndexError(RuntimeError):
    """A vector index call failed (transport, HTTP status or storage error)."""


class VectorIndex(ABC):
    """Deletes vector entries by ID in bounded, sequential batches.

    Subclasses implement ``_delete_batch`` for a single call against the
    backing index; batching, de-duplication and fail-fast behaviour live here.
    Deleting an ID the index does not hold is a no-op, so every call is safe
    to repeat.

    Args:
        batch_size: Maximum IDs per delete call (1..500).
    """

    name: str = "vector index"

    def __init__(self, batch_size: int = MAX_DELETE_BATCH) -> None:
        if not 1 <= batch_size <= MAX_DELETE_BATCH:
            raise ValueError(
                f"batch_size must be between 1 and {MAX_DELETE_BATCH}, got {batch_size}"
            )
        self.batch_size = batch_size

    def delete_many(self, vector_ids: Iterable[str]) -> int:
        """Delete *vector_ids* in batches of at most ``batch_size``.

        A failing batch aborts the remaining ones; batches already sent are
        not rolled back.

        Returns:
            Number of distinct IDs submitted (0 for empty input, which issues
            no call at all).

        Raises:
            VectorIndexError: If a batch call fails.
        """
        ids = list(dict.fromkeys(vector_ids))
        if not ids:
            return 0

        total_batches = (len(ids) + self.batch_size - 1) // self.batch_size
        for number, start in enumerate(range(0, len(ids), self.batch_size), start=1):
            batch = ids[start : start + self.batch_size]
            logger.debug(
                "%s: deleting batch %d/%d (%d ids)", self.name, number, total_batches, len(batch)
            )
            self._delete_batch(batch)
        return len(ids)

    @abstractmethod
    def _delete_batch(self, batch: list[str]) -> None:
        """Issue one delete call for *batch* (never empty, never oversized)."""

    def close(self) -> None:
        """Release any held resources. Default: nothing to release."""
