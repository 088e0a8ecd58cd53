"""Asset deletion across the vector index, chat messages and metadata rows.

There is no transaction spanning the three stores. Each asset instead runs
an ordered pipeline of idempotent steps:

  1. vectors     — list chunk vector IDs, delete them from the index
  2. references  — scrub parts referencing the asset from its chat
  3. metadata    — delete chunk rows, then the asset row

Steps run strictly in this order. Any step can be re-run after a failure
and converges on the same end state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from reclaim.db.models import Asset, AssetKind
from reclaim.db.repository import Repository
from reclaim.errors import (
    DeletionError,
    Forbidden,
    IndexDeleteFailed,
    MetadataDeleteFailed,
    NotFound,
    ScrubFailed,
)
from reclaim.index.base import VectorIndex
from reclaim.purge.matcher import AssetMatcher
from reclaim.purge.results import BatchResult, DeleteOutcome, OwnerWipeResult
from reclaim.purge.scrubber import ReferenceScrubber

logger = logging.getLogger(__name__)

Step = Callable[[Asset, DeleteOutcome], None]


class AssetDeleter:
    """Deletes knowledge assets and keeps the three stores consistent.

    Args:
        repo: Repository over asset, chunk and message rows.
        index: Vector index for chat documents (and any other kind without a
            dedicated index).
        library_index: Vector index for library documents. Defaults to *index*.
        scrubber: Reference scrubber; built from *repo* when omitted.
    """

    def __init__(
        self,
        repo: Repository,
        index: VectorIndex,
        *,
        library_index: VectorIndex | None = None,
        scrubber: ReferenceScrubber | None = None,
    ) -> None:
        self._repo = repo
        self._index = index
        self._library_index = library_index or index
        self._scrubber = scrubber or ReferenceScrubber(repo)

    # ------------------------------------------------------------------
    # Boundary operations
    # ------------------------------------------------------------------

    def delete_asset(self, asset_id: str, owner_id: str | None = None) -> DeleteOutcome:
        """Delete one asset.

        Args:
            asset_id: Asset to delete.
            owner_id: Requesting owner. When given, the asset must belong to
                it; None means the caller already authorized the deletion.

        Returns:
            DeleteOutcome. ``NotFound``/``Forbidden``, step failures and
            unexpected store errors are reported in the outcome, never raised.
        """
        try:
            asset = self._resolve(asset_id, owner_id)
        except DeletionError as exc:
            logger.info("asset %s: %s", asset_id, exc)
            return DeleteOutcome.from_error(
                asset_id, exc, file_name=getattr(exc, "file_name", None)
            )
        except Exception as exc:
            logger.exception("asset %s: unexpected error while resolving", asset_id)
            return DeleteOutcome.unexpected(asset_id, exc)

        try:
            return self._run_pipeline(asset)
        except Exception as exc:
            logger.exception("asset %s: unexpected error during deletion", asset_id)
            return DeleteOutcome.unexpected(asset_id, exc, file_name=asset.file_name)

    def delete_assets(
        self, asset_ids: Iterable[str], owner_id: str | None = None
    ) -> BatchResult:
        """Delete each asset independently and aggregate the outcomes.

        A failing asset is recorded by display name and never stops the
        remaining ones.
        """
        result = BatchResult()
        for asset_id in asset_ids:
            result.record(self.delete_asset(asset_id, owner_id))

        logger.info(
            "batch deletion finished: %d deleted, %d failed (%s)",
            result.deleted_count,
            result.failed_count,
            result.status.value,
        )
        return result

    def delete_all_assets_for_owner(self, owner_id: str) -> OwnerWipeResult:
        """Delete every user-owned asset (documents and images) of *owner_id*."""
        assets = self._repo.list_assets_by_owner(owner_id)
        logger.info("owner %s: wiping %d asset(s)", owner_id, len(assets))
        batch = self.delete_assets([a.id for a in assets], owner_id=owner_id)
        return OwnerWipeResult.from_batch(batch)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def pipeline(self) -> list[tuple[str, Step]]:
        """Return the per-asset steps in execution order."""
        return [
            ("vectors", self._delete_vectors),
            ("references", self._scrub_references),
            ("metadata", self._delete_metadata),
        ]

    def _run_pipeline(self, asset: Asset) -> DeleteOutcome:
        outcome = DeleteOutcome(asset_id=asset.id, file_name=asset.file_name)
        for name, step in self.pipeline():
            logger.debug("asset %s: step %s", asset.id, name)
            try:
                step(asset, outcome)
            except DeletionError as exc:
                exc.asset_id = asset.id
                outcome.error = str(exc)
                outcome.error_code = exc.code
                return outcome

        outcome.success = True
        logger.info(
            "asset %s (%s) deleted: %d vector(s), %d message(s) scrubbed",
            asset.id,
            asset.file_name,
            outcome.vectors_deleted,
            outcome.messages_scrubbed,
        )
        return outcome

    def _resolve(self, asset_id: str, owner_id: str | None) -> Asset:
        asset = self._repo.get_asset(asset_id)
        if asset is None:
            raise NotFound(f"Asset '{asset_id}' not found.", asset_id=asset_id)
        if owner_id is not None and asset.owner_id != owner_id:
            raise Forbidden(
                f"Asset '{asset_id}' is not owned by '{owner_id}'.",
                asset_id=asset_id,
                file_name=asset.file_name,
            )
        return asset

    def _index_for(self, kind: AssetKind) -> VectorIndex:
        return self._library_index if kind is AssetKind.LIBRARY else self._index

    def _delete_vectors(self, asset: Asset, outcome: DeleteOutcome) -> None:
        index = self._index_for(asset.kind)
        try:
            vector_ids = [chunk.vector_id for chunk in self._repo.list_chunks(asset)]
            outcome.vectors_deleted = index.delete_many(vector_ids)
        except Exception as exc:
            logger.error("asset %s: vector deletion on %s failed: %s", asset.id, index.name, exc)
            raise IndexDeleteFailed(
                f"Vector deletion failed for '{asset.file_name}': {exc}", asset_id=asset.id
            ) from exc

    def _scrub_references(self, asset: Asset, outcome: DeleteOutcome) -> None:
        if asset.chat_id is None:
            logger.debug("asset %s: no owning chat, skipping scrub", asset.id)
            return
        try:
            outcome.messages_scrubbed = self._scrubber.scrub(
                asset.chat_id, AssetMatcher.for_asset(asset)
            )
        except ScrubFailed as exc:
            # Non-fatal: the asset is still deleted.
            logger.warning("asset %s: %s", asset.id, exc)
            outcome.messages_scrubbed = exc.modified
            outcome.warnings.append(str(exc))

    def _delete_metadata(self, asset: Asset, outcome: DeleteOutcome) -> None:
        try:
            self._repo.delete_chunks(asset)
            deleted = self._repo.delete_asset_row(asset)
        except Exception as exc:
            logger.error(
                "asset %s (%s): metadata deletion failed; asset is still visible",
                asset.id,
                asset.file_name,
                exc_info=True,
            )
            raise MetadataDeleteFailed(
                f"Metadata deletion failed for '{asset.file_name}': {exc}", asset_id=asset.id
            ) from exc
        if not deleted:
            logger.info("asset %s: metadata row already gone", asset.id)
            outcome.already_gone = True
