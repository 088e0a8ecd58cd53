"""Deletion error taxonomy.

Each error carries a stable ``code`` for structured outcomes and a
``retryable`` flag. Retrying always means re-running the whole asset
deletion: every step is idempotent, so a rerun converges.
"""

from __future__ import annotations

from collections.abc import Sequence


class DeletionError(Exception):
    """Base class for failures of one asset's deletion pipeline."""

    code: str = "deletion_failed"
    retryable: bool = False

    def __init__(self, message: str, *, asset_id: str | None = None) -> None:
        super().__init__(message)
        self.asset_id = asset_id


class NotFound(DeletionError):
    """The asset does not exist (or was already deleted)."""

    code = "not_found"


class Forbidden(DeletionError):
    """The caller does not own the asset.

    Attributes:
        file_name: Display name of the resolved asset, if known.
    """

    code = "forbidden"

    def __init__(
        self, message: str, *, asset_id: str | None = None, file_name: str | None = None
    ) -> None:
        super().__init__(message, asset_id=asset_id)
        self.file_name = file_name


class IndexDeleteFailed(DeletionError):
    """A vector-index batch delete failed; later batches were not sent."""

    code = "index_delete_failed"
    retryable = True


class ScrubFailed(DeletionError):
    """One or more messages could not persist their scrubbed parts.

    Attributes:
        chat_id: Chat whose messages were being scrubbed.
        message_ids: Messages whose rewrite failed.
        modified: Messages that were rewritten successfully before and after
            the failures.
    """

    code = "scrub_failed"
    retryable = True

    def __init__(
        self,
        chat_id: str,
        message_ids: Sequence[str],
        modified: int = 0,
        *,
        asset_id: str | None = None,
        reason: str | None = None,
    ) -> None:
        detail = reason or f"{len(message_ids)} message(s) could not be rewritten"
        super().__init__(f"Scrubbing chat '{chat_id}' incomplete: {detail}", asset_id=asset_id)
        self.chat_id = chat_id
        self.message_ids = list(message_ids)
        self.modified = modified


class MetadataDeleteFailed(DeletionError):
    """The chunk rows or the asset row could not be deleted.

    The asset stays visible to its owner even though its vectors are gone.
    """

    code = "metadata_delete_failed"
    retryable = True
