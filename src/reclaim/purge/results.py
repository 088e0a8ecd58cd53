"""Structured outcomes of single and batch asset deletion."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from reclaim.errors import DeletionError


class BatchStatus(str, Enum):
    COMPLETE = "complete"  # every asset deleted (or the batch was empty)
    PARTIAL = "partial"    # some deleted, some failed ("multi-status")
    FAILED = "failed"      # nothing deleted, at least one failure


@dataclass
class DeleteOutcome:
    """Result of one asset's deletion pipeline.

    ``warnings`` holds non-fatal problems (a scrub that could not rewrite
    every message); the asset still counts as deleted.
    """

    asset_id: str
    file_name: str | None = None
    success: bool = False
    error: str | None = None
    error_code: str | None = None
    warnings: list[str] = field(default_factory=list)
    vectors_deleted: int = 0
    messages_scrubbed: int = 0
    already_gone: bool = False

    @classmethod
    def from_error(
        cls, asset_id: str, exc: DeletionError, file_name: str | None = None
    ) -> DeleteOutcome:
        return cls(
            asset_id=asset_id,
            file_name=file_name,
            success=False,
            error=str(exc),
            error_code=exc.code,
        )

    @classmethod
    def unexpected(
        cls, asset_id: str, exc: Exception, file_name: str | None = None
    ) -> DeleteOutcome:
        return cls(
            asset_id=asset_id, file_name=file_name, error=str(exc), error_code="unexpected"
        )

    @property
    def display_name(self) -> str:
        return self.file_name or self.asset_id


@dataclass
class BatchResult:
    """Fold of per-asset outcomes: how many succeeded, which names failed."""

    deleted_count: int = 0
    failed_file_names: list[str] = field(default_factory=list)
    outcomes: list[DeleteOutcome] = field(default_factory=list)

    def record(self, outcome: DeleteOutcome) -> BatchResult:
        self.outcomes.append(outcome)
        if outcome.success:
            self.deleted_count += 1
        else:
            self.failed_file_names.append(outcome.display_name)
        return self

    @property
    def failed_count(self) -> int:
        return len(self.failed_file_names)

    @property
    def status(self) -> BatchStatus:
        if not self.failed_file_names:
            return BatchStatus.COMPLETE
        if self.deleted_count > 0:
            return BatchStatus.PARTIAL
        return BatchStatus.FAILED


@dataclass
class OwnerWipeResult:
    """Summary of deleting every asset an owner holds."""

    deleted: int = 0
    failed: int = 0
    failed_file_names: list[str] = field(default_factory=list)

    @classmethod
    def from_batch(cls, batch: BatchResult) -> OwnerWipeResult:
        return cls(
            deleted=batch.deleted_count,
            failed=batch.failed_count,
            failed_file_names=list(batch.failed_file_names),
        )

    @property
    def status(self) -> BatchStatus:
        if not self.failed:
            return BatchStatus.COMPLETE
        return BatchStatus.PARTIAL if self.deleted else BatchStatus.FAILED
