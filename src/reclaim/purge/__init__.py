"""Asset deletion engine."""

from reclaim.purge.deleter import AssetDeleter
from reclaim.purge.matcher import AssetMatcher, filter_parts
from reclaim.purge.results import BatchResult, BatchStatus, DeleteOutcome, OwnerWipeResult
from reclaim.purge.scrubber import ReferenceScrubber

__all__ = [
    "AssetDeleter",
    "AssetMatcher",
    "filter_parts",
    "BatchResult",
    "BatchStatus",
    "DeleteOutcome",
    "OwnerWipeResult",
    "ReferenceScrubber",
]
