"""Duck-typed matching between an asset and message ``file`` parts.

Messages reference assets by value (URL, storage key, file name) inside an
opaque JSON payload, not by foreign key. The match is disjunctive: any one
field matching is enough. Anything that does not look like a well-formed
``file`` part is never matched, so uncertain parts are always kept.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from reclaim.db.models import Asset


@dataclass(frozen=True)
class AssetMatcher:
    """Identifying attributes of one asset, as they may appear in a part.

    Empty or missing fields never match anything.
    """

    file_url: str | None = None
    file_key: str | None = None
    file_name: str | None = None

    @classmethod
    def for_asset(cls, asset: Asset) -> AssetMatcher:
        return cls(file_url=asset.file_url, file_key=asset.file_key, file_name=asset.file_name)

    @property
    def is_empty(self) -> bool:
        return not (self.file_url or self.file_key or self.file_name)

    def matches(self, part: Any) -> bool:
        """Return True if *part* is a ``file`` part referencing this asset.

        Matches on exact URL, URL containing the storage key, or exact file
        name. Non-dict parts, parts without ``type`` and non-file parts are
        never matched.
        """
        if not isinstance(part, dict) or "type" not in part:
            return False
        if part["type"] != "file":
            return False

        url = part.get("url")
        url = url if isinstance(url, str) else ""
        name = part.get("filename")
        name = name if isinstance(name, str) else ""

        if self.file_url and url == self.file_url:
            return True
        if self.file_key and self.file_key in url:
            return True
        return bool(self.file_name) and name == self.file_name


def filter_parts(parts: Iterable[Any], matcher: AssetMatcher) -> list[Any]:
    """Return *parts* without the entries *matcher* matches, order preserved."""
    return [part for part in parts if not matcher.matches(part)]
