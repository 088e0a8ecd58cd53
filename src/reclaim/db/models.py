"""Domain models for the reclaim database layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class AssetKind(str, Enum):
    DOCUMENT = "document"
    LIBRARY = "library"
    IMAGE = "image"


# Kinds owned by an end user; library documents are shared and admin-managed.
USER_ASSET_KINDS: tuple[AssetKind, ...] = (AssetKind.DOCUMENT, AssetKind.IMAGE)


@dataclass
class Asset:
    id: str
    kind: AssetKind
    owner_id: str
    file_name: str
    file_url: str | None = None
    file_key: str | None = None
    mime_type: str | None = None
    chat_id: str | None = None  # always None for library documents
    status: str = "ready"
    created_at: str | None = None


@dataclass
class Chunk:
    id: str
    document_id: str
    chunk_index: int
    vector_id: str
    text: str
    page_number: str | None = None
    created_at: str | None = None


@dataclass
class Message:
    id: str
    chat_id: str
    role: str
    # Semi-structured; usually a list of part dicts, but never trusted to be.
    parts: Any = field(default_factory=list)
    created_at: str | None = None
