"""reclaim database layer."""

from reclaim.db.connection import Database, open_database
from reclaim.db.migrations import MIGRATIONS, run_migrations
from reclaim.db.models import USER_ASSET_KINDS, Asset, AssetKind, Chunk, Message
from reclaim.db.repository import Repository
from reclaim.db.schema import initialize

__all__ = [
    "Database",
    "open_database",
    "initialize",
    "run_migrations",
    "MIGRATIONS",
    "Asset",
    "AssetKind",
    "Chunk",
    "Message",
    "Repository",
    "USER_ASSET_KINDS",
]
