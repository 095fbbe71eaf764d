"""Store contracts."""

from .base import CollectionChange, TweetStore
from .changeset import ChangeSet, TweetCollection, diff_collections
from .sqlite import (
    DEFAULT_MIGRATIONS,
    Migration,
    RetentionReport,
    SQLiteMigrationRunner,
    SQLiteTweetStore,
    open_store,
)

__all__ = [
    "ChangeSet",
    "CollectionChange",
    "DEFAULT_MIGRATIONS",
    "Migration",
    "RetentionReport",
    "SQLiteMigrationRunner",
    "SQLiteTweetStore",
    "TweetCollection",
    "TweetStore",
    "diff_collections",
    "open_store",
]
