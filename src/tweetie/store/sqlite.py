"""Tweet persistence in SQLite, with change notifications per write."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
import sqlite3

from tweetie.errors import StoreError
from tweetie.logging import get_logger
from tweetie.models import Tweet
from tweetie.reactive import Disposable, Observable, Observer, Subject
from tweetie.store.base import CollectionChange
from tweetie.store.changeset import TweetCollection, diff_collections

logger = get_logger(__name__)


@dataclass(frozen=True)
class Migration:
    version: str
    statements: tuple[str, ...]


@dataclass(frozen=True)
class RetentionReport:
    dry_run: bool
    cutoff: datetime
    candidates: int
    deleted: int


_PRAGMAS = (
    "PRAGMA journal_mode = WAL",
    "PRAGMA synchronous = NORMAL",
    "PRAGMA busy_timeout = 5000",
)

_VERSION_TABLE_SQL = (
    "CREATE TABLE IF NOT EXISTS schema_versions (version TEXT PRIMARY KEY, applied_at TEXT NOT NULL)"
)

DEFAULT_MIGRATIONS: tuple[Migration, ...] = (
    Migration(
        version="0001_initial_tweet_schema",
        statements=(
            "CREATE TABLE tweets ("
            " id INTEGER PRIMARY KEY, text TEXT NOT NULL, name TEXT NOT NULL,"
            " created_at TEXT NOT NULL, image_url TEXT,"
            " inserted_at TEXT NOT NULL, updated_at TEXT NOT NULL)",
            "CREATE INDEX tweets_by_created ON tweets(created_at DESC, id DESC)",
        ),
    ),
)

_UPSERT_SQL = """
    INSERT INTO tweets(id, text, name, created_at, image_url, inserted_at, updated_at)
    VALUES(?, ?, ?, ?, ?, ?, ?)
    ON CONFLICT(id) DO UPDATE SET
        text = excluded.text,
        name = excluded.name,
        created_at = excluded.created_at,
        image_url = excluded.image_url,
        updated_at = excluded.updated_at
"""

_INSERT_NEW_SQL = """
    INSERT OR IGNORE INTO tweets(id, text, name, created_at, image_url, inserted_at, updated_at)
    VALUES(?, ?, ?, ?, ?, ?, ?)
"""


class SQLiteMigrationRunner:
    """Bring a connection up to the newest schema version.

    Each migration runs in its own transaction and is recorded in
    ``schema_versions``; versions already recorded are skipped.
    """

    def __init__(self, migrations: Sequence[Migration] | None = None) -> None:
        self._migrations = tuple(migrations or DEFAULT_MIGRATIONS)
        _check_versions(self._migrations)

    @property
    def versions(self) -> tuple[str, ...]:
        return tuple(migration.version for migration in self._migrations)

    def bootstrap(self, conn: sqlite3.Connection) -> tuple[str, ...]:
        """Apply pragmas and pending migrations; return the versions applied now."""
        try:
            for pragma in _PRAGMAS:
                conn.execute(pragma)
            conn.execute(_VERSION_TABLE_SQL)
        except sqlite3.Error as exc:
            raise StoreError(f"Could not prepare SQLite database: {exc}.") from exc

        done = set(self.applied_versions(conn))
        pending = [migration for migration in self._migrations if migration.version not in done]
        for migration in pending:
            self._apply(conn, migration)
        return tuple(migration.version for migration in pending)

    def applied_versions(self, conn: sqlite3.Connection) -> tuple[str, ...]:
        try:
            rows = conn.execute("SELECT version FROM schema_versions ORDER BY version").fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Could not read schema versions: {exc}.") from exc
        return tuple(str(row[0]) for row in rows)

    def _apply(self, conn: sqlite3.Connection, migration: Migration) -> None:
        try:
            conn.execute("BEGIN")
            for statement in migration.statements:
                conn.execute(statement)
            conn.execute(
                "INSERT INTO schema_versions(version, applied_at) VALUES(?, ?)",
                (migration.version, _dt_to_db(_utcnow())),
            )
            conn.execute("COMMIT")
        except sqlite3.Error as exc:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise StoreError(f"Migration {migration.version} failed and was rolled back: {exc}.") from exc


def _check_versions(migrations: Sequence[Migration]) -> None:
    versions = [migration.version for migration in migrations]
    if len(set(versions)) != len(versions):
        raise StoreError(f"Duplicate migration versions in {versions}.")
    if versions != sorted(versions):
        raise StoreError(f"Migration versions must be ascending, got {versions}.")


class SQLiteTweetStore:
    """SQLite tweet collection that notifies listeners after every write.

    Writes are serialized by the single connection; each committed write is
    followed by exactly one notification to every active ``changeset()``
    listener. Notifications go out in commit order: a write made by a listener
    while a snapshot is being delivered is published after every listener has
    received that snapshot.
    """

    def __init__(
        self,
        db_path: str | Path,
        *,
        migration_runner: SQLiteMigrationRunner | None = None,
    ) -> None:
        self._db_path = Path(db_path).expanduser()
        self._migration_runner = migration_runner or SQLiteMigrationRunner()
        self._writes: Subject[TweetCollection] = Subject()
        self._closed = False
        self._pending: deque[TweetCollection] = deque()
        self._delivering = False

        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self._db_path), isolation_level=None)
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot open tweet database {self._db_path}: {exc}.") from exc
        except OSError as exc:
            raise StoreError(f"Cannot create the directory for {self._db_path}: {exc}.") from exc

        self._conn.row_factory = sqlite3.Row
        try:
            applied = self._migration_runner.bootstrap(self._conn)
        except StoreError:
            self._conn.close()
            raise
        if applied:
            logger.info("Migrated %s to %s", self._db_path, applied[-1])

    @property
    def db_path(self) -> Path:
        return self._db_path

    @property
    def is_closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._writes.on_completed()
        try:
            self._conn.close()
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot close tweet database {self._db_path}: {exc}.") from exc

    def add(self, tweets: Iterable[Tweet], *, update: bool = True) -> int:
        """Upsert tweets by id; with ``update=False`` existing rows are left alone."""
        self._ensure_open()
        batch = tuple(tweets)
        if not batch:
            return 0

        now = _dt_to_db(_utcnow())
        rows = [
            (
                tweet.id,
                tweet.text,
                tweet.name,
                _dt_to_db(tweet.created),
                tweet.image_url,
                now,
                now,
            )
            for tweet in batch
        ]
        before = self._conn.total_changes
        try:
            self._conn.execute("BEGIN")
            self._conn.executemany(_UPSERT_SQL if update else _INSERT_NEW_SQL, rows)
            self._conn.execute("COMMIT")
        except sqlite3.Error as exc:
            self._rollback()
            raise StoreError(f"Could not persist {len(batch)} tweet(s): {exc}.") from exc
        written = self._conn.total_changes - before
        logger.debug("Stored %d of %d tweet(s) in %s", written, len(batch), self._db_path)
        if written:
            self._notify()
        return written

    def objects(self) -> TweetCollection:
        self._ensure_open()
        try:
            rows = self._conn.execute(
                """
                SELECT id, text, name, created_at, image_url
                FROM tweets
                ORDER BY created_at DESC, id DESC
                """
            ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Could not load tweets from '{self._db_path}': {exc}.") from exc
        return TweetCollection(tuple(_row_to_tweet(row) for row in rows))

    def count(self) -> int:
        self._ensure_open()
        try:
            row = self._conn.execute("SELECT COUNT(*) FROM tweets").fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"Could not count tweets in '{self._db_path}': {exc}.") from exc
        return int(row[0]) if row is not None else 0

    def changeset(self) -> Observable[CollectionChange]:
        """Emit ``(collection, None)`` on subscribe, then ``(collection, delta)`` per write."""

        def _subscribe(observer: Observer[CollectionChange]) -> Disposable:
            previous = self.objects()
            observer.on_next((previous, None))

            def _on_write(snapshot: TweetCollection) -> None:
                nonlocal previous
                change = diff_collections(previous, snapshot)
                previous = snapshot
                observer.on_next((snapshot, change))

            return self._writes.subscribe(_on_write, observer.on_error, observer.on_completed)

        return Observable(_subscribe)

    def migration_versions(self) -> tuple[str, ...]:
        self._ensure_open()
        return self._migration_runner.applied_versions(self._conn)

    def apply_retention(
        self,
        retention_days: int,
        *,
        now: datetime | None = None,
        dry_run: bool = False,
    ) -> RetentionReport:
        self._ensure_open()
        if retention_days < 0:
            raise StoreError("Retention 'retention_days' must be >= 0.")
        cutoff = _normalize_datetime(now or _utcnow()) - timedelta(days=retention_days)
        cutoff_value = _dt_to_db(cutoff)

        try:
            row = self._conn.execute(
                "SELECT COUNT(*) FROM tweets WHERE julianday(created_at) < julianday(?)",
                (cutoff_value,),
            ).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"Could not count retention candidates: {exc}.") from exc
        candidates = int(row[0]) if row is not None else 0

        deleted = 0
        if not dry_run and candidates:
            try:
                cursor = self._conn.execute(
                    "DELETE FROM tweets WHERE julianday(created_at) < julianday(?)",
                    (cutoff_value,),
                )
            except sqlite3.Error as exc:
                raise StoreError(f"Could not delete tweets older than {cutoff_value}: {exc}.") from exc
            deleted = int(cursor.rowcount)
            self._notify()

        return RetentionReport(dry_run=dry_run, cutoff=cutoff, candidates=candidates, deleted=deleted)

    def _notify(self) -> None:
        """Publish the post-write snapshot; a failed snapshot load is logged, not raised."""
        if not self._writes.has_observers:
            return
        try:
            snapshot = self.objects()
        except StoreError as exc:
            logger.warning("Change notification skipped for %s: %s", self._db_path, exc)
            return
        self._pending.append(snapshot)
        # A listener that writes during delivery queues its snapshot behind the current one.
        if self._delivering:
            return
        self._delivering = True
        try:
            while self._pending:
                self._writes.on_next(self._pending.popleft())
        finally:
            self._delivering = False
            self._pending.clear()

    def _ensure_open(self) -> None:
        if self._closed:
            raise StoreError(f"Tweet store '{self._db_path}' is closed.")

    def _rollback(self) -> None:
        try:
            self._conn.execute("ROLLBACK")
        except sqlite3.Error:
            logger.debug("Rollback skipped for %s: no active transaction", self._db_path)


def open_store(db_path: str | Path) -> SQLiteTweetStore:
    """Open (and migrate) the tweet store at ``db_path``."""
    return SQLiteTweetStore(db_path)


def _row_to_tweet(row: sqlite3.Row) -> Tweet:
    created = _db_to_dt(row["created_at"])
    if created is None:
        raise StoreError(f"Tweet row {row['id']} has invalid 'created_at': {row['created_at']!r}.")
    return Tweet(
        id=int(row["id"]),
        text=str(row["text"]),
        name=str(row["name"]),
        created=created,
        image_url=str(row["image_url"]) if row["image_url"] is not None else None,
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _normalize_datetime(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _dt_to_db(value: datetime) -> str:
    return _normalize_datetime(value).isoformat()


def _db_to_dt(raw: object) -> datetime | None:
    if raw is None:
        return None
    value = str(raw).strip()
    if not value:
        return None
    if value.endswith("Z"):
        value = f"{value[:-1]}+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    return _normalize_datetime(parsed)
