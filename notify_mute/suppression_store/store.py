"""SQLite-backed suppression state store.

The store is a small key-value table (fingerprint -> value, meta) plus the
suppression rules on top of it. One store is opened per process and shared
by the dispatcher and the callback handler.

Concurrency contract:
- All SQLite access goes through one connection guarded by an internal
  mutex, so the store is safe to share between threads.
- ``locked(fingerprint)`` hands out a per-fingerprint re-entrant lock.
  ``record_snooze``, ``record_mute`` and ``clear`` take that lock
  themselves, so a writer for a fingerprint waits for any caller holding
  the same fingerprint's lock (the dispatcher holds it across
  read -> send -> write). Different fingerprints never block each other.
  A fingerprint's lock lives only while some thread holds or waits on it.
"""

import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Iterator

from ..errors import CorruptStateError, StorageError
from .models import (
    SuppressionRecord,
    SuppressionState,
    utcnow,
)

logger = logging.getLogger(__name__)

DB_FILENAME = "suppression.db"


def _parse_updated_at(fingerprint: str, value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise CorruptStateError(fingerprint, f"bad updated_at: {e}") from e


class SuppressionStore:
    """Persistent suppression state keyed by alert fingerprint."""

    def __init__(
        self,
        data_dir: str | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Open the store, creating its directory if needed.

        Args:
            data_dir: Directory holding the database. Defaults to
                      NOTIFY_MUTE_DATA_DIR env var or ~/.notify-mute
            clock: Returns the current timezone-aware time. Defaults to UTC now.
        """
        if data_dir:
            self.data_dir = os.path.expanduser(data_dir)
        else:
            self.data_dir = os.path.expanduser(
                os.environ.get("NOTIFY_MUTE_DATA_DIR", "~/.notify-mute")
            )
        self.db_path = os.path.join(self.data_dir, DB_FILENAME)
        self._clock = clock or utcnow

        self._db_lock = threading.Lock()
        # fingerprint -> [lock, number of holders and waiters]
        self._locks: dict[str, list] = {}
        self._locks_guard = threading.Lock()

        try:
            os.makedirs(self.data_dir, exist_ok=True)
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        except (OSError, sqlite3.Error) as e:
            raise StorageError(f"Cannot open suppression store at {self.db_path}: {e}") from e

        try:
            self._init_db()
        except StorageError:
            self._conn.close()
            self._conn = None
            raise
        logger.info(f"Opened suppression store at {self.db_path}")

    def _init_db(self) -> None:
        """Initialize database schema."""
        schema_path = Path(__file__).parent / "schema.sql"
        schema = schema_path.read_text()

        with self._db_lock:
            try:
                self._conn.executescript(schema)
                self._conn.commit()
            except sqlite3.Error as e:
                raise StorageError(f"Cannot initialize suppression store: {e}") from e

    def _require_open(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageError("Suppression store is closed")
        return self._conn

    def now(self) -> datetime:
        return self._clock()

    # Locking

    @contextmanager
    def locked(self, fingerprint: str) -> Iterator[None]:
        """Hold the lock for one fingerprint.

        Re-entrant, so the holder may call record_* for the same fingerprint.
        The entry is dropped once no thread holds or waits on it.
        """
        with self._locks_guard:
            entry = self._locks.get(fingerprint)
            if entry is None:
                entry = [threading.RLock(), 0]
                self._locks[fingerprint] = entry
            entry[1] += 1

        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[fingerprint]

    # Key-value access

    def get(self, key: str) -> tuple[bytes | None, int | None, bool]:
        """Read a raw entry.

        Returns:
            (value, meta, exists). value and meta are None when absent.
        """
        with self._db_lock:
            conn = self._require_open()
            try:
                row = conn.execute(
                    "SELECT value, meta FROM suppression WHERE fingerprint = ?",
                    (key,)
                ).fetchone()
            except sqlite3.Error as e:
                raise StorageError(f"Failed to read {key}: {e}") from e

        if row is None:
            return None, None, False
        return bytes(row[0]), row[1], True

    def set(self, key: str, value: bytes, meta: int) -> None:
        """Write a raw entry, replacing any existing one."""
        updated_at = self.now().isoformat()
        with self._db_lock:
            conn = self._require_open()
            try:
                conn.execute(
                    """
                    INSERT INTO suppression (fingerprint, value, meta, updated_at)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(fingerprint) DO UPDATE SET
                        value = excluded.value,
                        meta = excluded.meta,
                        updated_at = excluded.updated_at
                    """,
                    (key, sqlite3.Binary(value), meta, updated_at)
                )
                conn.commit()
            except sqlite3.Error as e:
                raise StorageError(f"Failed to write {key}: {e}") from e

    def delete(self, key: str) -> bool:
        """Remove an entry. Returns True if one existed."""
        with self._db_lock:
            conn = self._require_open()
            try:
                cursor = conn.execute(
                    "DELETE FROM suppression WHERE fingerprint = ?",
                    (key,)
                )
                conn.commit()
            except sqlite3.Error as e:
                raise StorageError(f"Failed to delete {key}: {e}") from e
        return cursor.rowcount > 0

    # Suppression state

    def get_record(self, fingerprint: str) -> SuppressionRecord:
        """Load the suppression record for a fingerprint.

        Raises:
            StorageError: On read failure.
            CorruptStateError: If the stored value cannot be decoded.
        """
        value, meta, exists = self.get(fingerprint)
        if not exists:
            return SuppressionRecord.unset(fingerprint)
        return SuppressionRecord.decode(fingerprint, value, meta)

    def should_send(self, fingerprint: str) -> bool:
        """Check whether a notification for this fingerprint may be sent now.

        No record or an expired snooze allows sending; an active snooze or
        a mute does not.
        """
        record = self.get_record(fingerprint)
        return not record.is_suppressed(self.now())

    def record_snooze(self, fingerprint: str, duration: timedelta) -> SuppressionRecord:
        """Snooze a fingerprint for a duration, replacing any mute."""
        with self.locked(fingerprint):
            record = SuppressionRecord.snoozed(fingerprint, self.now() + duration)
            value, meta = record.encode()
            self.set(fingerprint, value, meta)
        logger.info(f"Snoozed {fingerprint} until {record.snoozed_until.isoformat()}")
        return record

    def record_mute(self, fingerprint: str) -> SuppressionRecord:
        """Mute a fingerprint until overwritten, replacing any snooze."""
        with self.locked(fingerprint):
            record = SuppressionRecord.muted(fingerprint)
            value, meta = record.encode()
            self.set(fingerprint, value, meta)
        logger.info(f"Muted {fingerprint}")
        return record

    def clear(self, fingerprint: str) -> bool:
        """Reset a fingerprint to unset. Returns True if it had a record."""
        with self.locked(fingerprint):
            removed = self.delete(fingerprint)
        if removed:
            logger.info(f"Cleared suppression for {fingerprint}")
        return removed

    def list_records(self, state: SuppressionState | None = None) -> list[SuppressionRecord]:
        """List stored records, most recently updated first.

        Records that fail to decode are skipped with a warning.
        """
        with self._db_lock:
            conn = self._require_open()
            try:
                rows = conn.execute(
                    """
                    SELECT fingerprint, value, meta, updated_at
                    FROM suppression ORDER BY updated_at DESC
                    """
                ).fetchall()
            except sqlite3.Error as e:
                raise StorageError(f"Failed to list records: {e}") from e

        records = []
        for fingerprint, value, meta, updated_at in rows:
            try:
                record = SuppressionRecord.decode(
                    fingerprint,
                    bytes(value),
                    meta,
                    updated_at=_parse_updated_at(fingerprint, updated_at),
                )
            except StorageError as e:
                logger.warning(str(e))
                continue
            if state is None or record.state == state:
                records.append(record)
        return records

    # Lifecycle

    def close(self) -> None:
        """Close the underlying database. Further calls raise StorageError."""
        with self._db_lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                logger.info(f"Closed suppression store at {self.db_path}")

    def __enter__(self) -> "SuppressionStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
