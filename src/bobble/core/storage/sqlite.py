"""
SQLite report store.

Keeps the uploaded build report on disk between CLI invocations, so a stats
file is loaded once and explored many times. Features:
- Schema versioning with automatic migrations
- Connection handling via context managers
- One row per key; a new upload replaces the previous one
"""

import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ...config import STATS_KEY

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


@dataclass(frozen=True)
class StoredReport:
    """
    A report as saved in the store.

    Attributes:
        key: Storage key.
        name: Original file name.
        content: Raw report bytes.
        saved_at: When the report was saved (UTC).
    """

    key: str
    name: str
    content: bytes
    saved_at: datetime

    @property
    def size_bytes(self) -> int:
        return len(self.content)


class SQLiteReportStore:
    """
    Persistent key/value storage of build reports in a local SQLite file.
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._init_db()

    @contextmanager
    def _connection(self):
        """Context manager for database connections."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self) -> None:
        """Initialize database schema with versioning."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        with self._connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL,
                    description TEXT
                )
            """)

            current_version = self._get_schema_version_internal(conn)

            if current_version < SCHEMA_VERSION:
                self._migrate(conn, current_version)

    def _get_schema_version_internal(self, conn: sqlite3.Connection) -> int:
        row = conn.execute(
            "SELECT MAX(version) as v FROM schema_version"
        ).fetchone()
        return row["v"] if row and row["v"] else 0

    def _migrate(self, conn: sqlite3.Connection, from_version: int) -> None:
        """Run schema migrations."""
        if from_version < 1:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS reports (
                    key TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    content BLOB NOT NULL,
                    saved_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                INSERT INTO schema_version (version, applied_at, description)
                VALUES (1, ?, 'Initial schema')
            """, (datetime.now(timezone.utc).isoformat(),))

    def get_schema_version(self) -> int:
        with self._connection() as conn:
            return self._get_schema_version_internal(conn)

    def save(self, name: str, content: bytes, key: str = STATS_KEY) -> StoredReport:
        """Persist a report, replacing any report stored under the same key."""
        report = StoredReport(
            key=key,
            name=name,
            content=bytes(content),
            saved_at=datetime.now(timezone.utc),
        )
        with self._connection() as conn:
            conn.execute("""
                INSERT OR REPLACE INTO reports (key, name, content, saved_at)
                VALUES (?, ?, ?, ?)
            """, (report.key, report.name, sqlite3.Binary(report.content), report.saved_at.isoformat()))
        logger.info(f"Saved report {name} ({report.size_bytes} bytes) under '{key}'")
        return report

    def save_file(self, path: Path, key: str = STATS_KEY) -> StoredReport:
        path = Path(path)
        return self.save(path.name, path.read_bytes(), key=key)

    def load(self, key: str = STATS_KEY) -> Optional[StoredReport]:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM reports WHERE key = ?", (key,)
            ).fetchone()
            return self._row_to_report(row) if row else None

    def _row_to_report(self, row: sqlite3.Row) -> StoredReport:
        return StoredReport(
            key=row["key"],
            name=row["name"],
            content=bytes(row["content"]),
            saved_at=datetime.fromisoformat(row["saved_at"]),
        )

    def clear(self) -> None:
        with self._connection() as conn:
            conn.execute("DELETE FROM reports")
