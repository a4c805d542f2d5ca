import datetime
import logging
import sqlite3
from contextlib import contextmanager
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "snapshots": (
            """CREATE TABLE snapshots (
                    key TEXT PRIMARY KEY,
                    value BLOB NOT NULL,
                    updated_at TEXT NOT NULL
                );""",
            ["key", "value", "updated_at"],
        ),
    }

    _COLUMN_DEFAULTS = {
        "updated_at": "'1970-01-01T00:00:00+00:00'",
    }

    def __init__(self, db_path: str = "progression.db") -> None:
        self._db_path = db_path
        self._ensure_schema()

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        logger.info("Migrating table %s from columns %s", table, existing_cols)
        conn.execute(f"DROP TABLE IF EXISTS {table}_old;")
        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)
        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            missing = [c for c in columns if c not in existing_cols]
            if missing:
                defaults = ", ".join(
                    self._COLUMN_DEFAULTS.get(c, "NULL") for c in missing
                )
                conn.execute(
                    f"INSERT INTO {table} ({cols}, {', '.join(missing)}) "
                    f"SELECT {cols}, {defaults} FROM {table}_old;"
                )
            else:
                conn.execute(
                    f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;"
                )
        conn.execute(f"DROP TABLE {table}_old;")


class BaseRepository(Database):
    """Base repository providing helper methods."""

    def execute(self, query: str, params: Tuple = ()) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.lastrowid

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()


class SnapshotRepository(BaseRepository):
    """Key-value store holding serialized save states."""

    def load(self, key: str) -> Optional[bytes]:
        rows = self.fetch_all("SELECT value FROM snapshots WHERE key = ?;", (key,))
        if not rows:
            return None
        value = rows[0][0]
        if isinstance(value, str):
            return value.encode("utf-8")
        return bytes(value)

    def save(self, key: str, data: bytes) -> None:
        now = datetime.datetime.now(datetime.timezone.utc).isoformat()
        self.execute(
            "INSERT INTO snapshots (key, value, updated_at) VALUES (?, ?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value, "
            "updated_at=excluded.updated_at;",
            (key, sqlite3.Binary(data), now),
        )

    def keys(self) -> list[str]:
        rows = self.fetch_all("SELECT key FROM snapshots ORDER BY key;")
        return [r[0] for r in rows]
