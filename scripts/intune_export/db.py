"""Database helpers: SQLite connection, schema bootstrap, app table access."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, Mapping, Union

from scripts.intune_export.models import AppRecord

logger = logging.getLogger("intune_export.db")

CREATE_APP_TABLE = """
CREATE TABLE IF NOT EXISTS app (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    intuneAppId TEXT UNIQUE,
    platformAppKey TEXT UNIQUE,
    packageId TEXT,
    itunesId TEXT,
    appIdentifier TEXT,
    platform TEXT,
    title TEXT,
    url TEXT,
    description TEXT,
    minInstalls INTEGER,
    maxInstalls INTEGER,
    icon TEXT,
    primaryGenre TEXT,
    releasedAt INTEGER,
    updatedAt INTEGER,
    developerId TEXT,
    developerEmail TEXT,
    developer TEXT,
    developerUrl TEXT,
    developerWebsite TEXT,
    developerAddress TEXT,
    score REAL,
    reviews INTEGER,
    ratings INTEGER,
    ratingsHistogram BLOB
)
"""

# Columns enrichment is allowed to write
METADATA_COLUMNS = (
    "title",
    "url",
    "description",
    "minInstalls",
    "maxInstalls",
    "icon",
    "primaryGenre",
    "releasedAt",
    "updatedAt",
    "developerId",
    "developerEmail",
    "developer",
    "developerUrl",
    "developerWebsite",
    "developerAddress",
    "score",
    "reviews",
    "ratings",
    "ratingsHistogram",
)


class Database:
    """Thin wrapper around a single SQLite connection with app table helpers."""

    def __init__(self, path: Union[str, Path]) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.path = path
        self._conn = sqlite3.connect(str(path))
        self._conn.row_factory = sqlite3.Row
        logger.debug("Connected to %s sqlite database", path)
        self.ensure_schema()

    def close(self) -> None:
        self._conn.close()

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Cursor, None, None]:
        """Yield a cursor inside a commit/rollback transaction."""
        cur = self._conn.cursor()
        try:
            yield cur
            self._conn.commit()
        except Exception:
            self._conn.rollback()
            raise
        finally:
            cur.close()

    def ensure_schema(self) -> None:
        with self.transaction() as cur:
            cur.execute(CREATE_APP_TABLE)

    def _select(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        with self.transaction() as cur:
            cur.execute(sql, params)
            return [dict(row) for row in cur.fetchall()]

    def columns(self) -> list[str]:
        with self.transaction() as cur:
            cur.execute("PRAGMA table_info(app)")
            return [row["name"] for row in cur.fetchall()]

    # ------------------------------------------------------------------
    # App table
    # ------------------------------------------------------------------

    def find_by_key(self, platform_app_key: str) -> list[dict[str, Any]]:
        return self._select(
            "SELECT * FROM app WHERE platformAppKey = ?", (platform_app_key,)
        )

    def insert_if_absent(self, record: AppRecord) -> bool:
        """Insert the record unless its platformAppKey is already stored.

        Returns True when a row was inserted.
        """
        if self.find_by_key(record.platform_app_key):
            logger.debug(
                "App %s already exists in the database", record.platform_app_key
            )
            return False

        row = record.as_row()
        col_list = ", ".join(row)
        placeholders = ", ".join("?" for _ in row)
        with self.transaction() as cur:
            cur.execute(
                f"INSERT INTO app ({col_list}) VALUES ({placeholders})",
                tuple(row.values()),
            )
        return True

    def update_metadata(self, platform_app_key: str, fields: Mapping[str, Any]) -> int:
        """Overwrite the given metadata columns on the row matching the key.

        Returns the number of rows updated.
        """
        unknown = set(fields) - set(METADATA_COLUMNS)
        if unknown:
            raise ValueError(f"Not metadata columns: {sorted(unknown)}")
        if not fields:
            return 0

        set_clauses = ", ".join(f"{c} = ?" for c in fields)
        with self.transaction() as cur:
            cur.execute(
                f"UPDATE app SET {set_clauses} WHERE platformAppKey = ?",
                (*fields.values(), platform_app_key),
            )
            return cur.rowcount

    def find_unenriched(self) -> list[dict[str, Any]]:
        return self._select("SELECT * FROM app WHERE title IS NULL ORDER BY id")

    def all_rows(self) -> list[dict[str, Any]]:
        return self._select("SELECT * FROM app ORDER BY id")
