"""Schema upgrades for the purchases database.

The metadata table records the applied `schema_version`; each step in
`MIGRATIONS` lifts the file exactly one version and is safe to re-run.

Versions:
  1 - purchases, api_keys, metadata tables
  2 - purchases(date) index backing the newest-first listing
  3 - api_keys(expiration_date) index for key validation
"""

from __future__ import annotations
from pathlib import Path
import logging
import sqlite3
from typing import Callable, Dict, Optional

from . import schema as schema_def
from .schema import init_db

SCHEMA_VERSION_KEY = "schema_version"

logger = logging.getLogger("purchase_app.db.migrate")


def _add_purchases_date_index(cur: sqlite3.Cursor) -> None:
    cur.execute(schema_def.PURCHASES_DATE_INDEX_DDL)


def _add_api_keys_expiration_index(cur: sqlite3.Cursor) -> None:
    cur.execute(schema_def.API_KEYS_EXPIRATION_INDEX_DDL)


MIGRATIONS: Dict[int, Callable[[sqlite3.Cursor], None]] = {
    2: _add_purchases_date_index,
    3: _add_api_keys_expiration_index,
}
CURRENT_SCHEMA_VERSION = max(MIGRATIONS)


def read_schema_version(conn: sqlite3.Connection) -> Optional[int]:
    try:
        row = conn.execute(
            "SELECT value FROM metadata WHERE key=?", (SCHEMA_VERSION_KEY,)
        ).fetchone()
    except sqlite3.OperationalError:
        # no metadata table yet
        return None
    return int(row[0]) if row else None


def apply_migrations(db_path: Path) -> int:
    """Bring the database at `db_path` up to CURRENT_SCHEMA_VERSION."""
    init_db(db_path)
    conn = sqlite3.connect(db_path)
    try:
        version = read_schema_version(conn) or 1
        for target in range(version + 1, CURRENT_SCHEMA_VERSION + 1):
            cur = conn.cursor()
            try:
                MIGRATIONS[target](cur)
                _store_schema_version(cur, target)
                conn.commit()
            except sqlite3.Error:
                conn.rollback()
                logger.error("migration to schema version %d failed", target)
                raise
            logger.info("database migrated to schema version %d", target)
            version = target
        if read_schema_version(conn) is None:
            _store_schema_version(conn.cursor(), version)
            conn.commit()
        return version
    finally:
        conn.close()


def _store_schema_version(cur: sqlite3.Cursor, version: int) -> None:
    cur.execute(
        "INSERT INTO metadata (key, value) VALUES (?, ?) "
        "ON CONFLICT(key) DO UPDATE SET value=excluded.value, "
        f"updated_at=({schema_def.BASIC_UTC_NOW})",
        (SCHEMA_VERSION_KEY, str(version)),
    )
