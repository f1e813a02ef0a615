"""Database schema DDL definitions and initialization utilities.

Tables:
  - purchases: USD purchase transactions (amount kept as decimal text)
  - api_keys: issued API keys with expiration dates
  - metadata: key/value store (schema version)
"""

from __future__ import annotations
import sqlite3
from datetime import datetime
from typing import Sequence
from pathlib import Path

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"


def parse_utc_timestamp(value: str) -> datetime:
    """Read a BASIC_UTC_NOW value back as an aware UTC datetime."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


PURCHASES_DDL = f"""
CREATE TABLE IF NOT EXISTS purchases (
    id TEXT PRIMARY KEY, -- uuid4
    date TEXT NOT NULL, -- ISO date (YYYY-MM-DD)
    description TEXT NOT NULL CHECK (length(description) <= 50),
    purchase_amount TEXT NOT NULL, -- USD, decimal string scaled to cents
    country TEXT NOT NULL,
    currency_code TEXT NOT NULL, -- Treasury country_currency_desc
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

API_KEYS_DDL = f"""
CREATE TABLE IF NOT EXISTS api_keys (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL CHECK (length(name) <= 100),
    api_key TEXT NOT NULL UNIQUE,
    expiration_date TEXT NOT NULL, -- ISO date, valid through this day
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

METADATA_DDL = f"""
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

PURCHASES_DATE_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_purchases_date ON purchases(date DESC);"
)

API_KEYS_EXPIRATION_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_api_keys_expiration ON api_keys(expiration_date);"
)

DDL_ORDER: Sequence[str] = (
    PURCHASES_DDL,
    API_KEYS_DDL,
    METADATA_DDL,
)


def init_db(path: Path) -> None:
    """Create all tables idempotently.

    Parameters
    ----------
    path: Path to SQLite database file.
    """
    conn = sqlite3.connect(path)
    try:
        cur = conn.cursor()
        for ddl in DDL_ORDER:
            cur.execute(ddl)
        conn.commit()
    finally:
        conn.close()
