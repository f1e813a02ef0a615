"""Data Access Layer utilities.

Responsibilities
----------------
- Persist and fetch purchase transactions (newest purchase date first).
- Persist and fetch API keys, including lookup by key value for auth.

Rows are returned as plain dicts; amounts stay decimal strings so callers can
rebuild exact Decimal values.
"""

from __future__ import annotations

from pathlib import Path
import sqlite3
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional


class Database:
    def __init__(self, db_path: Path):
        self.db_path = db_path

    # ------------------------------------------------------------------
    # Connection helpers
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    # ------------------------------------------------------------------
    # Purchases
    def insert_purchase(
        self,
        *,
        purchase_id: str,
        purchase_date: date,
        description: str,
        purchase_amount: Decimal,
        country: str,
        currency_code: str,
    ) -> str:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO purchases (id, date, description, purchase_amount, country, currency_code)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    purchase_id,
                    purchase_date.isoformat(),
                    description,
                    str(purchase_amount),
                    country,
                    currency_code,
                ),
            )
            conn.commit()
        return purchase_id

    def list_purchases(self) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM purchases ORDER BY date DESC, created_at DESC")
            return [dict(r) for r in cur.fetchall()]

    def get_purchase(self, purchase_id: str) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM purchases WHERE id = ?", (purchase_id,))
            row = cur.fetchone()
            return dict(row) if row else None

    def delete_purchase(self, purchase_id: str) -> bool:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM purchases WHERE id = ?", (purchase_id,))
            conn.commit()
            return cur.rowcount > 0

    # ------------------------------------------------------------------
    # API keys
    def insert_api_key(self, *, name: str, api_key: str, expiration_date: date) -> int:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "INSERT INTO api_keys (name, api_key, expiration_date) VALUES (?, ?, ?)",
                (name, api_key, expiration_date.isoformat()),
            )
            conn.commit()
            return int(cur.lastrowid)

    def list_api_keys(self) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM api_keys ORDER BY id ASC")
            return [dict(r) for r in cur.fetchall()]

    def get_api_key(self, key_id: int) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM api_keys WHERE id = ?", (key_id,))
            row = cur.fetchone()
            return dict(row) if row else None

    def find_api_key(self, api_key: str) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM api_keys WHERE api_key = ?", (api_key,))
            row = cur.fetchone()
            return dict(row) if row else None

    def delete_api_key(self, key_id: int) -> bool:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM api_keys WHERE id = ?", (key_id,))
            conn.commit()
            return cur.rowcount > 0
