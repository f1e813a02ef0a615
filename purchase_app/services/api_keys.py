from __future__ import annotations

"""API key lifecycle and validation.

Keys look like ``wk_<32 hex chars>`` and stay valid through their expiration
date (inclusive).
"""
import uuid
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

from purchase_app.db.dal import Database
from purchase_app.db.schema import parse_utc_timestamp
from purchase_app.models import ApiKeyIn, ApiKeyOut

KEY_PREFIX = "wk_"


def generate_key() -> str:
    return KEY_PREFIX + uuid.uuid4().hex


def row_to_api_key_out(row: Dict[str, Any]) -> ApiKeyOut:
    return ApiKeyOut(
        id=row["id"],
        name=row["name"],
        api_key=row["api_key"],
        expiration_date=datetime.strptime(row["expiration_date"], "%Y-%m-%d").date(),
        created_at=parse_utc_timestamp(row["created_at"]),
    )


class ApiKeyService:
    def __init__(self, db: Database, today: Callable[[], date] = date.today):
        self._db = db
        self._today = today

    def create(self, payload: ApiKeyIn) -> ApiKeyOut:
        key_id = self._db.insert_api_key(
            name=payload.name,
            api_key=generate_key(),
            expiration_date=payload.expiration_date,
        )
        row = self._db.get_api_key(key_id)
        if row is None:
            raise RuntimeError("api key not found after insert")
        return row_to_api_key_out(row)

    def list(self) -> List[ApiKeyOut]:
        return [row_to_api_key_out(r) for r in self._db.list_api_keys()]

    def get(self, key_id: int) -> Optional[ApiKeyOut]:
        row = self._db.get_api_key(key_id)
        return row_to_api_key_out(row) if row else None

    def delete(self, key_id: int) -> bool:
        return self._db.delete_api_key(key_id)

    def is_valid(self, api_key: Optional[str]) -> bool:
        if not api_key:
            return False
        row = self._db.find_api_key(api_key)
        if row is None:
            return False
        expires = datetime.strptime(row["expiration_date"], "%Y-%m-%d").date()
        return expires >= self._today()
