from __future__ import annotations

"""Purchase workflows on top of the DAL and the currency service.

- create: country must be a catalog key; the stored currency code is the
  catalog entry's Treasury descriptor.
- converted listing: one unresolvable purchase yields null conversion fields
  for that purchase only; the batch still succeeds.
"""
import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from purchase_app.db.dal import Database
from purchase_app.db.schema import parse_utc_timestamp
from purchase_app.models import PurchaseIn, PurchaseOut, PurchaseWithConversionOut
from purchase_app.services.currency import (
    CurrencyService,
    ExchangeRateNotFound,
    InvalidDescriptor,
)
from purchase_app.services.currency.base import normalize_descriptor

logger = logging.getLogger("purchase_app.purchases")


class UnsupportedCountry(ValueError):
    def __init__(self, country: str):
        self.country = country
        super().__init__(
            f"Country '{country}' is not supported. Please select a country from the available list."
        )


def row_to_purchase_out(row: Dict[str, Any]) -> PurchaseOut:
    return PurchaseOut(**_row_fields(row))


def _row_fields(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "date": datetime.strptime(row["date"], "%Y-%m-%d").date(),
        "description": row["description"],
        "purchase_amount": Decimal(row["purchase_amount"]),
        "country": row["country"],
        "currency_code": row["currency_code"],
        "created_at": parse_utc_timestamp(row["created_at"]),
    }


class PurchaseService:
    def __init__(self, db: Database, currency: CurrencyService):
        self._db = db
        self._currency = currency

    def create(self, payload: PurchaseIn) -> PurchaseOut:
        entry = self._currency.lookup_catalog(payload.country)
        if entry is None:
            raise UnsupportedCountry(payload.country)
        purchase_id = self._db.insert_purchase(
            purchase_id=str(uuid.uuid4()),
            purchase_date=payload.date,
            description=payload.description,
            purchase_amount=payload.purchase_amount,
            country=payload.country,
            currency_code=entry.currency_code,
        )
        row = self._db.get_purchase(purchase_id)
        if row is None:
            raise RuntimeError("purchase not found after insert")
        return row_to_purchase_out(row)

    def list(self) -> List[PurchaseOut]:
        return [row_to_purchase_out(r) for r in self._db.list_purchases()]

    def get(self, purchase_id: str) -> Optional[PurchaseOut]:
        row = self._db.get_purchase(purchase_id)
        return row_to_purchase_out(row) if row else None

    def delete(self, purchase_id: str) -> bool:
        return self._db.delete_purchase(purchase_id)

    def list_converted(self, target: Optional[str]) -> List[PurchaseWithConversionOut]:
        if normalize_descriptor(target) is None:
            raise InvalidDescriptor()
        rows = self._db.list_purchases()
        logger.debug("converting %d purchases to %s", len(rows), target)
        return [self._convert_row(row, target) for row in rows]

    def convert_one(
        self, purchase_id: str, target: Optional[str]
    ) -> Optional[PurchaseWithConversionOut]:
        """Single purchase conversion; ExchangeRateNotFound propagates."""
        row = self._db.get_purchase(purchase_id)
        if row is None:
            return None
        fields = _row_fields(row)
        result = self._currency.convert(fields["purchase_amount"], target, fields["date"])
        return PurchaseWithConversionOut(
            **fields, converted_amount=result.converted, exchange_rate=result.rate
        )

    def _convert_row(self, row: Dict[str, Any], target: str) -> PurchaseWithConversionOut:
        fields = _row_fields(row)
        amount: Decimal = fields["purchase_amount"]
        purchase_date: date = fields["date"]
        try:
            result = self._currency.convert(amount, target, purchase_date)
        except ExchangeRateNotFound as e:
            logger.warning("no conversion for purchase %s: %s", row["id"], e)
            return PurchaseWithConversionOut(**fields)
        except Exception:
            # one broken row must not fail the whole listing
            logger.exception("unexpected error converting purchase %s", row["id"])
            return PurchaseWithConversionOut(**fields)
        return PurchaseWithConversionOut(
            **fields, converted_amount=result.converted, exchange_rate=result.rate
        )
