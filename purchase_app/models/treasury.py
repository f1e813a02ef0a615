from __future__ import annotations

"""Response envelopes of the Treasury Fiscal Data rates-of-exchange endpoint.

Shape: ``{"data": [...], "meta": {"total-count": N, "total-pages": M, ...}}``.
Unknown fields are ignored; ``meta`` keys are accepted hyphenated or
underscored.
"""
from datetime import date
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator


class TreasuryMeta(BaseModel):
    total_count: Optional[int] = Field(
        None, validation_alias=AliasChoices("total-count", "total_count")
    )
    total_pages: Optional[int] = Field(
        None, validation_alias=AliasChoices("total-pages", "total_pages")
    )


class CurrencyListItem(BaseModel):
    country: Optional[str] = None
    country_currency_desc: Optional[str] = None
    record_date: Optional[str] = None


class CurrencyListPage(BaseModel):
    data: Optional[List[CurrencyListItem]] = None
    meta: Optional[TreasuryMeta] = None


class RateItem(BaseModel):
    country_currency_desc: Optional[str] = None
    exchange_rate: Optional[str] = None
    record_date: Optional[date] = None

    @field_validator("exchange_rate", mode="before")
    @classmethod
    def _rate_as_text(cls, v):
        # Keep the rate textual so Decimal parsing stays lossless
        if v is None or isinstance(v, str):
            return v
        return str(v)


class RatePage(BaseModel):
    data: Optional[List[RateItem]] = None
    meta: Optional[TreasuryMeta] = None
