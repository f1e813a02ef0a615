from __future__ import annotations

"""Core currency types shared by the Treasury client, catalog and resolver.

A currency descriptor is the Treasury's ``country_currency_desc`` string
(e.g. "Canada-Dollar"). It is never split apart here: it goes to the upstream
verbatim and is only compared after trimming, case-insensitively.
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

USD_DESCRIPTOR = "United States-Dollar"
USD_SYNONYMS = frozenset({"usd", "united states-dollar", "united states"})


@dataclass(frozen=True)
class CatalogEntry:
    country: str
    currency_code: str
    currency_name: str

    @classmethod
    def from_descriptor(cls, country: str, descriptor: str) -> "CatalogEntry":
        return cls(country=country, currency_code=descriptor, currency_name=descriptor)


@dataclass(frozen=True)
class RateRecord:
    descriptor: str
    rate: Decimal
    record_date: Optional[date]


@dataclass(frozen=True)
class ConversionResult:
    converted: Decimal
    rate: Decimal


def normalize_descriptor(descriptor: Optional[str]) -> Optional[str]:
    """Trimmed descriptor, or None when missing/blank."""
    if descriptor is None:
        return None
    trimmed = descriptor.strip()
    return trimmed or None


def is_usd(descriptor: str) -> bool:
    return descriptor.strip().lower() in USD_SYNONYMS
