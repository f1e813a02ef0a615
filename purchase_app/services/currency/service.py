from __future__ import annotations

from datetime import date
from decimal import Decimal
from functools import lru_cache
from typing import List, Optional

from purchase_app.core.config import Settings, get_settings
from .base import CatalogEntry, ConversionResult
from .catalog import Catalog, CatalogCache, CatalogLoader
from .resolver import RateResolver
from .treasury import TreasuryClient

"""Currency integration facade.

Single object routers and the purchase service depend on. Wires the Treasury
client into the catalog cache and the rate resolver and exposes the public
operations: list_catalog, lookup_catalog, resolve_rate, convert.
"""


class CurrencyService:
    def __init__(self, client: TreasuryClient, loader: Optional[CatalogLoader] = None):
        self.client = client
        self._cache = CatalogCache(loader or CatalogLoader(client))
        self._resolver = RateResolver(client)

    @classmethod
    def from_settings(cls, settings: Settings) -> "CurrencyService":
        client = TreasuryClient(
            settings.currency_api_url, timeout=settings.http_timeout_seconds
        )
        return cls(client)

    # Catalog ---------------------------------------------------
    @property
    def catalog_loaded(self) -> bool:
        return self._cache.loaded

    def catalog(self) -> Catalog:
        return self._cache.get()

    def list_catalog(self) -> List[CatalogEntry]:
        return list(self._cache.get().entries)

    def lookup_catalog(self, key: Optional[str]) -> Optional[CatalogEntry]:
        return self._cache.get().lookup(key)

    # Rates -----------------------------------------------------
    def resolve_rate(self, descriptor: Optional[str], purchase_date: date) -> Decimal:
        return self._resolver.resolve_rate(descriptor, purchase_date)

    def convert(
        self, amount_usd: Decimal, target: Optional[str], purchase_date: date
    ) -> ConversionResult:
        return self._resolver.convert(amount_usd, target, purchase_date)


# Singleton used when the app runs on default settings
@lru_cache
def get_currency_service() -> CurrencyService:
    return CurrencyService.from_settings(get_settings())
