"""Currency integration: Treasury client, catalog, rate resolution."""

from .base import CatalogEntry, ConversionResult, RateRecord, USD_DESCRIPTOR, is_usd
from .catalog import POPULAR_CURRENCIES, Catalog, CatalogCache, CatalogLoader
from .errors import CurrencyError, ExchangeRateNotFound, InvalidDescriptor
from .resolver import RateResolver, rate_window
from .service import CurrencyService, get_currency_service
from .treasury import TreasuryClient

__all__ = [
    "CatalogEntry",
    "ConversionResult",
    "RateRecord",
    "USD_DESCRIPTOR",
    "is_usd",
    "POPULAR_CURRENCIES",
    "Catalog",
    "CatalogCache",
    "CatalogLoader",
    "CurrencyError",
    "ExchangeRateNotFound",
    "InvalidDescriptor",
    "RateResolver",
    "rate_window",
    "CurrencyService",
    "get_currency_service",
    "TreasuryClient",
]
