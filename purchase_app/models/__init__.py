"""Pydantic API models for the purchase transactions service."""

from .api_key import ApiKeyIn, ApiKeyOut
from .currency import CountryCurrencyOut
from .purchase import PurchaseIn, PurchaseOut, PurchaseWithConversionOut

__all__ = [
    "ApiKeyIn",
    "ApiKeyOut",
    "CountryCurrencyOut",
    "PurchaseIn",
    "PurchaseOut",
    "PurchaseWithConversionOut",
]
