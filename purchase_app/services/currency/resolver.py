from __future__ import annotations

"""Per-purchase exchange rate resolution and USD conversion.

Rates are "units of target currency per 1 USD" as published by the Treasury.
The rate used for a purchase is the most recent one recorded on or before the
purchase date, no older than six calendar months. Rounding (half-up, cents)
happens once, on the converted amount.
"""
import calendar
import logging
from datetime import date
from decimal import Decimal, DecimalException
from typing import Optional

from purchase_app.services.money import round2, to_decimal
from .base import ConversionResult, RateRecord, is_usd, normalize_descriptor
from .errors import (
    CAUSE_MALFORMED,
    CAUSE_NO_DATA,
    ExchangeRateNotFound,
    InvalidDescriptor,
    map_upstream_failure,
)
from .treasury import TreasuryClient

logger = logging.getLogger("purchase_app.currency.resolver")

LOOKBACK_MONTHS = 6
USD_RATE = Decimal(1)


def months_before(day: date, months: int) -> date:
    """Same day-of-month `months` earlier, clamped to the end of shorter months."""
    year, month0 = divmod(day.year * 12 + day.month - 1 - months, 12)
    month = month0 + 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def rate_window(purchase_date: date) -> tuple[date, date]:
    """Inclusive [purchase_date - 6 calendar months, purchase_date]."""
    return months_before(purchase_date, LOOKBACK_MONTHS), purchase_date


def _require_descriptor(descriptor: Optional[str]) -> str:
    normalized = normalize_descriptor(descriptor)
    if normalized is None:
        raise InvalidDescriptor()
    return normalized


class RateResolver:
    def __init__(self, client: TreasuryClient):
        self._client = client

    def lookup(self, descriptor: str, purchase_date: date) -> RateRecord:
        """Fetch and parse the rate record for a non-USD descriptor."""
        window_start, window_end = rate_window(purchase_date)
        logger.debug(
            "fetching exchange rate",
            extra={
                "descriptor": descriptor,
                "window_start": window_start.isoformat(),
                "window_end": window_end.isoformat(),
            },
        )
        try:
            item = self._client.fetch_latest_rate(descriptor, window_start, window_end)
            rate_text = item.exchange_rate.strip() if item and item.exchange_rate else ""
            if not rate_text:
                raise ExchangeRateNotFound(descriptor, purchase_date, CAUSE_NO_DATA)
            rate = to_decimal(rate_text)
        except ExchangeRateNotFound as e:
            logger.warning("%s", e)
            raise
        except Exception as e:
            raise map_upstream_failure(e, descriptor, purchase_date) from e
        return RateRecord(descriptor=descriptor, rate=rate, record_date=item.record_date)

    def resolve_rate(self, descriptor: Optional[str], purchase_date: date) -> Decimal:
        normalized = _require_descriptor(descriptor)
        if is_usd(normalized):
            return USD_RATE
        return self.lookup(normalized, purchase_date).rate

    def convert(
        self, amount_usd: Decimal, target: Optional[str], purchase_date: date
    ) -> ConversionResult:
        normalized = _require_descriptor(target)
        if is_usd(normalized):
            return ConversionResult(converted=amount_usd, rate=USD_RATE)
        rate = self.lookup(normalized, purchase_date).rate
        try:
            converted = round2(amount_usd * rate)
        except DecimalException as e:
            # product does not fit the decimal context at cent precision
            logger.error(
                "rate %s for %s cannot be applied to %s", rate, normalized, amount_usd, exc_info=e
            )
            raise ExchangeRateNotFound(
                normalized,
                purchase_date,
                CAUSE_MALFORMED,
                f"rate {rate} cannot be applied to amount {amount_usd}",
            ) from e
        return ConversionResult(converted=converted, rate=rate)
