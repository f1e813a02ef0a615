from __future__ import annotations

"""Treasury Fiscal Data client (rates of exchange).

Two request shapes are issued against the configured endpoint:

    - paged listing of country/currency pairs, newest record first
    - single-rate lookup filtered by descriptor and a record_date window

No retries happen here; ``UpstreamTransportError`` / ``UpstreamPayloadError``
propagate to the caller.
"""
import logging
from datetime import date
from typing import Any, Callable, Dict, Mapping, Optional

from pydantic import ValidationError

from purchase_app.models.treasury import CurrencyListPage, RateItem, RatePage
from purchase_app.services.http_client import UpstreamPayloadError, get_json

logger = logging.getLogger("purchase_app.currency.treasury")

LIST_FIELDS = "country,country_currency_desc,record_date"
RATE_FIELDS = "country_currency_desc,exchange_rate,record_date"
PAGE_SIZE = 100

Fetcher = Callable[..., Dict[str, Any]]


def rate_filter(descriptor: str, window_start: date, window_end: date) -> str:
    return (
        f"country_currency_desc:in:({descriptor}),"
        f"record_date:gte:{window_start.isoformat()},"
        f"record_date:lte={window_end.isoformat()}"
    )


class TreasuryClient:
    def __init__(
        self, base_url: str, *, timeout: float = 10.0, fetcher: Fetcher = get_json
    ):
        self.base_url = base_url
        self._timeout = timeout
        self._fetch = fetcher

    def _get(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        logger.debug("treasury GET", extra={"params": dict(params)})
        return self._fetch(self.base_url, params=params, timeout=self._timeout)

    def fetch_currency_page(
        self, page_number: int, page_size: int = PAGE_SIZE
    ) -> CurrencyListPage:
        payload = self._get(
            {
                "sort": "-record_date",
                "format": "json",
                "page[number]": page_number,
                "page[size]": page_size,
                "fields": LIST_FIELDS,
            }
        )
        try:
            return CurrencyListPage.model_validate(payload)
        except ValidationError as e:
            raise UpstreamPayloadError(f"unexpected listing page shape: {e}") from e

    def fetch_latest_rate(
        self, descriptor: str, window_start: date, window_end: date
    ) -> Optional[RateItem]:
        """Most recent rate record inside [window_start, window_end], or None."""
        payload = self._get(
            {
                "fields": RATE_FIELDS,
                "filter": rate_filter(descriptor, window_start, window_end),
                "sort": "-record_date",
                "page[size]": 1,
            }
        )
        try:
            page = RatePage.model_validate(payload)
        except ValidationError as e:
            raise UpstreamPayloadError(f"unexpected rate response shape: {e}") from e
        if not page.data:
            return None
        # sort=-record_date puts the newest record first
        return page.data[0]
