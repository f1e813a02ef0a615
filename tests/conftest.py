from __future__ import annotations

import re
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from purchase_app.core.config import Settings
from purchase_app.main import create_app
from purchase_app.services.currency import CurrencyService, TreasuryClient

TREASURY_URL = "https://treasury.test/v1/accounting/od/rates_of_exchange"

_IN = re.compile(r"country_currency_desc:in:\((.*?)\)")
_GTE = re.compile(r"record_date:gte:(\d{4}-\d{2}-\d{2})")
_LTE = re.compile(r"record_date:lte=(\d{4}-\d{2}-\d{2})")


def listing_page(pairs, total_pages: int = 1, total_count: Optional[int] = None):
    return {
        "data": [
            {"country": c, "country_currency_desc": d, "record_date": "2025-03-31"}
            for c, d in pairs
        ],
        "meta": {
            "count": len(pairs),
            "total-count": total_count if total_count is not None else len(pairs),
            "total-pages": total_pages,
        },
    }


class TreasuryStub:
    """Stands in for http_client.get_json.

    Listing requests are answered from ``pages``; rate requests are answered
    from ``rates`` honouring the filter's descriptor and date window, newest
    first, like the real endpoint.
    """

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self.pages: Dict[int, Dict[str, Any]] = {}
        self.rates: List[Dict[str, str]] = []
        self.error: Optional[Exception] = None
        self.raw_rate_payload: Optional[Dict[str, Any]] = None

    def add_rate(self, descriptor: str, rate: str, record_date: str) -> None:
        self.rates.append(
            {
                "country_currency_desc": descriptor,
                "exchange_rate": rate,
                "record_date": record_date,
            }
        )

    @property
    def rate_calls(self) -> List[Dict[str, Any]]:
        return [c for c in self.calls if "filter" in c]

    @property
    def listing_calls(self) -> List[Dict[str, Any]]:
        return [c for c in self.calls if "page[number]" in c]

    def __call__(self, url, *, params=None, timeout=10.0):
        params = dict(params or {})
        self.calls.append(params)
        if self.error is not None:
            raise self.error
        if "filter" in params:
            return self._rate_response(params["filter"])
        return self.pages.get(
            int(params["page[number]"]), {"data": [], "meta": {"total-pages": 1}}
        )

    def _rate_response(self, flt: str) -> Dict[str, Any]:
        if self.raw_rate_payload is not None:
            return self.raw_rate_payload
        descriptor = _IN.search(flt).group(1)
        start = date.fromisoformat(_GTE.search(flt).group(1))
        end = date.fromisoformat(_LTE.search(flt).group(1))
        matches = [
            r
            for r in self.rates
            if r["country_currency_desc"] == descriptor
            and start <= date.fromisoformat(r["record_date"]) <= end
        ]
        matches.sort(key=lambda r: r["record_date"], reverse=True)
        return {"data": matches[:1], "meta": {"total-count": len(matches)}}


@pytest.fixture
def treasury() -> TreasuryStub:
    return TreasuryStub()


@pytest.fixture
def treasury_client(treasury) -> TreasuryClient:
    return TreasuryClient(TREASURY_URL, fetcher=treasury)


@pytest.fixture
def currency_service(treasury_client) -> CurrencyService:
    return CurrencyService(treasury_client)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(data_dir=tmp_path, currency_api_url=TREASURY_URL)


@pytest.fixture
def app(settings, currency_service):
    application = create_app(settings_override=settings)
    application.state.currency_service = currency_service
    return application


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def api_key(client) -> str:
    resp = client.post(
        "/api/apikeys",
        json={
            "name": "test key",
            "expiration_date": (date.today() + timedelta(days=30)).isoformat(),
        },
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["api_key"]


@pytest.fixture
def authed(client, api_key) -> TestClient:
    client.headers.update({"X-API-Key": api_key})
    return client
