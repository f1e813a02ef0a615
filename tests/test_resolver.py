from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from purchase_app.services.currency import (
    ExchangeRateNotFound,
    InvalidDescriptor,
    rate_window,
)
from purchase_app.services.currency.errors import (
    CAUSE_MALFORMED,
    CAUSE_NO_DATA,
    CAUSE_UPSTREAM_STATUS,
    CAUSE_UPSTREAM_UNREACHABLE,
)
from purchase_app.services.http_client import UpstreamTransportError

PURCHASE_DATE = date(2025, 1, 20)


@pytest.mark.parametrize(
    "target", ["United States-Dollar", "USD", " usd ", "united states", "UNITED STATES-DOLLAR"]
)
def test_usd_targets_skip_the_upstream(treasury, currency_service, target):
    result = currency_service.convert(Decimal("1299.99"), target, PURCHASE_DATE)

    assert result.converted == Decimal("1299.99")
    assert result.rate == Decimal(1)
    assert currency_service.resolve_rate(target, PURCHASE_DATE) == Decimal(1)
    assert treasury.calls == []


def test_usd_amount_is_returned_unrounded(currency_service, treasury):
    result = currency_service.convert(Decimal("100.00"), " usd ", PURCHASE_DATE)

    assert result.converted == Decimal("100.00")
    assert str(result.converted) == "100.00"


def test_happy_path_conversion(treasury, currency_service):
    treasury.add_rate("Canada-Dollar", "1.35", "2025-01-15")

    result = currency_service.convert(Decimal("1299.99"), "Canada-Dollar", PURCHASE_DATE)

    assert result.rate == Decimal("1.35")
    assert result.converted == Decimal("1754.99")
    assert treasury.rate_calls == [
        {
            "fields": "country_currency_desc,exchange_rate,record_date",
            "filter": "country_currency_desc:in:(Canada-Dollar),"
            "record_date:gte:2024-07-20,record_date:lte=2025-01-20",
            "sort": "-record_date",
            "page[size]": 1,
        }
    ]


def test_descriptor_is_trimmed_before_lookup(treasury, currency_service):
    treasury.add_rate("Canada-Dollar", "1.35", "2025-01-15")

    assert currency_service.resolve_rate("  Canada-Dollar ", PURCHASE_DATE) == Decimal("1.35")
    assert "(Canada-Dollar)" in treasury.rate_calls[0]["filter"]


def test_most_recent_rate_in_window_wins(treasury, currency_service):
    treasury.add_rate("Japan-Yen", "150.1", "2024-09-30")
    treasury.add_rate("Japan-Yen", "155.2", "2024-12-31")
    treasury.add_rate("Japan-Yen", "160.0", "2025-03-31")  # after purchase

    assert currency_service.resolve_rate("Japan-Yen", PURCHASE_DATE) == Decimal("155.2")


@pytest.mark.parametrize(
    "amount, rate, expected",
    [
        ("10.005", "1", "10.01"),
        ("2.675", "1", "2.68"),
        ("10.004", "1", "10.00"),
        ("1.005", "1.000", "1.01"),
        ("3.3333", "3", "10.00"),
        ("0.01", "0.5", "0.01"),
    ],
)
def test_half_up_rounding(treasury, currency_service, amount, rate, expected):
    treasury.add_rate("Canada-Dollar", rate, "2025-01-15")

    result = currency_service.convert(Decimal(amount), "Canada-Dollar", PURCHASE_DATE)

    assert result.converted == Decimal(expected)
    assert result.converted.as_tuple().exponent == -2


def test_rate_is_parsed_losslessly(treasury, currency_service):
    treasury.add_rate("Euro Zone-Euro", "0.123456789012345678", "2025-01-15")

    assert currency_service.resolve_rate("Euro Zone-Euro", PURCHASE_DATE) == Decimal(
        "0.123456789012345678"
    )


def test_window_start_is_six_calendar_months_back():
    assert rate_window(date(2025, 7, 15)) == (date(2025, 1, 15), date(2025, 7, 15))
    assert rate_window(date(2025, 8, 31)) == (date(2025, 2, 28), date(2025, 8, 31))
    assert rate_window(date(2024, 8, 31)) == (date(2024, 2, 29), date(2024, 8, 31))
    assert rate_window(date(2025, 3, 31)) == (date(2024, 9, 30), date(2025, 3, 31))
    assert rate_window(date(2025, 1, 20)) == (date(2024, 7, 20), date(2025, 1, 20))


def test_window_boundary_record_is_accepted(treasury, currency_service):
    treasury.add_rate("Euro Zone-Euro", "0.92", "2025-01-15")

    rate = currency_service.resolve_rate("Euro Zone-Euro", date(2025, 7, 15))

    assert rate == Decimal("0.92")
    assert "record_date:gte:2025-01-15" in treasury.rate_calls[0]["filter"]


def test_record_one_day_before_window_is_rejected(treasury, currency_service):
    treasury.add_rate("Euro Zone-Euro", "0.92", "2025-01-14")

    with pytest.raises(ExchangeRateNotFound) as exc:
        currency_service.resolve_rate("Euro Zone-Euro", date(2025, 7, 15))

    assert exc.value.cause == CAUSE_NO_DATA
    assert "record_date:gte:2025-01-15" in treasury.rate_calls[0]["filter"]


def test_no_rate_in_window(treasury, currency_service):
    with pytest.raises(ExchangeRateNotFound) as exc:
        currency_service.convert(Decimal("50.00"), "Mexico-Peso", PURCHASE_DATE)

    assert "Mexico-Peso" in str(exc.value)
    assert "2025-01-20" in str(exc.value)
    assert exc.value.descriptor == "Mexico-Peso"
    assert exc.value.purchase_date == PURCHASE_DATE


def test_blank_exchange_rate_means_not_found(treasury, currency_service):
    treasury.raw_rate_payload = {
        "data": [{"country_currency_desc": "Mexico-Peso", "exchange_rate": "", "record_date": "2025-01-15"}]
    }

    with pytest.raises(ExchangeRateNotFound) as exc:
        currency_service.resolve_rate("Mexico-Peso", PURCHASE_DATE)

    assert exc.value.cause == CAUSE_NO_DATA


def test_http_500_maps_to_not_found(treasury, currency_service):
    treasury.error = UpstreamTransportError("HTTP 500", status=500, body="internal boom")

    with pytest.raises(ExchangeRateNotFound) as exc:
        currency_service.resolve_rate("Canada-Dollar", PURCHASE_DATE)

    message = str(exc.value)
    assert exc.value.cause == CAUSE_UPSTREAM_STATUS
    assert "Canada-Dollar" in message
    assert "2025-01-20" in message
    assert "500" in message
    assert "internal boom" in message


def test_unreachable_upstream_maps_to_not_found(treasury, currency_service):
    treasury.error = UpstreamTransportError("Failed to reach treasury: timed out")

    with pytest.raises(ExchangeRateNotFound) as exc:
        currency_service.convert(Decimal("5"), "Canada-Dollar", PURCHASE_DATE)

    assert exc.value.cause == CAUSE_UPSTREAM_UNREACHABLE


@pytest.mark.parametrize(
    "payload",
    [
        {"data": "not-a-list"},
        {"data": [{"exchange_rate": "abc", "record_date": "2025-01-15"}]},
        {"data": [{"exchange_rate": "1.2", "record_date": "yesterday"}]},
    ],
)
def test_malformed_response_maps_to_not_found(treasury, currency_service, payload):
    treasury.raw_rate_payload = payload

    with pytest.raises(ExchangeRateNotFound) as exc:
        currency_service.resolve_rate("Canada-Dollar", PURCHASE_DATE)

    assert exc.value.cause == CAUSE_MALFORMED


def test_numeric_rate_field_is_accepted(treasury, currency_service):
    treasury.raw_rate_payload = {"data": [{"exchange_rate": 1.35, "record_date": "2025-01-15"}]}

    assert currency_service.resolve_rate("Canada-Dollar", PURCHASE_DATE) == Decimal("1.35")


@pytest.mark.parametrize("descriptor", [None, "", "   "])
def test_blank_descriptor_is_rejected_before_io(treasury, currency_service, descriptor):
    with pytest.raises(InvalidDescriptor):
        currency_service.convert(Decimal("1"), descriptor, PURCHASE_DATE)
    with pytest.raises(InvalidDescriptor):
        currency_service.resolve_rate(descriptor, PURCHASE_DATE)
    assert treasury.calls == []


def test_resolver_does_not_consult_catalog(treasury, currency_service):
    treasury.add_rate("Atlantis-Pearl", "7.5", "2025-01-02")

    assert currency_service.resolve_rate("Atlantis-Pearl", PURCHASE_DATE) == Decimal("7.5")
    assert treasury.listing_calls == []


def test_unrepresentable_product_maps_to_not_found(treasury, currency_service):
    treasury.add_rate("Canada-Dollar", "1E+30", "2025-01-15")

    with pytest.raises(ExchangeRateNotFound) as exc:
        currency_service.convert(Decimal("1299.99"), "Canada-Dollar", PURCHASE_DATE)

    assert exc.value.cause == CAUSE_MALFORMED
    assert "1E+30" in str(exc.value)
