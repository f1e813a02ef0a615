from __future__ import annotations

"""Currency failure taxonomy and the mapping from upstream failures onto it.

Callers only ever see two kinds: ``InvalidDescriptor`` (rejected before any
I/O) and ``ExchangeRateNotFound`` (everything that can go wrong once we ask
the Treasury). The distinct upstream cause is kept on the exception and in
the logs.
"""
import logging
from datetime import date

from purchase_app.services.http_client import (
    UpstreamPayloadError,
    UpstreamTransportError,
)

logger = logging.getLogger("purchase_app.currency.errors")

CAUSE_NO_DATA = "no_data"
CAUSE_UPSTREAM_STATUS = "upstream_status"
CAUSE_UPSTREAM_UNREACHABLE = "upstream_unreachable"
CAUSE_MALFORMED = "malformed_response"


class CurrencyError(Exception):
    """Base class for currency subsystem errors."""


class InvalidDescriptor(CurrencyError, ValueError):
    def __init__(self, message: str = "currency descriptor must not be blank"):
        super().__init__(message)


class ExchangeRateNotFound(CurrencyError):
    def __init__(self, descriptor: str, purchase_date: date, cause: str, detail: str = ""):
        self.descriptor = descriptor
        self.purchase_date = purchase_date
        self.cause = cause
        self.detail = detail
        message = (
            f"Exchange rate not found for currency {descriptor} on or before "
            f"{purchase_date.isoformat()} (within last 6 months) [{cause}]"
        )
        if detail:
            message = f"{message}: {detail}"
        super().__init__(
            f"{message}. Purchase cannot be converted to target currency."
        )


def map_upstream_failure(
    exc: Exception, descriptor: str, purchase_date: date
) -> ExchangeRateNotFound:
    """Translate an upstream/parsing failure into ExchangeRateNotFound, logging the cause."""
    if isinstance(exc, UpstreamTransportError):
        if exc.status is not None:
            logger.error(
                "treasury returned HTTP %s for %s", exc.status, descriptor, exc_info=exc
            )
            detail = f"upstream returned HTTP {exc.status}"
            if exc.body:
                detail = f"{detail}: {exc.body}"
            return ExchangeRateNotFound(
                descriptor, purchase_date, CAUSE_UPSTREAM_STATUS, detail
            )
        logger.error("treasury unreachable for %s", descriptor, exc_info=exc)
        return ExchangeRateNotFound(
            descriptor, purchase_date, CAUSE_UPSTREAM_UNREACHABLE, str(exc)
        )
    # pydantic.ValidationError is a ValueError
    if isinstance(exc, (UpstreamPayloadError, ValueError)):
        logger.error("malformed treasury response for %s", descriptor, exc_info=exc)
        return ExchangeRateNotFound(descriptor, purchase_date, CAUSE_MALFORMED, str(exc))
    logger.error("unexpected failure resolving rate for %s", descriptor, exc_info=exc)
    return ExchangeRateNotFound(descriptor, purchase_date, CAUSE_MALFORMED, str(exc))
