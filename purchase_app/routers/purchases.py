from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from purchase_app.core.auth import get_db, require_api_key
from purchase_app.db.dal import Database
from purchase_app.models import (
    CountryCurrencyOut,
    PurchaseIn,
    PurchaseOut,
    PurchaseWithConversionOut,
)
from purchase_app.services.currency import USD_DESCRIPTOR, CurrencyService
from purchase_app.services.purchases import PurchaseService, UnsupportedCountry

# Handlers that may reach the Treasury are plain `def` so FastAPI runs them in
# its threadpool instead of blocking the event loop.
router = APIRouter(
    prefix="/api/purchases",
    tags=["purchases"],
    dependencies=[Depends(require_api_key)],
    responses={401: {"description": "Invalid or missing API key"}},
)

# Dependencies -----------------------------------------------------


def get_currency_service(request: Request) -> CurrencyService:
    return request.app.state.currency_service


def get_purchase_service(
    db: Database = Depends(get_db),
    currency: CurrencyService = Depends(get_currency_service),
) -> PurchaseService:
    return PurchaseService(db, currency)


# Routes -----------------------------------------------------------
@router.post(
    "",
    response_model=PurchaseOut,
    status_code=201,
    summary="Create a purchase (amount in USD)",
    responses={400: {"description": "Country not supported"}},
)
def create_purchase(
    payload: PurchaseIn,
    svc: PurchaseService = Depends(get_purchase_service),
):
    try:
        return svc.create(payload)
    except UnsupportedCountry as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.get("", response_model=List[PurchaseOut], summary="List purchases, newest first")
async def list_purchases(svc: PurchaseService = Depends(get_purchase_service)):
    return svc.list()


@router.get(
    "/converted",
    response_model=List[PurchaseWithConversionOut],
    summary="List purchases converted to a Treasury currency",
    description=(
        "Rates come from the Treasury reporting rates of exchange, using the most "
        "recent rate on or before each purchase date within 6 months. When no rate "
        "is found, converted_amount and exchange_rate are null for that purchase."
    ),
)
def list_converted(
    currency: str = Query(
        USD_DESCRIPTOR,
        description="Target currency as country_currency_desc, e.g. 'Canada-Dollar'",
    ),
    svc: PurchaseService = Depends(get_purchase_service),
):
    return svc.list_converted(currency)


@router.get(
    "/countries",
    response_model=List[CountryCurrencyOut],
    summary="List supported countries and currencies",
)
def list_countries(currency: CurrencyService = Depends(get_currency_service)):
    return [CountryCurrencyOut.model_validate(e) for e in currency.list_catalog()]


@router.get(
    "/countries/{key}",
    response_model=CountryCurrencyOut,
    summary="Look up a country or currency descriptor",
)
def get_country(key: str, currency: CurrencyService = Depends(get_currency_service)):
    entry = currency.lookup_catalog(key)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"'{key}' is not in the catalog")
    return CountryCurrencyOut.model_validate(entry)


@router.get("/{purchase_id}", response_model=PurchaseOut, summary="Get a purchase")
async def get_purchase(
    purchase_id: str, svc: PurchaseService = Depends(get_purchase_service)
):
    purchase = svc.get(purchase_id)
    if purchase is None:
        raise HTTPException(status_code=404, detail="purchase not found")
    return purchase


@router.get(
    "/{purchase_id}/converted",
    response_model=PurchaseWithConversionOut,
    summary="Convert a single purchase",
    responses={400: {"description": "No exchange rate for the currency/date"}},
)
def get_converted_purchase(
    purchase_id: str,
    currency: str = Query(USD_DESCRIPTOR, description="Target country_currency_desc"),
    svc: PurchaseService = Depends(get_purchase_service),
):
    purchase = svc.convert_one(purchase_id, currency)
    if purchase is None:
        raise HTTPException(status_code=404, detail="purchase not found")
    return purchase


@router.delete("/{purchase_id}", status_code=204, summary="Delete a purchase")
async def delete_purchase(
    purchase_id: str, svc: PurchaseService = Depends(get_purchase_service)
):
    if not svc.delete(purchase_id):
        raise HTTPException(status_code=404, detail="purchase not found")
    return None
