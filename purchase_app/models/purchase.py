from __future__ import annotations
import datetime
from decimal import Decimal, DecimalException
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator

from purchase_app.services.money import round2

# Exact decimal text on the wire (no exponent, scale kept: "10.00").
JsonDecimal = Annotated[
    Decimal, PlainSerializer(lambda v: format(v, "f"), return_type=str, when_used="json")
]

DESCRIPTION_MAX_LENGTH = 50


class PurchaseIn(BaseModel):
    date: datetime.date = Field(..., examples=["2025-01-20"])
    description: str = Field(..., examples=["Laptop Computer"])
    purchase_amount: Decimal = Field(
        ..., gt=0, description="Purchase amount in USD", examples=["1299.99"]
    )
    country: str = Field(..., examples=["Canada"])

    @field_validator("description")
    @classmethod
    def _description_rules(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Description is required")
        if len(v) > DESCRIPTION_MAX_LENGTH:
            raise ValueError(
                f"Description must be less than {DESCRIPTION_MAX_LENGTH + 1} characters"
            )
        return v

    @field_validator("country")
    @classmethod
    def _country_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Country is required")
        return v

    @field_validator("purchase_amount")
    @classmethod
    def _round_to_cents(cls, v: Decimal) -> Decimal:
        try:
            rounded = round2(v)
        except DecimalException as e:
            raise ValueError("Purchase amount is too large") from e
        if rounded <= 0:
            raise ValueError("Purchase amount must be at least 0.01")
        return rounded


class PurchaseOut(BaseModel):
    id: str
    date: datetime.date
    description: str
    purchase_amount: JsonDecimal
    country: str
    currency_code: str = Field(..., description="Treasury country_currency_desc")
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class PurchaseWithConversionOut(PurchaseOut):
    converted_amount: Optional[JsonDecimal] = Field(
        None, description="Amount in the target currency; null when no rate was found"
    )
    exchange_rate: Optional[JsonDecimal] = Field(
        None, description="Target currency units per 1 USD; null when no rate was found"
    )
