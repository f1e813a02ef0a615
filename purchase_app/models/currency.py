from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field


class CountryCurrencyOut(BaseModel):
    country: str = Field(..., examples=["Canada"])
    currency_code: str = Field(
        ..., description="Treasury country_currency_desc", examples=["Canada-Dollar"]
    )
    currency_name: str = Field(..., examples=["Canada-Dollar"])

    model_config = ConfigDict(from_attributes=True)
