from __future__ import annotations
import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

NAME_MAX_LENGTH = 100


class ApiKeyIn(BaseModel):
    name: str = Field(..., examples=["Production API Key"])
    expiration_date: datetime.date = Field(..., examples=["2026-12-31"])

    @field_validator("name")
    @classmethod
    def _name_rules(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        if len(v) > NAME_MAX_LENGTH:
            raise ValueError(f"Name must be less than {NAME_MAX_LENGTH + 1} characters")
        return v


class ApiKeyOut(BaseModel):
    id: int
    name: str
    api_key: str = Field(..., description="Generated key, format wk_<hex>")
    expiration_date: datetime.date
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)
