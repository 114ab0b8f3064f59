"""Persisted records and rate provider response models.

Field aliases mirror the stored item layout (Key / SortKey / ...), so
``model_dump(by_alias=True)`` yields the item and ``model_validate`` reads it.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    field_validator,
)

from .constants import SUPPORTED_CURRENCIES_KEY, SUPPORTED_CURRENCIES_SORT_KEY


class ExchangeRateRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    base_currency: str = Field(..., alias="Key")
    rate_date: str = Field(..., alias="SortKey")
    exchange_rates: Dict[str, float] = Field(..., alias="ExchangeRates")
    updated_at: datetime = Field(..., alias="UpdatedAt")

    @field_validator("exchange_rates")
    @classmethod
    def rates_are_finite(cls, v: Dict[str, float]) -> Dict[str, float]:
        for code, rate in v.items():
            if not math.isfinite(rate):
                raise ValueError(f"rate for {code} is not finite")
        return v

    def to_item(self) -> Dict[str, object]:
        return self.model_dump(by_alias=True, mode="json")


class SupportedCurrenciesRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    key: Literal["SupportedCurrencies"] = Field(
        SUPPORTED_CURRENCIES_KEY, alias="Key"
    )
    sort_key: Literal["-"] = Field(SUPPORTED_CURRENCIES_SORT_KEY, alias="SortKey")
    supported_currencies: List[str] = Field(..., alias="SupportedCurrencies")
    updated_at: datetime = Field(..., alias="UpdatedAt")

    def to_item(self) -> Dict[str, object]:
        return self.model_dump(by_alias=True, mode="json")


# Provider responses. Which model applies is decided by the endpoint that was
# called, never by inspecting the payload.
class AuthenticatedRatesResponse(BaseModel):
    """v6 keyed endpoint: carries a ``result`` discriminator."""

    result: Optional[str] = None
    base_code: Optional[str] = None
    error_type: Optional[str] = Field(None, alias="error-type")
    conversion_rates: Dict[str, StrictFloat] = Field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        # An absent or empty result is tolerated; only an explicit non-success fails.
        return not self.result or self.result == "success"


class PublicRatesResponse(BaseModel):
    """v4 public endpoint: no discriminator, HTTP 200 means success."""

    conversion_rates: Dict[str, StrictFloat] = Field(
        ..., validation_alias=AliasChoices("conversion_rates", "rates")
    )
