from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from rate_cooker.db import RateStore
from rate_cooker.db.base import utcnow
from rate_cooker.models.constants import DATE_FORMAT
from rate_cooker.services.rates import validate_base_currency
from .deps import get_rate_store

"""Read-only views over the rate store.

    - GET /rates/supported-currencies   -> stored singleton snapshot
    - GET /rates/{base_currency}?date=  -> stored record (default: today, UTC)
"""

router = APIRouter(prefix="/rates", tags=["rates"])


@router.get("/supported-currencies", summary="Last stored supported-currency list")
def supported_currencies(store: RateStore = Depends(get_rate_store)):
    record = store.get_supported_currencies()
    if record is None:
        raise HTTPException(status_code=404, detail="supported currencies not stored")
    return record.to_item()


@router.get("/{base_currency}", summary="Stored rates for a base currency and day")
def get_rates(
    base_currency: str,
    date: Optional[str] = Query(
        None, pattern=r"^\d{4}-\d{2}-\d{2}$", description="YYYY-MM-DD, default today"
    ),
    store: RateStore = Depends(get_rate_store),
):
    validate_base_currency(base_currency)
    day = date or utcnow().strftime(DATE_FORMAT)
    record = store.get(base_currency, day)
    if record is None:
        raise HTTPException(
            status_code=404, detail=f"no rates stored for {base_currency} on {day}"
        )
    return record.to_item()
