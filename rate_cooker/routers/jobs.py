from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from starlette import status

from rate_cooker.core.errors import AllCurrenciesFailed
from rate_cooker.handler import run_job
from rate_cooker.services.exchange_rate_job import ExchangeRateJob
from .deps import get_exchange_rate_job

"""Job trigger router for HTTP-based schedulers.

    - POST /jobs/exchange-rates/run -> run one invocation now

A run that fails every currency answers 500 so the scheduler treats it as a
failed attempt; partial failures answer 200 with per-currency detail.
"""

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.post("/exchange-rates/run", summary="Run the exchange rate ingestion once")
def run_exchange_rates(job: ExchangeRateJob = Depends(get_exchange_rate_job)):
    try:
        return run_job(job, {"source": "http"})
    except AllCurrenciesFailed as e:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "all_failed",
                "detail": str(e),
                "outcome": e.outcome.as_dict(),
            },
        )
