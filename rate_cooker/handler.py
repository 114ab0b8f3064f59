"""Timer-trigger entry point.

``lambda_handler`` is what the scheduler invokes. Settings, logging and the
job are built once per process (cold start) and reused across invocations.
A run in which every currency failed raises AllCurrenciesFailed so the
scheduler's retry and alerting policy fires; anything less is a success.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, Optional

from rate_cooker.core.config import get_settings
from rate_cooker.core.errors import AllCurrenciesFailed
from rate_cooker.core.logging import init_logging, invocation_context
from rate_cooker.services.exchange_rate_job import (
    ExchangeRateJob,
    build_exchange_rate_job,
)

logger = logging.getLogger("rate_cooker.handler")


@lru_cache
def get_job() -> ExchangeRateJob:
    settings = get_settings()
    init_logging(settings.log_level)
    job = build_exchange_rate_job(settings)
    logger.info(
        "Exchange rate cooker initialized",
        extra={
            "table_name": settings.table_name,
            "store_backend": settings.rate_store_backend,
            "supported_currencies": settings.currencies,
            "currencies_count": len(settings.currencies),
            "api_key_configured": settings.api_key_configured,
        },
    )
    return job


def run_job(
    job: ExchangeRateJob,
    event: Any = None,
    invocation_id: Optional[str] = None,
) -> Dict[str, Any]:
    # Payload is informational only.
    if not isinstance(event, dict):
        event = {}
    with invocation_context(invocation_id):
        logger.info(
            "Exchange rate cooker triggered",
            extra={
                "event_time": datetime.now(timezone.utc).isoformat(),
                "event_source": event.get("source"),
                "event_id": event.get("id"),
            },
        )
        outcome = job.run()
        if outcome.failed:
            logger.error(
                "All currency updates failed",
                extra={"error_count": outcome.error_count},
            )
            raise AllCurrenciesFailed(outcome)
        return outcome.as_dict()


def lambda_handler(event: Any, context: object) -> Dict[str, Any]:
    return run_job(
        get_job(), event, invocation_id=getattr(context, "aws_request_id", None)
    )
