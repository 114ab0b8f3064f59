from __future__ import annotations

from fastapi import Depends, Request

from rate_cooker.core.config import Settings
from rate_cooker.db import RateStore
from rate_cooker.services.exchange_rate_job import (
    ExchangeRateJob,
    build_exchange_rate_job,
)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_exchange_rate_job(request: Request) -> ExchangeRateJob:
    # One job (and store) per app, built on first use.
    job = getattr(request.app.state, "job", None)
    if job is None:
        job = build_exchange_rate_job(request.app.state.settings)
        request.app.state.job = job
    return job


def get_rate_store(job: ExchangeRateJob = Depends(get_exchange_rate_job)) -> RateStore:
    return job.store
