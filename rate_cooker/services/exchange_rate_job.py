"""Daily exchange rate ingestion.

For every configured base currency, in order:

    get(currency, today) -> hit: skipped
                         -> miss: fetch(currency) -> put(currency, today, rates)

Each currency is isolated: any failure in get, fetch or put is logged with
the currency context and recorded as a failed result, and the loop moves on.
The supported-currency snapshot is written first on a best-effort basis and
never affects the outcome.

The check and the write are two separate calls, so two overlapping runs can
both miss and both write the same (currency, date); the second write wins.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import TYPE_CHECKING, Callable, List, Sequence

from rate_cooker.core.errors import ExchangeRateJobError, PartialTelemetryError
from rate_cooker.db import RateStore, make_rate_store
from rate_cooker.db.base import utcnow
from rate_cooker.models.constants import DATE_FORMAT
from rate_cooker.models.outcome import CurrencyResult, CurrencyStatus, InvocationOutcome
from rate_cooker.services.rates import RateProvider, make_rate_provider

if TYPE_CHECKING:  # pragma: no cover
    from rate_cooker.core.config import Settings

logger = logging.getLogger("rate_cooker.job")


class ExchangeRateJob:
    def __init__(
        self,
        store: RateStore,
        provider: RateProvider,
        currencies: Sequence[str],
        clock: Callable[[], datetime] = utcnow,
    ):
        self._store = store
        self._provider = provider
        self._currencies: List[str] = list(currencies)
        self._clock = clock

    @property
    def store(self) -> RateStore:
        return self._store

    @property
    def provider(self) -> RateProvider:
        return self._provider

    @property
    def currencies(self) -> List[str]:
        return list(self._currencies)

    def today(self) -> str:
        return self._clock().strftime(DATE_FORMAT)

    def run(self) -> InvocationOutcome:
        started = time.monotonic()
        today = self.today()
        logger.debug("Processing date set", extra={"date": today})

        snapshot_stored = self._store_supported_currencies()

        results = tuple(
            self._process_currency(index, currency, today)
            for index, currency in enumerate(self._currencies, start=1)
        )
        outcome = InvocationOutcome(
            date=today,
            results=results,
            duration_ms=int((time.monotonic() - started) * 1000),
            supported_currencies_stored=snapshot_stored,
        )
        logger.info(
            "Exchange rate update completed",
            extra={
                "total_currencies": len(results),
                "success_count": outcome.success_count,
                "error_count": outcome.error_count,
                "skipped_count": outcome.skipped_count,
                "duration_ms": outcome.duration_ms,
                "status": outcome.status.value,
            },
        )
        return outcome

    # Internal --------------------------------------------------
    def _write_snapshot(self) -> None:
        try:
            self._store.put_supported_currencies(self._currencies)
        except Exception as e:
            raise PartialTelemetryError(
                f"failed to store supported currencies configuration: {e}"
            ) from e

    def _store_supported_currencies(self) -> bool:
        try:
            self._write_snapshot()
        except PartialTelemetryError as err:
            logger.error(
                str(err),
                extra={
                    "error_type": type(err).__name__,
                    "cause_type": type(err.__cause__).__name__,
                },
            )
            return False
        logger.info(
            "Successfully stored supported currencies configuration",
            extra={"currencies_count": len(self._currencies)},
        )
        return True

    def _process_currency(self, index: int, currency: str, today: str) -> CurrencyResult:
        log = logging.LoggerAdapter(
            logger,
            {
                "currency": currency,
                "currency_index": index,
                "total_count": len(self._currencies),
            },
        )
        log.info("Processing exchange rates for currency")

        try:
            existing = self._store.get(currency, today)
        except Exception as e:
            return self._failed(log, currency, "get", e)
        if existing is not None:
            log.info(
                "Exchange rates already exist for this currency and date, skipping API call"
            )
            return CurrencyResult(
                currency=currency,
                status=CurrencyStatus.SKIPPED,
                rates_count=len(existing.exchange_rates),
            )

        log.info("No existing data found, fetching from API")
        try:
            rates = self._provider.fetch(currency)
        except Exception as e:
            return self._failed(log, currency, "fetch", e)

        try:
            self._store.put(currency, today, rates)
        except Exception as e:
            return self._failed(log, currency, "put", e)

        log.info("Successfully updated exchange rates for currency")
        return CurrencyResult(
            currency=currency, status=CurrencyStatus.UPDATED, rates_count=len(rates)
        )

    @staticmethod
    def _failed(
        log: logging.LoggerAdapter, currency: str, stage: str, exc: Exception
    ) -> CurrencyResult:
        messages = {
            "get": "Failed to check existing exchange rates",
            "fetch": "Failed to fetch exchange rates",
            "put": "Failed to store exchange rates",
        }
        log = logging.LoggerAdapter(
            log.logger,
            {**log.extra, "stage": stage, "error_type": type(exc).__name__},
        )
        # Known job errors carry enough context; anything else gets a traceback.
        log.error(
            "%s: %s",
            messages[stage],
            exc,
            exc_info=not isinstance(exc, ExchangeRateJobError),
        )
        return CurrencyResult(
            currency=currency,
            status=CurrencyStatus.FAILED,
            stage=stage,
            error=f"{type(exc).__name__}: {exc}",
        )


def build_exchange_rate_job(settings: "Settings") -> ExchangeRateJob:
    return ExchangeRateJob(
        store=make_rate_store(settings),
        provider=make_rate_provider(settings),
        currencies=settings.currencies,
    )
