"""Rate store contract.

Records are keyed by (base currency, ISO date). ``get`` returning None is a
normal miss; failures raise StoreUnavailable or SerializationError. Writes
are per-key upserts (last write wins), nothing spans keys.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Dict, Mapping, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from rate_cooker.core.errors import SerializationError
from rate_cooker.models.rates import ExchangeRateRecord, SupportedCurrenciesRecord


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RateStore(ABC):
    backend: str = "abstract"

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self._clock = clock

    @abstractmethod
    def get(self, base_currency: str, date: str) -> Optional[ExchangeRateRecord]: ...

    @abstractmethod
    def get_supported_currencies(self) -> Optional[SupportedCurrenciesRecord]: ...

    @abstractmethod
    def _put_item(self, item: Dict[str, object]) -> None: ...

    def put(
        self, base_currency: str, date: str, rates: Mapping[str, float]
    ) -> ExchangeRateRecord:
        try:
            record = ExchangeRateRecord(
                base_currency=base_currency,
                rate_date=date,
                exchange_rates=dict(rates),
                updated_at=self._clock(),
            )
        except PydanticValidationError as e:
            raise SerializationError(
                f"error marshaling record for {base_currency}: {e}"
            ) from e
        self._put_item(record.to_item())
        return record

    def put_supported_currencies(
        self, currencies: Sequence[str]
    ) -> SupportedCurrenciesRecord:
        try:
            record = SupportedCurrenciesRecord(
                supported_currencies=list(currencies), updated_at=self._clock()
            )
        except PydanticValidationError as e:
            raise SerializationError(
                f"error marshaling supported currencies record: {e}"
            ) from e
        self._put_item(record.to_item())
        return record


def decode_rate_record(item: Mapping[str, object], where: str) -> ExchangeRateRecord:
    try:
        return ExchangeRateRecord.model_validate(item)
    except PydanticValidationError as e:
        raise SerializationError(f"error unmarshaling record for {where}: {e}") from e


def decode_supported_currencies(item: Mapping[str, object]) -> SupportedCurrenciesRecord:
    try:
        return SupportedCurrenciesRecord.model_validate(item)
    except PydanticValidationError as e:
        raise SerializationError(
            f"error unmarshaling supported currencies record: {e}"
        ) from e
