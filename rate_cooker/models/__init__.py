"""Pydantic records and job outcome types."""

from .constants import (
    DEFAULT_SUPPORTED_CURRENCIES,
    SUPPORTED_CURRENCIES_KEY,
    SUPPORTED_CURRENCIES_SORT_KEY,
)  # re-export
from .outcome import CurrencyResult, CurrencyStatus, InvocationOutcome, InvocationStatus
from .rates import (
    AuthenticatedRatesResponse,
    ExchangeRateRecord,
    PublicRatesResponse,
    SupportedCurrenciesRecord,
)

__all__ = [
    "DEFAULT_SUPPORTED_CURRENCIES",
    "SUPPORTED_CURRENCIES_KEY",
    "SUPPORTED_CURRENCIES_SORT_KEY",
    "CurrencyResult",
    "CurrencyStatus",
    "InvocationOutcome",
    "InvocationStatus",
    "AuthenticatedRatesResponse",
    "ExchangeRateRecord",
    "PublicRatesResponse",
    "SupportedCurrenciesRecord",
]
