from .base import RateProvider, validate_base_currency
from .providers import ExchangeRateApiProvider, StaticRateProvider, make_rate_provider

__all__ = [
    "RateProvider",
    "validate_base_currency",
    "ExchangeRateApiProvider",
    "StaticRateProvider",
    "make_rate_provider",
]
