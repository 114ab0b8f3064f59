from __future__ import annotations

"""Concrete rate providers and factory.

'exchangerate-api' talks to exchangerate-api.com: the keyed v6 endpoint when
an API key is configured, the public v4 endpoint otherwise. 'static' returns
fixed cross rates and never touches the network (local runs, smoke scripts).
"""
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional, Type, Union

from pydantic import ValidationError as PydanticValidationError

from rate_cooker.core.errors import (
    ConfigurationError,
    DecodeError,
    NetworkError,
    UpstreamLogicalError,
    UpstreamStatusError,
)
from rate_cooker.models.rates import AuthenticatedRatesResponse, PublicRatesResponse
from rate_cooker.services.http_client import (
    HttpDecodeError,
    HttpError,
    HttpStatusError,
    get_json,
)
from .base import RateProvider

if TYPE_CHECKING:  # pragma: no cover
    from rate_cooker.core.config import Settings

logger = logging.getLogger("rate_cooker.providers")

RatesResponse = Union[AuthenticatedRatesResponse, PublicRatesResponse]


@dataclass(frozen=True)
class _Endpoint:
    kind: str  # "authenticated" | "public"
    url_template: str
    response_model: Type[RatesResponse]
    secret: Optional[str] = None

    def url(self, base_currency: str) -> str:
        return self.url_template.format(key=self.secret or "", base=base_currency)

    def display_url(self, base_currency: str) -> str:
        return self.url_template.format(key="***", base=base_currency)


class ExchangeRateApiProvider(RateProvider):
    name = "exchangerate-api"

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        authenticated_base_url: str = "https://v6.exchangerate-api.com/v6",
        public_base_url: str = "https://api.exchangerate-api.com/v4/latest",
        timeout: float = 10.0,
        retries: int = 0,
    ):
        if api_key:
            self._endpoint = _Endpoint(
                kind="authenticated",
                url_template=authenticated_base_url.rstrip("/")
                + "/{key}/latest/{base}",
                response_model=AuthenticatedRatesResponse,
                secret=api_key,
            )
        else:
            self._endpoint = _Endpoint(
                kind="public",
                url_template=public_base_url.rstrip("/") + "/{base}",
                response_model=PublicRatesResponse,
            )
        self._timeout = timeout
        self._retries = retries

    @property
    def endpoint_kind(self) -> str:
        return self._endpoint.kind

    def _fetch(self, base_currency: str) -> Dict[str, float]:
        endpoint = self._endpoint
        try:
            payload = get_json(
                endpoint.url(base_currency),
                timeout=self._timeout,
                retries=self._retries,
                display_url=endpoint.display_url(base_currency),
            )
        except HttpStatusError as e:
            raise UpstreamStatusError(base_currency, e.status) from e
        except HttpDecodeError as e:
            raise DecodeError(base_currency, f"failed to decode response: {e}") from e
        except HttpError as e:
            raise NetworkError(
                base_currency, f"failed to fetch exchange rates: {e}"
            ) from e

        try:
            parsed = endpoint.response_model.model_validate(payload)
        except PydanticValidationError as e:
            raise DecodeError(
                base_currency, f"unexpected response shape: {e.error_count()} errors"
            ) from e

        if isinstance(parsed, AuthenticatedRatesResponse) and not parsed.succeeded:
            raise UpstreamLogicalError(base_currency, parsed.result, parsed.error_type)
        if not parsed.conversion_rates:
            raise DecodeError(base_currency, "response contains no conversion rates")

        logger.debug(
            "rates fetched",
            extra={
                "currency": base_currency,
                "endpoint": endpoint.kind,
                "rates_count": len(parsed.conversion_rates),
            },
        )
        return dict(parsed.conversion_rates)


# Units of each currency per 1 EUR; cross rates are derived from these.
_STATIC_EUR_RATES: Dict[str, float] = {
    "EUR": 1.0,
    "USD": 1.08,
    "GBP": 0.85,
    "CHF": 0.95,
    "SEK": 11.4,
    "NOK": 11.6,
    "DKK": 7.46,
    "PLN": 4.32,
    "CZK": 25.1,
    "HUF": 392.0,
    "RON": 4.97,
    "UAH": 44.5,
    "BYN": 3.53,
    "RUB": 98.0,
    "JPY": 160.0,
}


class StaticRateProvider(RateProvider):
    name = "static"

    def __init__(self, eur_rates: Optional[Dict[str, float]] = None):
        self._eur_rates = dict(eur_rates or _STATIC_EUR_RATES)

    def _fetch(self, base_currency: str) -> Dict[str, float]:
        base = self._eur_rates.get(base_currency)
        if not base:
            raise UpstreamLogicalError(base_currency, "unsupported-code")
        return {
            code: round(rate / base, 6) for code, rate in self._eur_rates.items()
        }


_PROVIDER_REGISTRY = {
    "exchangerate-api": ExchangeRateApiProvider,
    "static": StaticRateProvider,
}


def make_rate_provider(settings: "Settings") -> RateProvider:
    kind = settings.exchange_rate_provider
    cls = _PROVIDER_REGISTRY.get(kind)
    if not cls:
        raise ConfigurationError(f"Unknown rate provider kind '{kind}'")
    if cls is ExchangeRateApiProvider:
        return ExchangeRateApiProvider(
            settings.exchange_api_key,
            authenticated_base_url=settings.authenticated_api_base_url,
            public_base_url=settings.public_api_base_url,
            timeout=settings.http_timeout_seconds,
            retries=settings.http_retries,
        )
    return cls()
