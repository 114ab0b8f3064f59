"""Error taxonomy for the exchange rate job and HTTP exception handlers.

Per-currency errors (ValidationError, UpstreamError, StoreError) are caught
by the job loop and turned into a failed CurrencyResult. Only
ConfigurationError (startup) and AllCurrenciesFailed (invocation) ever
reach the trigger.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

if TYPE_CHECKING:  # pragma: no cover
    from rate_cooker.models.outcome import InvocationOutcome

logger = logging.getLogger("rate_cooker.errors")


class ExchangeRateJobError(Exception):
    pass


class ConfigurationError(ExchangeRateJobError):
    pass


class ValidationError(ExchangeRateJobError):
    pass


class InvalidCurrencyCode(ValidationError, ValueError):
    def __init__(self, code: object, reason: str):
        super().__init__(f"invalid currency code {code!r}: {reason}")
        self.code = code


# Rate provider -----------------------------------------------------------
class UpstreamError(ExchangeRateJobError):
    def __init__(self, base_currency: str, message: str):
        super().__init__(f"{base_currency}: {message}")
        self.base_currency = base_currency


class NetworkError(UpstreamError):
    pass


class UpstreamStatusError(UpstreamError):
    def __init__(self, base_currency: str, status_code: int):
        super().__init__(base_currency, f"API returned status {status_code}")
        self.status_code = status_code


class DecodeError(UpstreamError):
    pass


class UpstreamLogicalError(UpstreamError):
    def __init__(
        self, base_currency: str, result: Optional[str], error_type: Optional[str] = None
    ):
        detail = f"API call failed with result: {result}"
        if error_type:
            detail += f" ({error_type})"
        super().__init__(base_currency, detail)
        self.result = result
        self.error_type = error_type


# Store ------------------------------------------------------------------
class StoreError(ExchangeRateJobError):
    pass


class StoreUnavailable(StoreError):
    pass


class SerializationError(StoreError):
    pass


# Invocation -------------------------------------------------------------
class PartialTelemetryError(ExchangeRateJobError):
    """Supported-currency snapshot could not be written; never propagated."""


class AllCurrenciesFailed(ExchangeRateJobError):
    def __init__(self, outcome: "InvocationOutcome"):
        super().__init__(
            f"all currency updates failed: {outcome.error_count} errors"
        )
        self.outcome = outcome


# HTTP handlers ------------------------------------------------------------
def http_error_handler(request: Request, exc):  # type: ignore
    detail = exc.detail
    if exc.status_code == status.HTTP_404_NOT_FOUND and detail == "Not Found":
        detail = f"No route for {request.method} {request.url.path}"
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "not_found"
            if exc.status_code == status.HTTP_404_NOT_FOUND
            else "http_error",
            "detail": detail,
        },
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "detail": exc.errors(),
        },
    )


def currency_error_handler(request: Request, exc: ValidationError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "invalid_currency", "detail": str(exc)},
    )


def store_error_handler(request: Request, exc: StoreError):  # type: ignore
    logger.error("store error: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": "store_unavailable", "detail": str(exc)},
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": "An unexpected error occurred.",
        },
    )
