from __future__ import annotations

"""Rate provider abstraction.

A provider returns the conversion rate mapping (target code -> rate) for one
base currency. Codes are checked before any network call.
"""
import re
from abc import ABC, abstractmethod
from typing import Dict

from rate_cooker.core.errors import InvalidCurrencyCode

_CURRENCY_CODE = re.compile(r"[A-Z]{3}")


def validate_base_currency(code: object) -> str:
    if not isinstance(code, str):
        raise InvalidCurrencyCode(code, "must be a string")
    if len(code) != 3:
        raise InvalidCurrencyCode(code, "must be 3 characters")
    if not _CURRENCY_CODE.fullmatch(code):
        raise InvalidCurrencyCode(code, "must be uppercase letters")
    return code


class RateProvider(ABC):
    name: str = "abstract"

    def fetch(self, base_currency: str) -> Dict[str, float]:
        """Return target currency -> rate for 1 unit of ``base_currency``."""
        return self._fetch(validate_base_currency(base_currency))

    @abstractmethod
    def _fetch(self, base_currency: str) -> Dict[str, float]:
        raise NotImplementedError
