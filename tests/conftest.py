"""Shared fixtures: in-memory store, scripted provider, fixed clock."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple, Union

import pytest

from rate_cooker.db.base import RateStore, decode_rate_record, decode_supported_currencies
from rate_cooker.models.constants import (
    SUPPORTED_CURRENCIES_KEY,
    SUPPORTED_CURRENCIES_SORT_KEY,
)
from rate_cooker.services.rates.base import RateProvider

FIXED_NOW = datetime(2026, 10, 19, 8, 30, tzinfo=timezone.utc)
TODAY = "2026-10-19"


def fixed_clock() -> datetime:
    return FIXED_NOW


class FakeStore(RateStore):
    """Dict-backed store recording calls; failures injectable per currency."""

    backend = "memory"

    def __init__(self):
        super().__init__(fixed_clock)
        self.items: Dict[Tuple[str, str], dict] = {}
        self.get_calls: List[Tuple[str, str]] = []
        self.put_calls: List[Tuple[str, str]] = []
        self.fail_get: Dict[str, Exception] = {}
        self.fail_put: Dict[str, Exception] = {}
        self.fail_supported: Optional[Exception] = None

    def seed(self, currency: str, date: str, rates: Dict[str, float]) -> None:
        self.put(currency, date, rates)
        self.put_calls.clear()

    def get(self, base_currency, date):
        self.get_calls.append((base_currency, date))
        if base_currency in self.fail_get:
            raise self.fail_get[base_currency]
        item = self.items.get((base_currency, date))
        return decode_rate_record(item, base_currency) if item else None

    def get_supported_currencies(self):
        item = self.items.get((SUPPORTED_CURRENCIES_KEY, SUPPORTED_CURRENCIES_SORT_KEY))
        return decode_supported_currencies(item) if item else None

    def _put_item(self, item):
        key = (item["Key"], item["SortKey"])
        if item["Key"] == SUPPORTED_CURRENCIES_KEY:
            if self.fail_supported is not None:
                raise self.fail_supported
        else:
            self.put_calls.append(key)
            if item["Key"] in self.fail_put:
                raise self.fail_put[item["Key"]]
        self.items[key] = item


class FakeProvider(RateProvider):
    """Returns canned mappings or raises canned errors, counting calls."""

    name = "fake"

    def __init__(self, responses: Optional[Dict[str, Union[dict, Exception]]] = None):
        self.responses = responses or {}
        self.calls: List[str] = []

    def _fetch(self, base_currency):
        self.calls.append(base_currency)
        response = self.responses.get(base_currency, {"USD": 1.0})
        if isinstance(response, Exception):
            raise response
        return dict(response)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()
