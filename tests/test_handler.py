import logging
from types import SimpleNamespace

import pytest

from rate_cooker import handler
from rate_cooker.core.config import get_settings
from rate_cooker.core.errors import AllCurrenciesFailed, ConfigurationError, NetworkError
from rate_cooker.db import DynamoRateStore
from rate_cooker.services.rates import ExchangeRateApiProvider
from rate_cooker.services.exchange_rate_job import ExchangeRateJob

from .conftest import TODAY, FakeProvider, fixed_clock


def _job(store, provider, currencies):
    return ExchangeRateJob(store, provider, currencies, clock=fixed_clock)


def test_all_failed_raises(store):
    provider = FakeProvider({"EUR": NetworkError("EUR", "down")})

    with pytest.raises(AllCurrenciesFailed) as exc_info:
        handler.run_job(_job(store, provider, ["EUR"]), {"source": "aws.events"})

    assert "all currency updates failed: 1 errors" in str(exc_info.value)
    assert exc_info.value.outcome.error_count == 1


def test_partial_failure_returns_summary(store):
    provider = FakeProvider(
        {"EUR": {"USD": 1.1, "JPY": 160.0}, "GBP": NetworkError("GBP", "down")}
    )

    summary = handler.run_job(_job(store, provider, ["EUR", "GBP"]))

    assert summary["date"] == TODAY
    assert summary["status"] == "partial_success"
    assert (summary["success_count"], summary["error_count"], summary["skipped_count"]) == (1, 1, 0)


def test_lambda_handler_uses_cached_job(monkeypatch, store, provider):
    job = _job(store, provider, ["EUR"])
    monkeypatch.setattr(handler, "get_job", lambda: job)
    event = {"source": "aws.events", "id": "evt-1", "detail-type": "Scheduled Event"}

    first = handler.lambda_handler(event, SimpleNamespace(aws_request_id="req-1"))
    second = handler.lambda_handler(event, None)

    assert first["success_count"] == 1
    assert second["skipped_count"] == 1
    assert provider.calls == ["EUR"]


@pytest.mark.parametrize("event", [None, "tick", ["a"], 42])
def test_non_dict_event_is_ignored(store, provider, event):
    summary = handler.run_job(_job(store, provider, ["EUR"]), event)

    assert summary["success_count"] == 1


_COLD_START_ENV = (
    "EXCHANGE_RATE_DB_NAME",
    "EXCHANGE_RATE_API_KEY",
    "SUPPORTED_CURRENCIES",
    "LOG_LEVEL",
    "RATE_STORE_BACKEND",
    "EXCHANGE_RATE_PROVIDER",
    "DYNAMODB_ENDPOINT_URL",
    "AWS_REGION",
    "AWS_PROFILE",
)


@pytest.fixture
def cold_start(monkeypatch, tmp_path):
    for name in _COLD_START_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)  # no stray .env
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    get_settings.cache_clear()
    handler.get_job.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()
    handler.get_job.cache_clear()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def test_cold_start_builds_dynamodb_job_from_env(cold_start):
    cold_start.setenv("EXCHANGE_RATE_DB_NAME", "ahorro-exchangerate-dev")
    cold_start.setenv("AWS_REGION", "eu-central-1")
    cold_start.setenv("SUPPORTED_CURRENCIES", "EUR|GBP")

    job = handler.get_job()

    assert isinstance(job.store, DynamoRateStore)
    assert job.store.table_name == "ahorro-exchangerate-dev"
    assert job.currencies == ["EUR", "GBP"]
    assert isinstance(job.provider, ExchangeRateApiProvider)
    assert handler.get_job() is job


def test_missing_table_name_fails_lambda_handler(cold_start):
    with pytest.raises(ConfigurationError):
        handler.lambda_handler({"source": "aws.events"}, None)
