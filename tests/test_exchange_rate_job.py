import logging

import pytest

from rate_cooker.core.errors import (
    NetworkError,
    SerializationError,
    StoreUnavailable,
    UpstreamLogicalError,
    UpstreamStatusError,
)
from rate_cooker.models.outcome import CurrencyStatus, InvocationStatus
from rate_cooker.services.exchange_rate_job import ExchangeRateJob

from .conftest import TODAY, FakeProvider, fixed_clock


def make_job(store, provider, currencies):
    return ExchangeRateJob(store, provider, currencies, clock=fixed_clock)


def test_partial_failure_still_succeeds(store):
    provider = FakeProvider(
        {
            "EUR": {"USD": 1.1, "JPY": 160.0},
            "GBP": NetworkError("GBP", "connection refused"),
        }
    )
    outcome = make_job(store, provider, ["EUR", "GBP"]).run()

    assert store.get("EUR", TODAY).exchange_rates == {"USD": 1.1, "JPY": 160.0}
    assert store.get("GBP", TODAY) is None
    assert store.put_calls == [("EUR", TODAY)]
    assert (outcome.success_count, outcome.error_count, outcome.skipped_count) == (1, 1, 0)
    assert outcome.status is InvocationStatus.PARTIAL_SUCCESS
    assert not outcome.failed
    gbp = outcome.results[1]
    assert gbp.status is CurrencyStatus.FAILED
    assert gbp.stage == "fetch"
    assert "NetworkError" in gbp.error


def test_existing_record_skips_fetch_and_put(store, provider):
    store.seed("EUR", TODAY, {"USD": 1.09})

    outcome = make_job(store, provider, ["EUR"]).run()

    assert provider.calls == []
    assert store.put_calls == []
    assert outcome.skipped_count == 1
    assert outcome.success_count == 0
    assert outcome.error_count == 0
    assert outcome.status is InvocationStatus.ALL_SUCCEEDED
    assert store.get("EUR", TODAY).exchange_rates == {"USD": 1.09}


def test_record_from_previous_day_does_not_skip(store, provider):
    store.seed("EUR", "2026-10-18", {"USD": 1.05})

    outcome = make_job(store, provider, ["EUR"]).run()

    assert provider.calls == ["EUR"]
    assert outcome.success_count == 1


def test_unreachable_provider_fails_invocation(store):
    provider = FakeProvider({"EUR": NetworkError("EUR", "timed out")})

    outcome = make_job(store, provider, ["EUR"]).run()

    assert (outcome.success_count, outcome.error_count, outcome.skipped_count) == (0, 1, 0)
    assert outcome.status is InvocationStatus.ALL_FAILED
    assert outcome.failed


@pytest.mark.parametrize(
    "error",
    [
        UpstreamStatusError("EUR", 503),
        UpstreamLogicalError("EUR", "error", "invalid-key"),
        RuntimeError("unexpected"),
    ],
)
def test_any_fetch_error_is_contained(store, error):
    provider = FakeProvider({"EUR": error, "GBP": {"USD": 1.27}})

    outcome = make_job(store, provider, ["EUR", "GBP"]).run()

    assert [r.status for r in outcome.results] == [
        CurrencyStatus.FAILED,
        CurrencyStatus.UPDATED,
    ]
    assert provider.calls == ["EUR", "GBP"]


def test_get_error_counts_and_skips_fetch(store, provider):
    store.fail_get["EUR"] = StoreUnavailable("throttled")

    outcome = make_job(store, provider, ["EUR", "GBP"]).run()

    assert provider.calls == ["GBP"]
    assert outcome.results[0].stage == "get"
    assert outcome.error_count == 1
    assert outcome.success_count == 1


def test_put_error_counts_as_failure(store, provider):
    store.fail_put["EUR"] = SerializationError("bad shape")

    outcome = make_job(store, provider, ["EUR"]).run()

    assert provider.calls == ["EUR"]
    assert outcome.results[0].stage == "put"
    assert outcome.status is InvocationStatus.ALL_FAILED


def test_invalid_code_fails_without_network_call(store, provider):
    outcome = make_job(store, provider, ["eur", "GBP"]).run()

    assert provider.calls == ["GBP"]
    assert outcome.results[0].status is CurrencyStatus.FAILED
    assert "InvalidCurrencyCode" in outcome.results[0].error
    assert outcome.status is InvocationStatus.PARTIAL_SUCCESS


def test_skip_alone_prevents_total_failure(store):
    store.seed("EUR", TODAY, {"USD": 1.1})
    provider = FakeProvider({"GBP": NetworkError("GBP", "down")})

    outcome = make_job(store, provider, ["EUR", "GBP"]).run()

    assert outcome.skipped_count == 1
    assert outcome.error_count == 1
    assert not outcome.failed


def test_supported_currencies_snapshot_written_in_order(store, provider):
    make_job(store, provider, ["GBP", "EUR", "CHF"]).run()

    record = store.get_supported_currencies()
    assert record.supported_currencies == ["GBP", "EUR", "CHF"]
    assert record.updated_at.year == 2026


def test_supported_currencies_failure_is_not_fatal(store, provider):
    store.fail_supported = StoreUnavailable("table missing")

    outcome = make_job(store, provider, ["EUR"]).run()

    assert outcome.supported_currencies_stored is False
    assert outcome.success_count == 1
    assert outcome.status is InvocationStatus.ALL_SUCCEEDED


def test_supported_currencies_failure_with_all_failed(store):
    store.fail_supported = StoreUnavailable("table missing")
    provider = FakeProvider({"EUR": NetworkError("EUR", "down")})

    assert make_job(store, provider, ["EUR"]).run().failed


def test_currencies_processed_in_configured_order(store, provider):
    make_job(store, provider, ["SEK", "EUR", "NOK"]).run()

    assert provider.calls == ["SEK", "EUR", "NOK"]
    assert [c for c, _ in store.get_calls] == ["SEK", "EUR", "NOK"]


def test_second_run_same_day_is_idempotent(store, provider):
    job = make_job(store, provider, ["EUR", "GBP"])
    first = job.run()
    second = job.run()

    assert first.success_count == 2
    assert second.skipped_count == 2
    assert provider.calls == ["EUR", "GBP"]
    assert len(store.put_calls) == 2


def test_empty_currency_list_succeeds(store, provider):
    outcome = make_job(store, provider, []).run()

    assert outcome.results == ()
    assert outcome.status is InvocationStatus.ALL_SUCCEEDED


def test_outcome_summary_dict(store, provider):
    outcome = make_job(store, provider, ["EUR"]).run()
    summary = outcome.as_dict()

    assert summary["date"] == TODAY
    assert summary["status"] == "all_succeeded"
    assert summary["total_currencies"] == 1
    assert summary["results"][0] == {
        "currency": "EUR",
        "status": "updated",
        "stage": None,
        "rates_count": 1,
        "error": None,
    }


def test_failure_log_line_carries_stage_and_error_type(store, caplog):
    provider = FakeProvider({"EUR": UpstreamStatusError("EUR", 503)})
    caplog.set_level(logging.INFO, logger="rate_cooker.job")

    make_job(store, provider, ["EUR"]).run()

    [record] = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert record.currency == "EUR"
    assert record.currency_index == 1
    assert record.stage == "fetch"
    assert record.error_type == "UpstreamStatusError"
    assert record.exc_info is None


def test_supported_currencies_failure_logs_telemetry_error(store, provider, caplog):
    store.fail_supported = StoreUnavailable("table missing")
    caplog.set_level(logging.INFO, logger="rate_cooker.job")

    make_job(store, provider, ["EUR"]).run()

    [record] = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert record.error_type == "PartialTelemetryError"
    assert record.cause_type == "StoreUnavailable"
    assert "failed to store supported currencies configuration" in record.getMessage()
