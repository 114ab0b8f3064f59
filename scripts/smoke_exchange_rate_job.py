"""Smoke script for the exchange rate job.

Demonstrates, against a temp sqlite store and the offline static provider:
 1. First run fetches and stores every configured currency.
 2. Second run on the same day skips them all (no provider calls).
 3. The HTTP trigger and read endpoints return the same data.

NOTE: This is a lightweight diagnostic and not a formal test.
"""

import os
import tempfile
from pprint import pprint

from fastapi.testclient import TestClient

from rate_cooker.core.config import Settings
from rate_cooker.main import create_app
from rate_cooker.services.exchange_rate_job import build_exchange_rate_job


def run():
    with tempfile.TemporaryDirectory() as d:
        settings = Settings(
            table_name="exchange-rates-smoke",
            rate_store_backend="sqlite",
            sqlite_path=os.path.join(d, "smoke.sqlite3"),
            exchange_rate_provider="static",
            supported_currencies_raw="EUR|GBP|CHF|xx",
        )
        job = build_exchange_rate_job(settings)
        out = {
            "first": job.run().as_dict(),
            "second": job.run().as_dict(),
        }

        client = TestClient(create_app(settings_override=settings))
        out["http_run"] = client.post("/jobs/exchange-rates/run").json()
        out["eur_today"] = client.get("/rates/EUR").json()
        out["supported"] = client.get("/rates/supported-currencies").json()
        pprint(out)


if __name__ == "__main__":
    run()
