"""SQLite-backed rate store for local runs and tests."""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Callable, Dict, Optional

from rate_cooker.core.errors import SerializationError, StoreUnavailable
from rate_cooker.models.constants import (
    SUPPORTED_CURRENCIES_KEY,
    SUPPORTED_CURRENCIES_SORT_KEY,
)
from rate_cooker.models.rates import ExchangeRateRecord, SupportedCurrenciesRecord
from .base import RateStore, decode_rate_record, decode_supported_currencies, utcnow
from .schema import init_db, quote_identifier

logger = logging.getLogger("rate_cooker.store.sqlite")


class SqliteRateStore(RateStore):
    backend = "sqlite"

    def __init__(
        self,
        db_path: Path,
        table_name: str,
        clock: Callable = utcnow,
    ):
        super().__init__(clock)
        self.db_path = db_path
        self.table_name = table_name
        self._table = quote_identifier(table_name)
        try:
            init_db(db_path, table_name)
        except sqlite3.Error as e:
            raise StoreUnavailable(f"cannot initialise sqlite store: {e}") from e

    # ------------------------------------------------------------------
    # Connection helpers
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _get_item(self, key: str, sort_key: str) -> Optional[Dict[str, object]]:
        try:
            with self._connect() as conn:
                cur = conn.cursor()
                cur.execute(
                    f"SELECT item FROM {self._table} WHERE key = ? AND sort_key = ?",
                    (key, sort_key),
                )
                row = cur.fetchone()
        except sqlite3.Error as e:
            raise StoreUnavailable(
                f"error reading {key}/{sort_key} from {self.table_name}: {e}"
            ) from e
        if row is None:
            return None
        try:
            item = json.loads(row["item"])
        except ValueError as e:
            raise SerializationError(f"corrupt item {key}/{sort_key}: {e}") from e
        if not isinstance(item, dict):
            raise SerializationError(f"corrupt item {key}/{sort_key}: not an object")
        return item

    # ------------------------------------------------------------------
    # RateStore API
    def get(self, base_currency: str, date: str) -> Optional[ExchangeRateRecord]:
        item = self._get_item(base_currency, date)
        if item is None:
            return None
        return decode_rate_record(item, f"{base_currency} on {date}")

    def get_supported_currencies(self) -> Optional[SupportedCurrenciesRecord]:
        item = self._get_item(SUPPORTED_CURRENCIES_KEY, SUPPORTED_CURRENCIES_SORT_KEY)
        if item is None:
            return None
        return decode_supported_currencies(item)

    def _put_item(self, item: Dict[str, object]) -> None:
        key, sort_key = item["Key"], item["SortKey"]
        try:
            body = json.dumps(item, allow_nan=False, separators=(",", ":"))
        except (TypeError, ValueError) as e:
            raise SerializationError(f"error marshaling {key}/{sort_key}: {e}") from e
        try:
            with self._connect() as conn:
                conn.execute(
                    f"""
                    INSERT INTO {self._table} (key, sort_key, item, updated_at)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(key, sort_key) DO UPDATE SET
                        item = excluded.item,
                        updated_at = excluded.updated_at
                    """,
                    (key, sort_key, body, item["UpdatedAt"]),
                )
        except sqlite3.Error as e:
            raise StoreUnavailable(
                f"error storing {key}/{sort_key} in {self.table_name}: {e}"
            ) from e
        logger.debug(
            "item stored",
            extra={"key": key, "sort_key": sort_key, "table": self.table_name},
        )
