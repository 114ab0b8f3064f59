"""DynamoDB-backed rate store.

Items are written exactly as the downstream readers expect them:
``Key`` (partition), ``SortKey`` (sort), ``ExchangeRates`` or
``SupportedCurrencies``, ``UpdatedAt`` (ISO-8601). DynamoDB numbers must be
Decimal, so floats are parsed into Decimal on the way in and back to
float on the way out.
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from typing import Any, Callable, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from rate_cooker.core.errors import (
    ConfigurationError,
    SerializationError,
    StoreUnavailable,
)
from rate_cooker.models.constants import (
    SUPPORTED_CURRENCIES_KEY,
    SUPPORTED_CURRENCIES_SORT_KEY,
)
from rate_cooker.models.rates import ExchangeRateRecord, SupportedCurrenciesRecord
from .base import RateStore, decode_rate_record, decode_supported_currencies, utcnow

logger = logging.getLogger("rate_cooker.store.dynamodb")

_SERIALIZATION_CODES = {"ValidationException", "SerializationException"}


def to_dynamo(item: Dict[str, Any]) -> Dict[str, Any]:
    return json.loads(json.dumps(item, allow_nan=False), parse_float=Decimal)


def from_dynamo(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, dict):
        return {k: from_dynamo(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [from_dynamo(v) for v in value]
    return value


class DynamoRateStore(RateStore):
    backend = "dynamodb"

    def __init__(
        self,
        table_name: str,
        *,
        table: Any = None,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        clock: Callable = utcnow,
    ):
        super().__init__(clock)
        self.table_name = table_name
        if table is None:
            try:
                resource = boto3.resource(
                    "dynamodb", region_name=region_name, endpoint_url=endpoint_url
                )
            except BotoCoreError as e:
                raise ConfigurationError(f"unable to load SDK config: {e}") from e
            table = resource.Table(table_name)
        self._table = table

    def _wrap(self, e: Exception, action: str) -> Exception:
        if isinstance(e, ClientError):
            code = e.response.get("Error", {}).get("Code", "")
            if code in _SERIALIZATION_CODES:
                return SerializationError(f"{action}: {code}: {e}")
        return StoreUnavailable(f"{action}: {e}")

    def _get_item(self, key: str, sort_key: str) -> Optional[Dict[str, Any]]:
        try:
            result = self._table.get_item(Key={"Key": key, "SortKey": sort_key})
        except (ClientError, BotoCoreError) as e:
            raise self._wrap(
                e, f"error checking existing rates for {key} on {sort_key}"
            ) from e
        item = result.get("Item")
        return from_dynamo(item) if item is not None else None

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

    def _put_item(self, item: Dict[str, Any]) -> None:
        key = item["Key"]
        try:
            encoded = to_dynamo(item)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"error marshaling record for {key}: {e}") from e
        try:
            self._table.put_item(Item=encoded)
        except (ClientError, BotoCoreError) as e:
            raise self._wrap(e, f"error storing item for {key}") from e
        except TypeError as e:
            # boto3's TypeSerializer rejects unsupported Python types
            raise SerializationError(f"error marshaling record for {key}: {e}") from e
        logger.debug(
            "item stored",
            extra={"key": key, "sort_key": item["SortKey"], "table": self.table_name},
        )
