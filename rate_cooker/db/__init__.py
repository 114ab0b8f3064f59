"""Rate store backends and factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rate_cooker.core.errors import ConfigurationError
from .base import RateStore
from .dal import SqliteRateStore
from .dynamo import DynamoRateStore

if TYPE_CHECKING:  # pragma: no cover
    from rate_cooker.core.config import Settings


def make_rate_store(settings: "Settings") -> RateStore:
    backend = settings.rate_store_backend
    if backend == "dynamodb":
        return DynamoRateStore(
            settings.table_name,  # type: ignore[arg-type]
            region_name=settings.aws_region,
            endpoint_url=settings.dynamodb_endpoint_url,
        )
    if backend == "sqlite":
        return SqliteRateStore(settings.sqlite_path, settings.table_name)  # type: ignore[arg-type]
    raise ConfigurationError(f"Unknown rate store backend '{backend}'")


__all__ = ["RateStore", "SqliteRateStore", "DynamoRateStore", "make_rate_store"]
