from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class CurrencyStatus(str, Enum):
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


class InvocationStatus(str, Enum):
    ALL_SUCCEEDED = "all_succeeded"
    PARTIAL_SUCCESS = "partial_success"
    ALL_FAILED = "all_failed"


@dataclass(frozen=True)
class CurrencyResult:
    currency: str
    status: CurrencyStatus
    stage: Optional[str] = None  # get | fetch | put, set on failure
    rates_count: int = 0
    error: Optional[str] = None


@dataclass(frozen=True)
class InvocationOutcome:
    """Transient per-invocation summary; counts derive from ``results``."""

    date: str
    results: Tuple[CurrencyResult, ...] = ()
    duration_ms: int = 0
    supported_currencies_stored: bool = True

    def _count(self, status: CurrencyStatus) -> int:
        return sum(1 for r in self.results if r.status is status)

    @property
    def success_count(self) -> int:
        return self._count(CurrencyStatus.UPDATED)

    @property
    def skipped_count(self) -> int:
        return self._count(CurrencyStatus.SKIPPED)

    @property
    def error_count(self) -> int:
        return self._count(CurrencyStatus.FAILED)

    @property
    def status(self) -> InvocationStatus:
        if self.error_count == 0:
            return InvocationStatus.ALL_SUCCEEDED
        if self.success_count == 0 and self.skipped_count == 0:
            return InvocationStatus.ALL_FAILED
        return InvocationStatus.PARTIAL_SUCCESS

    @property
    def failed(self) -> bool:
        return self.status is InvocationStatus.ALL_FAILED

    def as_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "status": self.status.value,
            "total_currencies": len(self.results),
            "success_count": self.success_count,
            "skipped_count": self.skipped_count,
            "error_count": self.error_count,
            "duration_ms": self.duration_ms,
            "supported_currencies_stored": self.supported_currencies_stored,
            "results": [
                {
                    "currency": r.currency,
                    "status": r.status.value,
                    "stage": r.stage,
                    "rates_count": r.rates_count,
                    "error": r.error,
                }
                for r in self.results
            ],
        }
