import json
import logging
import sys
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional

invocation_id_ctx: ContextVar[str | None] = ContextVar("invocation_id", default=None)

LEVELS: Dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

# Attributes every LogRecord carries; anything else arrived via `extra=`.
_RESERVED = set(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "invocation_id"}


class InvocationIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        iid = invocation_id_ctx.get()
        record.invocation_id = iid or "-"
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        base: Dict[str, Any] = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "time": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created)),
            "invocation_id": getattr(record, "invocation_id", "-"),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED and not key.startswith("_"):
                base[key] = value
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False, default=str)


def init_logging(level: str = "info") -> None:
    root = logging.getLogger()
    root.handlers.clear()
    resolved = LEVELS.get(level.lower(), logging.INFO)
    root.setLevel(resolved)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(resolved)
    handler.addFilter(InvocationIdFilter())
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
    logging.getLogger("rate_cooker").info(
        "Logger configured", extra={"log_level": logging.getLevelName(resolved)}
    )


@contextmanager
def invocation_context(invocation_id: Optional[str] = None) -> Iterator[str]:
    iid = invocation_id or str(uuid.uuid4())
    token = invocation_id_ctx.set(iid)
    try:
        yield iid
    finally:
        invocation_id_ctx.reset(token)


async def request_context_middleware(request, call_next):  # type: ignore
    logger = logging.getLogger("rate_cooker.request")
    with invocation_context():
        logger.debug("request start")
        try:
            response = await call_next(request)
            return response
        finally:
            logger.debug("request end")
