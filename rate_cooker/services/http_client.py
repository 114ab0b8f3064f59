from __future__ import annotations

"""Lightweight HTTP client util with retry.

Uses stdlib urllib; one GET returning decoded JSON. Only transport failures
are retried. A non-200 status or an undecodable body fails immediately.
"""
import http.client
import json
import logging
import time
import urllib.error
import urllib.request
from typing import Any, Optional

logger = logging.getLogger("rate_cooker.http")


class HttpError(Exception):
    pass


class HttpTransportError(HttpError):
    pass


class HttpStatusError(HttpError):
    def __init__(self, url: str, status: int):
        super().__init__(f"HTTP {status} for {url}")
        self.status = status


class HttpDecodeError(HttpError):
    pass


def get_json(
    url: str,
    *,
    timeout: float = 5.0,
    retries: int = 0,
    backoff: float = 0.5,
    display_url: Optional[str] = None,
) -> Any:
    """GET ``url`` and decode the JSON body.

    ``display_url`` replaces ``url`` in messages (use it when the URL embeds
    a secret).
    """
    shown = display_url or url
    last_err: Optional[Exception] = None
    for attempt in range(retries + 1):
        try:
            with urllib.request.urlopen(url, timeout=timeout) as resp:  # nosec B310
                if resp.status != 200:
                    raise HttpStatusError(shown, resp.status)
                data = resp.read()
            break
        except urllib.error.HTTPError as e:
            raise HttpStatusError(shown, e.code) from e
        except (
            urllib.error.URLError,
            http.client.HTTPException,
            TimeoutError,
            ConnectionError,
        ) as e:
            last_err = e
            if attempt == retries:
                raise HttpTransportError(
                    f"Failed to fetch {shown}: {getattr(e, 'reason', e)}"
                ) from e
            delay = backoff * (2**attempt)
            logger.warning(
                "transport error, retrying",
                extra={"url": shown, "attempt": attempt + 1, "delay_s": delay},
            )
            time.sleep(delay)
    else:  # pragma: no cover - loop always breaks or raises
        raise HttpTransportError(f"Failed to fetch {shown}: {last_err}")

    try:
        return json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise HttpDecodeError(f"Invalid JSON from {shown}: {e}") from e
