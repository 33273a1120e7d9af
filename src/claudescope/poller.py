import asyncio
import time
from typing import Awaitable, Callable

import structlog

from claudescope.errors import (
    DecodeError,
    HTTPStatusError,
    InvalidResponseError,
    NoCredentialsError,
    OAuthError,
    TokenExpiredError,
)
from claudescope.fetcher import fetch_usage
from claudescope.metrics import UsageMetrics
from claudescope.models import UsageData

logger = structlog.get_logger()

# label values for claudescope_fetch_errors_total
_ERROR_KINDS: "list[tuple[type[Exception], str]]" = [
    (NoCredentialsError, "no_credentials"),
    (TokenExpiredError, "token_expired"),
    (InvalidResponseError, "invalid_response"),
    (HTTPStatusError, "http_error"),
    (DecodeError, "decode_error"),
]


def error_kind(exc: "Exception") -> "str":
    for cls, kind in _ERROR_KINDS:
        if isinstance(exc, cls):
            return kind
    return "unknown"


class UsagePoller:
    """
    UsagePoller drives the exporter mode: it calls the fetcher once
    per interval and applies the result to the metrics. A failed
    fetch is logged and counted, the next attempt simply waits for
    the following cycle.
    """

    def __init__(
        self,
        metrics: "UsageMetrics",
        poll_interval_seconds: "int" = 60,
        fetch: "Callable[[], Awaitable[UsageData]]" = fetch_usage,
    ) -> "None":
        self._metrics = metrics
        self._interval = poll_interval_seconds
        self._fetch = fetch
        self._stop_event: "asyncio.Event" = asyncio.Event()

    def stop(self) -> "None":
        """
        signals the poll loop to stop after the current cycle.
        """
        self._stop_event.set()

    async def run(self) -> "None":
        """
        runs the poll loop until stop() is called.
        """
        while not self._stop_event.is_set():
            await self.poll_once()

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
            except TimeoutError:
                pass

    async def poll_once(self) -> "UsageData | None":
        start = time.monotonic()
        try:
            usage = await self._fetch()
        except (OAuthError, DecodeError) as exc:
            kind = error_kind(exc)
            logger.error("usage_poll_error", kind=kind, error=str(exc))
            self._metrics.inc_fetch_error(kind)
            return None
        finally:
            self._metrics.observe_fetch_duration(time.monotonic() - start)

        self._metrics.update_usage(usage)
        self._metrics.set_last_fetch_success(time.time())
        logger.info(
            "usage_poll_done",
            five_hour_utilization=usage.five_hour_utilization,
            weekly_utilization=usage.weekly_utilization,
        )
        return usage
