"""Consultas asincronas a la fuente de pasos con reintentos acotados."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import TypeVar

from step_dashboard.config import DashboardConfig
from step_dashboard.model import FetchResult, StepSample
from step_dashboard.sources.base import DataSource, DataSourceError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_ERRORS: tuple[type[Exception], ...] = (OSError, ValueError, DataSourceError)


class StepProvider:
    """Awaitable health-data queries over a blocking ``DataSource``."""

    def __init__(self, source: DataSource, config: DashboardConfig) -> None:
        self._source = source
        self._config = config

    async def fetch_series(self, now: datetime) -> FetchResult[list[StepSample]]:
        """Fetch the trailing daily series ending on ``now``'s day.

        The window covers ``window_days`` days before today plus today itself.
        """
        end = now.date()
        start = end - timedelta(days=self._config.window_days)
        return await self._fetch("series", self._source.daily_steps, start, end)

    async def fetch_today(self, now: datetime) -> FetchResult[StepSample | None]:
        """Fetch today's total from the start of the day up to ``now``."""
        return await self._fetch("today", self._source.today_steps, now)

    async def _fetch(
        self, name: str, func: Callable[..., T], *args: object
    ) -> FetchResult[T]:
        """Run ``func`` in a worker thread, retrying with exponential backoff."""
        max_retries = self._config.max_retries
        error: Exception | None = None
        for attempt in range(1, max_retries + 1):
            if attempt > 1:
                await asyncio.sleep(self._config.retry_base_delay * 2 ** (attempt - 2))
            try:
                value = await asyncio.to_thread(func, *args)
            except RETRYABLE_ERRORS as exc:
                logger.warning(
                    "%s query failed (attempt %d/%d): %s",
                    name,
                    attempt,
                    max_retries,
                    exc,
                )
                error = exc
                continue
            logger.debug("%s query succeeded on attempt %d", name, attempt)
            return FetchResult(value=value, attempts=attempt)
        return FetchResult(error=error, attempts=max_retries)
