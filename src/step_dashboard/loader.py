"""Ciclo de carga: dos consultas independientes y vistas parciales."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

from step_dashboard.aggregate import apply_series, apply_today
from step_dashboard.model import DashboardView, FetchResult, StepSample
from step_dashboard.provider import StepProvider

logger = logging.getLogger(__name__)

ViewCallback = Callable[[DashboardView], None]


class DashboardLoader:
    """Run load cycles and publish each new view to a consumer.

    Both queries start together; whichever finishes first is applied and
    published first. A failed query leaves its half of the view as it was.
    After ``close()`` late results are dropped.
    """

    def __init__(
        self,
        provider: StepProvider,
        goal: float,
        on_update: ViewCallback | None = None,
        initial: DashboardView | None = None,
    ) -> None:
        self._provider = provider
        self._on_update = on_update
        self._view = initial if initial is not None else DashboardView.empty(goal)
        self._closed = False
        self.failures: list[tuple[str, Exception]] = []

    @property
    def view(self) -> DashboardView:
        return self._view

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Stop publishing; results still in flight are discarded."""
        self._closed = True

    async def load(self, now: datetime) -> DashboardView:
        """Run one load cycle.

        Args:
            now: Reference instant; defines today and the trailing window.

        Returns:
            The view after both queries completed.
        """
        self.failures = []
        await asyncio.gather(self._load_series(now), self._load_today(now))
        return self._view

    async def _load_series(self, now: datetime) -> None:
        result = await self._provider.fetch_series(now)
        if self._accept("series", result):
            series = result.value or []
            logger.info("Loaded %d daily samples", len(series))
            self._publish(apply_series(self._view, series))

    async def _load_today(self, now: datetime) -> None:
        result: FetchResult[StepSample | None] = await self._provider.fetch_today(now)
        if self._accept("today", result):
            logger.info("Today's steps: %s", result.value.steps if result.value else 0)
            self._publish(apply_today(self._view, result.value))

    def _accept(self, name: str, result: FetchResult[object]) -> bool:
        if self._closed:
            logger.debug("Discarding %s result: loader closed", name)
            return False
        if result.error is not None:
            logger.error(
                "Error fetching %s steps after %d attempts: %s",
                name,
                result.attempts,
                result.error,
            )
            self.failures.append((name, result.error))
            return False
        return True

    def _publish(self, view: DashboardView) -> None:
        self._view = view
        if self._on_update is not None:
            self._on_update(view)
