"""Tests for the load-cycle controller."""

from __future__ import annotations

import asyncio
from datetime import date, datetime

import pytest

from step_dashboard.aggregate import apply_today
from step_dashboard.loader import DashboardLoader
from step_dashboard.model import DashboardView, FetchResult, StepSample

NOW = datetime(2025, 12, 31, 10, 0)


class _FakeProvider:
    """Resolves the two queries in a chosen order."""

    def __init__(
        self,
        series: FetchResult[list[StepSample]],
        today: FetchResult[StepSample | None],
        today_first: bool = False,
    ) -> None:
        self._series = series
        self._today = today
        self._today_first = today_first

    async def fetch_series(self, now: datetime) -> FetchResult[list[StepSample]]:
        if self._today_first:
            await asyncio.sleep(0.01)
        return self._series

    async def fetch_today(self, now: datetime) -> FetchResult[StepSample | None]:
        if not self._today_first:
            await asyncio.sleep(0.01)
        return self._today


def _series() -> list[StepSample]:
    return [StepSample(day=date(2025, 12, d), steps=1000.0) for d in range(1, 11)]


def _today(steps: float = 4321.0) -> FetchResult[StepSample | None]:
    return FetchResult(value=StepSample(day=NOW.date(), steps=steps))


def test_load_publishes_partial_then_full_views() -> None:
    updates: list[DashboardView] = []
    provider = _FakeProvider(FetchResult(value=_series()), _today())
    loader = DashboardLoader(provider, goal=10000, on_update=updates.append)  # type: ignore[arg-type]

    view = asyncio.run(loader.load(NOW))

    assert len(updates) == 2
    # La serie llega primero; la tarjeta de hoy sigue en cero.
    assert updates[0].monthly_average == 1000
    assert updates[0].today_steps == 0
    assert view == updates[1] == loader.view
    assert view.today_steps == 4321
    assert view.progress_ratio == pytest.approx(0.4321)
    assert view.weekly.this_week == 7000
    assert view.weekly.last_week == 3000
    assert view.cumulative[-1] == (date(2025, 12, 10), 10000.0)
    assert loader.failures == []


def test_load_order_does_not_change_final_view() -> None:
    first = DashboardLoader(
        _FakeProvider(FetchResult(value=_series()), _today()), goal=10000  # type: ignore[arg-type]
    )
    second = DashboardLoader(
        _FakeProvider(FetchResult(value=_series()), _today(), today_first=True),  # type: ignore[arg-type]
        goal=10000,
    )
    assert asyncio.run(first.load(NOW)) == asyncio.run(second.load(NOW))


def test_failed_query_keeps_previous_values() -> None:
    previous = apply_today(DashboardView.empty(10000), StepSample(day=NOW.date(), steps=99))
    updates: list[DashboardView] = []
    provider = _FakeProvider(
        FetchResult(value=_series()),
        FetchResult(error=OSError("denied"), attempts=3),
    )
    loader = DashboardLoader(
        provider, goal=10000, on_update=updates.append, initial=previous  # type: ignore[arg-type]
    )

    view = asyncio.run(loader.load(NOW))

    assert len(updates) == 1
    assert view.today_steps == 99
    assert view.monthly_average == 1000
    assert [name for name, _ in loader.failures] == ["today"]


def test_empty_today_result_means_zero() -> None:
    provider = _FakeProvider(FetchResult(value=[]), FetchResult(value=None))
    loader = DashboardLoader(provider, goal=10000)  # type: ignore[arg-type]
    view = asyncio.run(loader.load(NOW))
    assert view == DashboardView.empty(10000)


def test_closed_loader_discards_results() -> None:
    updates: list[DashboardView] = []
    provider = _FakeProvider(FetchResult(value=_series()), _today())
    loader = DashboardLoader(provider, goal=10000, on_update=updates.append)  # type: ignore[arg-type]
    loader.close()

    view = asyncio.run(loader.load(NOW))

    assert loader.closed
    assert updates == []
    assert view == DashboardView.empty(10000)
