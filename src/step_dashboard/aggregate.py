"""Agregaciones puras sobre series diarias de pasos."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from datetime import date
from itertools import accumulate

import pandas as pd

from step_dashboard.model import DashboardView, StepSample, WeeklyComparison

WEEK_DAYS = 7


def today_total(today: StepSample | None) -> float:
    """Return today's step count, 0 when nothing was recorded."""
    if today is None:
        return 0.0
    return float(today.steps)


def progress_ratio(progress: float, goal: float) -> float:
    """Return progress / goal without clamping (over-goal days exceed 1)."""
    return progress / goal


def monthly_average(series: Sequence[StepSample]) -> float:
    """Arithmetic mean of steps over the series; 0 for an empty series."""
    if not series:
        return 0.0
    return sum(s.steps for s in series) / len(series)


def weekly_comparison(
    series: Sequence[StepSample], days: int = WEEK_DAYS
) -> WeeklyComparison:
    """Compare the trailing week with the week before it.

    Windows are counted in samples, not calendar days: ``this_week`` sums the
    last ``days`` samples and ``last_week`` the ``days`` samples before those.
    Short series yield partial (possibly empty) windows.

    Args:
        series: Chronologically ordered daily samples.
        days: Window length in samples.

    Returns:
        Totals for both windows.
    """
    split = max(len(series) - days, 0)
    this_week = sum(s.steps for s in series[split:])
    last_week = sum(s.steps for s in series[max(split - days, 0) : split])
    return WeeklyComparison(last_week=float(last_week), this_week=float(this_week))


def distribution(series: Sequence[StepSample]) -> tuple[StepSample, ...]:
    """Return the samples unchanged, one plotted point per day."""
    return tuple(series)


def cumulative(series: Sequence[StepSample]) -> tuple[tuple[date, float], ...]:
    """Running total of steps, one ``(day, total)`` pair per sample."""
    totals = accumulate(float(s.steps) for s in series)
    return tuple(zip((s.day for s in series), totals))


def apply_series(view: DashboardView, series: Sequence[StepSample]) -> DashboardView:
    """Replace every series-derived value of ``view``."""
    return replace(
        view,
        monthly_average=monthly_average(series),
        weekly=weekly_comparison(series),
        distribution=distribution(series),
        cumulative=cumulative(series),
    )


def apply_today(
    view: DashboardView,
    today: StepSample | None,
    progress: float | None = None,
) -> DashboardView:
    """Replace today's total and the progress toward the goal.

    ``progress`` defaults to today's total.
    """
    steps = today_total(today)
    if progress is None:
        progress = steps
    return replace(
        view,
        today_steps=steps,
        progress=progress,
        progress_ratio=progress_ratio(progress, view.goal),
    )


def build_view(
    series: Sequence[StepSample],
    today: StepSample | None,
    goal: float,
    progress: float | None = None,
) -> DashboardView:
    """Compute a complete view from one series and today's sample."""
    view = apply_series(DashboardView.empty(goal), series)
    return apply_today(view, today, progress)


def series_to_frame(series: Sequence[StepSample]) -> pd.DataFrame:
    """Convert a series to a DataFrame with date/steps/cumulative columns."""
    if not series:
        return pd.DataFrame(columns=["date", "steps", "cumulative"])
    running = cumulative(series)
    return pd.DataFrame(
        {
            "date": [s.day for s in series],
            "steps": [float(s.steps) for s in series],
            "cumulative": [total for _, total in running],
        }
    )
