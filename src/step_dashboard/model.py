"""Modelos tipados para muestras diarias de pasos y vistas del tablero."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class StepSample:
    """Step count aggregated over one calendar day."""

    day: date
    steps: float


@dataclass(frozen=True)
class WeeklyComparison:
    """Step totals of the last two trailing weeks."""

    last_week: float = 0.0
    this_week: float = 0.0


@dataclass(frozen=True)
class DashboardView:
    """Derived values handed to the presentation layer after a load cycle."""

    goal: float
    today_steps: float = 0.0
    progress: float = 0.0
    progress_ratio: float = 0.0
    monthly_average: float = 0.0
    weekly: WeeklyComparison = WeeklyComparison()
    distribution: tuple[StepSample, ...] = ()
    cumulative: tuple[tuple[date, float], ...] = ()

    @classmethod
    def empty(cls, goal: float) -> DashboardView:
        """Return the zero view shown before any data arrives."""
        return cls(goal=goal)


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Outcome of one data-source query: a value or the final error."""

    value: T | None = None
    error: Exception | None = None
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return self.error is None
