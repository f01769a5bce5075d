"""Clases base para fuentes de datos de pasos."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path

from step_dashboard.model import StepSample


class DataSourceError(Exception):
    """A health-data query could not be answered."""


@dataclass(frozen=True)
class SourcePaths:
    """Container for source directories."""

    root: Path


class DataSource(ABC):
    """Abstract step-count data source."""

    def __init__(self, paths: SourcePaths) -> None:
        """Create a data source.

        Args:
            paths: Source paths configuration.
        """
        self._paths = paths

    def validate(self) -> None:
        """Validate that the source root exists.

        Raises:
            FileNotFoundError: If the root folder is missing.
        """
        if not self._paths.root.exists():
            raise FileNotFoundError(str(self._paths.root))

    @abstractmethod
    def daily_steps(self, start: date, end: date) -> list[StepSample]:
        """Return one summed sample per recorded day in ``[start, end]``.

        Days without data are omitted; samples are sorted by day.
        """

    @abstractmethod
    def today_steps(self, now: datetime) -> StepSample | None:
        """Return the steps recorded from the start of ``now``'s day up to ``now``.

        Returns:
            Today's sample, or None when nothing was recorded.
        """


def find_column(columns: list[str], patterns: list[str]) -> str | None:
    """Return the first column matching any pattern, tried in order."""
    for pat in patterns:
        rx = re.compile(pat, re.IGNORECASE)
        for c in columns:
            if rx.search(c):
                return c
    return None
