"""Lectura de pasos diarios desde Google Fit Takeout."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import cast

import pandas as pd

from step_dashboard.model import StepSample
from step_dashboard.sources.base import DataSource, SourcePaths, find_column

logger = logging.getLogger(__name__)

_STEP_PATTERNS = [r"\bpasos\b", r"\bstep"]
_START_PATTERNS = [r"hora de inicio", r"start time", r"\binicio\b", r"\bstart\b"]


@dataclass(frozen=True)
class GoogleFitPaths(SourcePaths):
    """Paths for Google Fit Takeout/Fit directory."""

    # root: .../Takeout/Fit


class GoogleFitSource(DataSource):
    """Google Fit Takeout reader (per-day interval CSVs)."""

    def daily_metrics_files(self) -> list[Path]:
        """Return per-day CSV files for daily activity metrics."""
        metrics_dir = self._paths.root / "Métricas de actividad diaria"
        if not metrics_dir.exists():
            raise FileNotFoundError(str(metrics_dir))

        files = sorted(
            p
            for p in metrics_dir.glob("*.csv")
            if p.name.lower() != "métricas de actividad diaria.csv".lower()
        )
        if files:
            return files
        raise FileNotFoundError(str(metrics_dir))

    def load_daily(self, csv_paths: list[Path]) -> pd.DataFrame:
        """Load daily step totals from per-day CSVs.

        Returns DataFrame columns:
            date, steps
        """
        rows: list[dict[str, object]] = []
        for csv_path in csv_paths:
            file_date = _date_from_filename(csv_path)
            if not file_date:
                logger.debug("Skipping %s: no date in filename", csv_path.name)
                continue
            df = pd.read_csv(csv_path)
            row = _summarize_daily_file(df, file_date)
            if row:
                rows.append(row)

        if not rows:
            return pd.DataFrame(columns=["date", "steps"])

        out = pd.DataFrame(rows)
        # Takeout a veces parte un dia en varios archivos.
        out = out.groupby("date", as_index=False)["steps"].sum(min_count=1)
        return out.sort_values("date").reset_index(drop=True)

    def daily_steps(self, start: date, end: date) -> list[StepSample]:
        """Return daily step samples between ``start`` and ``end`` inclusive."""
        files = [
            p
            for p in self.daily_metrics_files()
            if (day := _date_from_filename(p)) is not None and start <= day <= end
        ]
        daily = self.load_daily(files)
        return [
            StepSample(day=row.date, steps=float(row.steps))
            for row in daily.itertuples(index=False)
            if not pd.isna(row.steps)
        ]

    def today_steps(self, now: datetime) -> StepSample | None:
        """Sum today's intervals that started at or before ``now``."""
        today = now.date()
        files = [p for p in self.daily_metrics_files() if _date_from_filename(p) == today]
        total: float | None = None
        for csv_path in files:
            steps = _steps_until(pd.read_csv(csv_path), today, now)
            if steps is not None:
                total = steps if total is None else total + steps
        if total is None:
            return None
        return StepSample(day=today, steps=total)


def _sum_or_none(values: pd.Series) -> float | None:
    result = pd.to_numeric(values, errors="coerce").sum(min_count=1)
    if pd.isna(result):
        return None
    return float(result)


def _summarize_daily_file(
    df: pd.DataFrame, file_date: date
) -> dict[str, object] | None:
    if df.empty:
        return None

    df = df.rename(columns={c: c.strip() for c in df.columns})
    steps_col = find_column(list(df.columns), _STEP_PATTERNS)
    if not steps_col:
        return None
    steps = _sum_or_none(df[steps_col])
    if steps is None:
        return None
    return {"date": file_date, "steps": steps}


def _steps_until(df: pd.DataFrame, day: date, now: datetime) -> float | None:
    """Sum step intervals of ``day`` that started at or before ``now``.

    Start values carry their own UTC offset (``08:00:00.000-03:00``); a naive
    side takes the zone of the other one.
    """
    if df.empty:
        return None
    df = df.rename(columns={c: c.strip() for c in df.columns})
    cols = list(df.columns)
    steps_col = find_column(cols, _STEP_PATTERNS)
    if not steps_col:
        return None
    start_col = find_column(cols, _START_PATTERNS)
    if start_col:
        started = df[start_col].map(lambda start: _started_by(start, day, now))
        df = df.loc[started.astype(bool)]
    return _sum_or_none(df[steps_col])


def _date_from_filename(path: Path) -> date | None:
    match = re.match(r"(\d{4}-\d{2}-\d{2})", path.stem)
    if not match:
        return None
    parsed = pd.to_datetime(match.group(1), errors="coerce")
    if pd.isna(parsed):
        return None
    return cast(date, parsed.date())


def _started_by(start: object, day: date, now: datetime) -> bool:
    parsed = pd.to_datetime(f"{day.isoformat()}T{str(start).strip()}", errors="coerce")
    if pd.isna(parsed):
        return False
    begins = parsed.to_pydatetime()
    if begins.tzinfo is None and now.tzinfo is not None:
        begins = begins.replace(tzinfo=now.tzinfo)
    elif begins.tzinfo is not None and now.tzinfo is None:
        now = now.replace(tzinfo=begins.tzinfo)
    return begins <= now
