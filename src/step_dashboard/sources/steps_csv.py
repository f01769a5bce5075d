"""Lectura de registros de pasos con marca de tiempo desde CSV genericos."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime, time, tzinfo
from pathlib import Path

import pandas as pd
from dateutil import tz

from step_dashboard.model import StepSample
from step_dashboard.sources.base import DataSource, SourcePaths, find_column

logger = logging.getLogger(__name__)

_TIME_PATTERNS = [r"timestamp", r"\bstart", r"inicio", r"\bdate\b", r"fecha", r"time"]
_STEP_PATTERNS = [r"\bsteps?\b", r"\bpasos\b", r"\bstep", r"\bcount\b", r"\bvalue\b"]


@dataclass(frozen=True)
class StepsCsvPaths(SourcePaths):
    """Paths for a folder of step-log CSV files."""

    # root: folder containing *.csv


class StepsCsvSource(DataSource):
    """Generic step log: one row per recorded interval (timestamp, steps)."""

    def __init__(self, paths: StepsCsvPaths, zone: tzinfo | None = None) -> None:
        """Create the source.

        Args:
            paths: Source paths configuration.
            zone: Zone that defines calendar days; local time by default.
        """
        super().__init__(paths)
        self._zone = zone if zone is not None else tz.tzlocal()
        self._lock = threading.Lock()
        self._cached: tuple[tuple[tuple[str, int, int], ...], pd.DataFrame] | None = None

    def csv_files(self) -> list[Path]:
        """Return every CSV under the root, sorted by name."""
        files = sorted(self._paths.root.glob("*.csv"))
        if not files:
            raise FileNotFoundError(f"No *.csv in {self._paths.root}")
        return files

    def load_events(self, csv_paths: list[Path]) -> pd.DataFrame:
        """Load step events from CSVs.

        Returns DataFrame columns:
            timestamp (aware datetime in the source zone), date, steps

        Raises:
            ValueError: If a file lacks a timestamp or steps column.
        """
        frames: list[pd.DataFrame] = []
        for csv_path in csv_paths:
            df = pd.read_csv(csv_path)
            if df.empty:
                continue
            frames.append(self._normalize(df, csv_path))

        if not frames:
            return pd.DataFrame(columns=["timestamp", "date", "steps"])
        out = pd.concat(frames, ignore_index=True)
        return out.sort_values("timestamp").reset_index(drop=True)

    def events(self) -> pd.DataFrame:
        """Return the events of every CSV, read once until a file changes.

        The series and today queries of one load cycle run in separate threads
        and share this read.
        """
        files = self.csv_files()
        signature = tuple(
            (str(p), p.stat().st_mtime_ns, p.stat().st_size) for p in files
        )
        with self._lock:
            if self._cached is None or self._cached[0] != signature:
                self._cached = (signature, self.load_events(files))
            return self._cached[1]

    def daily_steps(self, start: date, end: date) -> list[StepSample]:
        """Sum events per calendar day between ``start`` and ``end``."""
        events = self.events()
        if events.empty:
            return []
        events = events.loc[(events["date"] >= start) & (events["date"] <= end)]
        daily = events.groupby("date", as_index=False)["steps"].sum()
        return [
            StepSample(day=row.date, steps=float(row.steps))
            for row in daily.sort_values("date").itertuples(index=False)
        ]

    def today_steps(self, now: datetime) -> StepSample | None:
        """Sum events from the start of today up to ``now``."""
        if now.tzinfo is None:
            now = now.replace(tzinfo=self._zone)
        else:
            now = now.astimezone(self._zone)
        day_start = datetime.combine(now.date(), time.min, tzinfo=self._zone)

        events = self.events()
        if events.empty:
            return None
        mask = events["timestamp"].map(lambda ts: day_start <= ts <= now)
        today = events.loc[mask.astype(bool)]
        if today.empty:
            return None
        return StepSample(day=now.date(), steps=float(today["steps"].sum()))

    def _normalize(self, df: pd.DataFrame, csv_path: Path) -> pd.DataFrame:
        df = df.rename(columns={c: str(c).strip() for c in df.columns})
        cols = list(df.columns)
        steps_col = find_column(cols, _STEP_PATTERNS)
        time_col = find_column([c for c in cols if c != steps_col], _TIME_PATTERNS)
        if not steps_col or not time_col:
            raise ValueError(f"{csv_path.name}: missing timestamp or steps column")

        out = pd.DataFrame(
            {
                "timestamp": df[time_col].map(self._to_zone),
                "steps": pd.to_numeric(df[steps_col], errors="coerce"),
            }
        )
        valid = out["timestamp"].notna() & out["steps"].notna() & (out["steps"] >= 0)
        dropped = int((~valid).sum())
        if dropped:
            logger.debug("%s: dropped %d unusable rows", csv_path.name, dropped)
        out = out.loc[valid].copy()
        out["date"] = out["timestamp"].map(lambda ts: ts.date())
        return out[["timestamp", "date", "steps"]]

    def _to_zone(self, value: object) -> datetime | None:
        parsed = pd.to_datetime(value, errors="coerce")
        if pd.isna(parsed):
            return None
        dt = parsed.to_pydatetime()
        if dt.tzinfo is None:
            return dt.replace(tzinfo=self._zone)
        return dt.astimezone(self._zone)
