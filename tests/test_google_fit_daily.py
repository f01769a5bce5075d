"""Tests for Google Fit daily step reader."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

import pandas as pd
import pytest
from dateutil import tz

from step_dashboard.model import StepSample
from step_dashboard.sources.base import find_column
from step_dashboard.sources.google_fit import (
    GoogleFitPaths,
    GoogleFitSource,
    _date_from_filename,
    _steps_until,
    _summarize_daily_file,
)

METRICS = "Métricas de actividad diaria"


def _write_csv(path: Path, data: dict[str, list[object]]) -> None:
    pd.DataFrame(data).to_csv(path, index=False)


def _takeout(tmp_path: Path, days: dict[str, list[int]]) -> Path:
    root = tmp_path / "Fit"
    metrics = root / METRICS
    metrics.mkdir(parents=True)
    for name, steps in days.items():
        starts = [f"{8 + i:02d}:00:00.000-03:00" for i in range(len(steps))]
        _write_csv(
            metrics / f"{name}.csv",
            {"Hora de inicio": starts, "Recuento de pasos": steps},
        )
    return root


def test_find_column_matches_spanish_and_english() -> None:
    cols = ["Hora de inicio", "Recuento de pasos", "Distance (m)"]
    assert find_column(cols, [r"\bpasos\b", r"\bstep"]) == "Recuento de pasos"
    assert find_column(["Step count"], [r"\bpasos\b", r"\bstep"]) == "Step count"
    assert find_column(cols, [r"\bunknown\b"]) is None


def test_date_from_filename_valid_and_invalid() -> None:
    assert _date_from_filename(Path("2025-12-15.csv")) == date(2025, 12, 15)
    assert _date_from_filename(Path("2025-12-15 (1).csv")) == date(2025, 12, 15)
    assert _date_from_filename(Path("2025-13-99.csv")) is None
    assert _date_from_filename(Path("no-date.csv")) is None


def test_summarize_daily_file_coerces_and_skips_missing() -> None:
    df = pd.DataFrame({" Recuento de pasos ": ["1000", "bad", 2000]})
    out = _summarize_daily_file(df, date(2025, 12, 15))
    assert out == {"date": date(2025, 12, 15), "steps": 3000.0}

    assert _summarize_daily_file(pd.DataFrame(), date(2025, 12, 15)) is None
    assert _summarize_daily_file(pd.DataFrame({"Other": [1]}), date(2025, 12, 15)) is None
    all_na = pd.DataFrame({"Recuento de pasos": [None, None]})
    assert _summarize_daily_file(all_na, date(2025, 12, 15)) is None


def test_steps_until_filters_by_start_time() -> None:
    df = pd.DataFrame(
        {
            "Start time": ["08:00:00.000-03:00", "09:15:00.000-03:00", "18:00:00.000-03:00"],
            "Step count": [100, 200, 400],
        }
    )
    day = date(2025, 12, 15)
    assert _steps_until(df, day, datetime(2025, 12, 15, 9, 15)) == 300
    assert _steps_until(df, day, datetime(2025, 12, 15, 7, 0)) is None


def test_steps_until_compares_offsets_with_aware_now() -> None:
    df = pd.DataFrame(
        {
            "Hora de inicio": ["08:00:00.000-03:00", "10:00:00.000-03:00"],
            "Recuento de pasos": [100, 200],
        }
    )
    # 12:00 UTC son las 09:00 en -03:00: el intervalo de las 10:00 no empezo.
    now = datetime(2025, 12, 15, 12, 0, tzinfo=tz.gettz("UTC"))
    assert _steps_until(df, date(2025, 12, 15), now) == 100


def test_validate_and_daily_metrics_files_errors(tmp_path: Path) -> None:
    source = GoogleFitSource(GoogleFitPaths(root=tmp_path / "missing"))
    with pytest.raises(FileNotFoundError):
        source.validate()

    root = tmp_path / "Fit"
    root.mkdir()
    source = GoogleFitSource(GoogleFitPaths(root=root))
    with pytest.raises(FileNotFoundError):
        source.daily_metrics_files()

    (root / METRICS).mkdir()
    with pytest.raises(FileNotFoundError):
        source.daily_metrics_files()


def test_daily_metrics_files_excludes_summary(tmp_path: Path) -> None:
    root = _takeout(tmp_path, {"2025-12-16": [1], "2025-12-15": [1]})
    _write_csv(root / METRICS / f"{METRICS}.csv", {"Fecha": ["2025-12-15"]})
    files = GoogleFitSource(GoogleFitPaths(root=root)).daily_metrics_files()
    assert [p.name for p in files] == ["2025-12-15.csv", "2025-12-16.csv"]


def test_load_daily_empty_has_columns() -> None:
    source = GoogleFitSource(GoogleFitPaths(root=Path(".")))
    out = source.load_daily([Path("no-date.csv")])
    assert list(out.columns) == ["date", "steps"]
    assert out.empty


def test_daily_steps_window_and_gaps(tmp_path: Path) -> None:
    root = _takeout(
        tmp_path,
        {
            "2025-11-01": [999],
            "2025-12-15": [1000, 500],
            "2025-12-17": [2000],
        },
    )
    source = GoogleFitSource(GoogleFitPaths(root=root))
    out = source.daily_steps(date(2025, 12, 1), date(2025, 12, 31))
    assert out == [
        StepSample(day=date(2025, 12, 15), steps=1500.0),
        StepSample(day=date(2025, 12, 17), steps=2000.0),
    ]


def test_daily_steps_merges_split_day_files(tmp_path: Path) -> None:
    root = _takeout(tmp_path, {"2025-12-15": [100], "2025-12-15 (1)": [50]})
    source = GoogleFitSource(GoogleFitPaths(root=root))
    out = source.daily_steps(date(2025, 12, 15), date(2025, 12, 15))
    assert out == [StepSample(day=date(2025, 12, 15), steps=150.0)]


def test_today_steps_sums_up_to_now(tmp_path: Path) -> None:
    root = _takeout(tmp_path, {"2025-12-15": [100, 200, 400]})
    source = GoogleFitSource(GoogleFitPaths(root=root))
    out = source.today_steps(datetime(2025, 12, 15, 9, 30))
    assert out == StepSample(day=date(2025, 12, 15), steps=300.0)


def test_today_steps_none_without_file(tmp_path: Path) -> None:
    root = _takeout(tmp_path, {"2025-12-14": [100]})
    source = GoogleFitSource(GoogleFitPaths(root=root))
    assert source.today_steps(datetime(2025, 12, 15, 12, 0)) is None
