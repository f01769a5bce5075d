"""Configuracion del tablero: meta diaria, ventana, fuente y reintentos."""

from __future__ import annotations

import argparse
import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path

from dateutil import tz

from step_dashboard.sources.base import DataSource
from step_dashboard.sources.google_fit import GoogleFitPaths, GoogleFitSource
from step_dashboard.sources.steps_csv import StepsCsvPaths, StepsCsvSource

SOURCES = ("google-fit", "csv")

DEFAULT_ROOT = Path.home() / "proyectos" / "salud" / "fit" / "Takeout" / "Fit"


@dataclass(frozen=True)
class DashboardConfig:
    """Settings for one dashboard session.

    Attributes:
        source: Data source kind, one of ``SOURCES``.
        root: Directory holding the exported step data.
        goal: Daily step target.
        window_days: Trailing window for the series query.
        timezone: IANA zone name; empty means the machine's local zone.
        max_retries: Attempts per query, including the first one.
        retry_base_delay: Seconds before the first retry; doubles afterwards.
    """

    source: str = "google-fit"
    root: Path = DEFAULT_ROOT
    goal: float = 10000.0
    window_days: int = 30
    timezone: str = ""
    max_retries: int = 3
    retry_base_delay: float = 0.5

    def __post_init__(self) -> None:
        if self.source not in SOURCES:
            raise ValueError(f"Unknown source: {self.source}")
        if not math.isfinite(self.goal) or self.goal <= 0:
            raise ValueError("goal must be positive")
        if self.window_days < 1:
            raise ValueError("window_days must be >= 1")
        if self.max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        if self.retry_base_delay < 0:
            raise ValueError("retry_base_delay must be >= 0")
        resolve_timezone(self.timezone)

    @property
    def tzinfo(self) -> tzinfo:
        return resolve_timezone(self.timezone)


def resolve_timezone(name: str) -> tzinfo:
    """Resolve an IANA zone name with dateutil; empty means local time.

    Raises:
        ValueError: If the zone is unknown.
    """
    if not name:
        return tz.tzlocal()
    zone = tz.gettz(name)
    if zone is None:
        raise ValueError(f"Unknown timezone: {name}")
    return zone


def build_parser(description: str) -> argparse.ArgumentParser:
    """Create the argument parser shared by the CLI and the app.

    Args:
        description: Parser description shown in ``--help``.

    Returns:
        Configured parser.
    """
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "--source",
        choices=SOURCES,
        default="google-fit",
        help="Tipo de exportacion (default: google-fit).",
    )
    parser.add_argument(
        "--root",
        default=str(DEFAULT_ROOT),
        help="Directorio con los datos (default: ~/proyectos/salud/fit/Takeout/Fit).",
    )
    parser.add_argument(
        "--goal",
        type=float,
        default=10000.0,
        help="Meta diaria de pasos (default: 10000).",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=30,
        help="Ventana de dias hacia atras (default: 30).",
    )
    parser.add_argument(
        "--timezone",
        default="",
        help="Zona horaria IANA (default: zona local).",
    )
    parser.add_argument(
        "--retries",
        type=int,
        default=3,
        help="Intentos por consulta (default: 3).",
    )
    parser.add_argument(
        "--xlsx",
        default=None,
        help="Exportar el tablero a este archivo Excel.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Logging en nivel DEBUG.",
    )
    return parser


def config_from_namespace(ns: argparse.Namespace) -> DashboardConfig:
    """Build a config from parsed arguments.

    Raises:
        ValueError: If any value is out of range.
    """
    return DashboardConfig(
        source=ns.source,
        root=Path(ns.root).expanduser(),
        goal=ns.goal,
        window_days=ns.days,
        timezone=ns.timezone,
        max_retries=ns.retries,
    )


def config_from_args(
    argv: Sequence[str] | None = None,
    description: str = "Tablero de pasos diarios.",
) -> DashboardConfig:
    """Parse ``argv`` into a config, exiting through argparse on bad values."""
    parser = build_parser(description)
    ns = parser.parse_args(argv)
    try:
        return config_from_namespace(ns)
    except ValueError as exc:
        parser.error(str(exc))


def make_source(config: DashboardConfig) -> DataSource:
    """Build the data source selected by ``config.source``."""
    if config.source == "csv":
        return StepsCsvSource(StepsCsvPaths(root=config.root), zone=config.tzinfo)
    return GoogleFitSource(GoogleFitPaths(root=config.root))
