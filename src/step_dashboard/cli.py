"""CLI: carga los pasos, imprime el tablero y opcionalmente exporta a Excel."""

from __future__ import annotations

import argparse
import asyncio
import logging
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from step_dashboard.config import (
    DashboardConfig,
    build_parser,
    config_from_namespace,
    make_source,
)
from step_dashboard.excel_writer import ExcelLayout, write_dashboard_xlsx
from step_dashboard.loader import DashboardLoader
from step_dashboard.provider import StepProvider
from step_dashboard.report import format_report

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    parser = build_parser("Tablero de pasos: hoy, meta, promedio mensual y semanas.")
    return parser.parse_args(argv)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def run_load_cycle(config: DashboardConfig) -> DashboardLoader:
    """Run one load cycle against the configured source.

    Returns:
        The loader, holding the final view and the failed queries.
    """
    source = make_source(config)
    source.validate()
    logger.info("Loading %s steps from %s", config.source, config.root)
    loader = DashboardLoader(StepProvider(source, config), goal=config.goal)
    asyncio.run(loader.load(datetime.now(tz=config.tzinfo)))
    return loader


def main(argv: Sequence[str] | None = None) -> int:
    """Run the dashboard CLI.

    Returns:
        Exit code (0 on success, 1 when every query failed).
    """
    ns = parse_args(argv)
    configure_logging(ns.verbose)
    try:
        config = config_from_namespace(ns)
    except ValueError as exc:
        print(f"ERROR: {exc}")
        return 2

    loader = run_load_cycle(config)
    for line in format_report(loader.view):
        print(line)

    for name, exc in loader.failures:
        print(f"WARN: {name} query failed: {exc}")
    if len(loader.failures) == 2:
        return 1

    if ns.xlsx:
        out_path = Path(ns.xlsx).expanduser()
        write_dashboard_xlsx(loader.view, out_path, ExcelLayout())
        print(f"OK: Output: {out_path}")
    return 0
