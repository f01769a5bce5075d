"""Exportacion del tablero de pasos a Excel formateado."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, Side

from step_dashboard.aggregate import series_to_frame
from step_dashboard.model import DashboardView
from step_dashboard.report import weekday_label

_HEADER_MAP: dict[str, str] = {
    "weekday": "Día",
    "date": "Fecha",
    "steps": "Pasos",
    "cumulative": "Pasos\nacumulados",
}

_COLUMN_WIDTHS: dict[str, int] = {
    "Día": 6,
    "Fecha": 12,
    "Pasos": 12,
    "Pasos\nacumulados": 14,
    "Métrica": 26,
    "Valor": 14,
}

_NUMBER_FORMATS: dict[str, str] = {
    "Fecha": "dd/mm/yyyy",
    "Pasos": "#,##0",
    "Pasos\nacumulados": "#,##0",
    "Valor": "#,##0.00",
}


@dataclass(frozen=True)
class ExcelLayout:
    """Sheet names for the dashboard workbook."""

    summary_sheet: str = "Resumen"
    daily_sheet: str = "Diario"


def summary_frame(view: DashboardView) -> pd.DataFrame:
    """One row per dashboard scalar (unclamped progress ratio)."""
    rows = [
        ("Pasos hoy", view.today_steps),
        ("Meta diaria", view.goal),
        ("Progreso", view.progress),
        ("Progreso / meta", view.progress_ratio),
        ("Promedio mensual", view.monthly_average),
        ("Semana pasada", view.weekly.last_week),
        ("Esta semana", view.weekly.this_week),
    ]
    return pd.DataFrame(rows, columns=["Métrica", "Valor"])


def daily_frame(view: DashboardView) -> pd.DataFrame:
    """Daily distribution with weekday and running total."""
    df = series_to_frame(view.distribution)
    weekdays = [weekday_label(d) for d in df["date"]]
    df.insert(0, "weekday", weekdays)
    if not df.empty:
        df["date"] = pd.to_datetime(df["date"])
    return df.rename(columns=_HEADER_MAP)


def write_dashboard_xlsx(
    view: DashboardView, out_path: Path, layout: ExcelLayout
) -> None:
    """Write the dashboard as a formatted workbook.

    Args:
        view: Dashboard values to export.
        out_path: Output path for the XLSX file.
        layout: Sheet names.
    """
    out_path.parent.mkdir(parents=True, exist_ok=True)

    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        summary_frame(view).to_excel(
            writer, index=False, sheet_name=layout.summary_sheet
        )
        daily_frame(view).to_excel(writer, index=False, sheet_name=layout.daily_sheet)
        _format_sheet(writer.book[layout.summary_sheet])
        _format_sheet(writer.book[layout.daily_sheet])


def _style_header_row(ws: Any) -> None:
    """Aplica fuente negrita, alineación y borde a la fila de cabecera."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    header_font = Font(bold=True)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for cell in ws[1]:
        cell.font = header_font
        cell.alignment = center
        cell.border = border


def _style_body_rows(ws: Any) -> None:
    """Aplica alineación y borde a las filas de datos."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    center = Alignment(horizontal="center", vertical="center")
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            cell.alignment = center
            cell.border = border


def _get_header_col_index(ws: Any) -> dict[str, int]:
    """Devuelve mapa nombre de cabecera -> índice de columna (1-based)."""
    headers = [str(cell.value) for cell in ws[1]]
    return {name: idx + 1 for idx, name in enumerate(headers)}


def _format_sheet(ws: Any) -> None:
    """Apply borders, widths and number formats to a worksheet.

    Args:
        ws: openpyxl worksheet.
    """
    _style_header_row(ws)
    _style_body_rows(ws)
    col_index = _get_header_col_index(ws)
    for header, width in _COLUMN_WIDTHS.items():
        idx = col_index.get(header)
        if idx is not None:
            letter = ws.cell(row=1, column=idx).column_letter
            ws.column_dimensions[letter].width = width
    for row in ws.iter_rows(min_row=2):
        for header, fmt in _NUMBER_FORMATS.items():
            idx = col_index.get(header)
            if idx is not None:
                row[idx - 1].number_format = fmt
