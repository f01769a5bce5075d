"""Reporte de texto del tablero: tarjetas y graficos en consola."""

from __future__ import annotations

from datetime import date

from step_dashboard.model import DashboardView

_DIA_SEMANA: tuple[str, ...] = ("lun", "mar", "mie", "jue", "vie", "sab", "dom")


def clamp_ratio(ratio: float) -> float:
    """Clamp a progress ratio to [0, 1] for display."""
    return min(max(ratio, 0.0), 1.0)


def format_steps(value: float) -> str:
    """Format a step count as a thousands-separated integer."""
    return f"{int(value):,}"


def weekday_label(day: date) -> str:
    return _DIA_SEMANA[day.weekday()]


def progress_bar(ratio: float, width: int = 30) -> str:
    """Render ``[#####.....]`` filled to the clamped ratio."""
    filled = round(clamp_ratio(ratio) * width)
    return "[" + "#" * filled + "." * (width - filled) + "]"


def hbar(value: float, peak: float, width: int = 30) -> str:
    """Horizontal bar scaled to ``peak``; empty when ``peak`` is not positive."""
    if peak <= 0:
        return ""
    return "█" * round(min(value / peak, 1.0) * width)


def weekly_bars(view: DashboardView, width: int = 30) -> list[str]:
    """Two bars: last week vs this week."""
    weekly = view.weekly
    peak = max(weekly.last_week, weekly.this_week)
    return [
        f"Last Week  {hbar(weekly.last_week, peak, width):<{width}} "
        f"{format_steps(weekly.last_week)}",
        f"This Week  {hbar(weekly.this_week, peak, width):<{width}} "
        f"{format_steps(weekly.this_week)}",
    ]


def daily_table(view: DashboardView, width: int = 30) -> list[str]:
    """One line per day: weekday, date, steps bar and running total."""
    if not view.distribution:
        return ["  (sin datos)"]
    peak = max(s.steps for s in view.distribution)
    lines = []
    for sample, (_, total) in zip(view.distribution, view.cumulative):
        lines.append(
            f"  {weekday_label(sample.day)} {sample.day.strftime('%d/%m/%Y')} "
            f"{format_steps(sample.steps):>8} {hbar(sample.steps, peak, width):<{width}} "
            f"{format_steps(total):>10}"
        )
    return lines


def card_lines(view: DashboardView) -> list[str]:
    """Today and progress cards.

    The progress bar is clamped; the printed percentage is not, so days over
    the goal still show how far over they are.
    """
    return [
        f"Today: {format_steps(view.today_steps)} steps",
        "",
        "Progress to Goal",
        f"{progress_bar(view.progress_ratio)} {view.progress_ratio:.0%}",
        f"{format_steps(view.progress)} / {format_steps(view.goal)} steps",
    ]


def chart_lines(view: DashboardView) -> list[str]:
    """Monthly overview, weekly comparison and daily/cumulative charts."""
    return [
        "Monthly Overview",
        f"{format_steps(view.monthly_average)} steps/day",
        "",
        "Weekly Comparison",
        *weekly_bars(view),
        "",
        "Daily Step Distribution / Cumulative Steps",
        *daily_table(view),
    ]


def format_report(view: DashboardView) -> list[str]:
    """Render every dashboard section as printable lines."""
    return ["Dashboard", "=" * 60, *card_lines(view), "", *chart_lines(view)]
