"""Punto de entrada de la app Kivy."""

from __future__ import annotations

from step_dashboard.app import run_app
from step_dashboard.config import config_from_args


def main() -> int:
    """Run app entrypoint."""
    config = config_from_args(description="Tablero de pasos (Kivy).")
    try:
        return run_app(config)
    except ImportError as exc:
        print(f"No se pudo iniciar Kivy: {exc}")
        print("Instala dependencias de GUI: pip install kivy")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
