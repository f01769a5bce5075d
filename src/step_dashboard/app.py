"""App Kivy: pantalla del tablero de pasos."""

from __future__ import annotations

import asyncio
import threading
import traceback
from datetime import datetime

from step_dashboard.config import DashboardConfig, make_source
from step_dashboard.loader import DashboardLoader
from step_dashboard.model import DashboardView
from step_dashboard.provider import StepProvider
from step_dashboard.report import chart_lines, format_steps
from step_dashboard.sources.base import DataSource


def run_app(config: DashboardConfig) -> int:
    """Lanza la app Kivy."""
    from kivy.app import App
    from kivy.clock import Clock
    from kivy.core.window import Window
    from kivy.resources import resource_find
    from kivy.uix.boxlayout import BoxLayout
    from kivy.uix.button import Button
    from kivy.uix.label import Label
    from kivy.uix.progressbar import ProgressBar
    from kivy.uix.textinput import TextInput

    class StepDashboardApp(App):
        """Main Kivy app."""

        def __init__(self, **kwargs: object) -> None:
            super().__init__(**kwargs)
            self.loader: DashboardLoader | None = None
            self.today_label: Label | None = None
            self.progress: ProgressBar | None = None
            self.progress_label: Label | None = None
            self.charts: TextInput | None = None
            self.status: Label | None = None
            self._chart_font = resource_find("data/fonts/RobotoMono-Regular.ttf")

        def build(self) -> BoxLayout:
            Window.bind(on_key_down=self._on_key_down)
            self.title = "Dashboard"

            root = BoxLayout(orientation="vertical", spacing=8, padding=10)

            actions = BoxLayout(
                orientation="horizontal",
                spacing=8,
                size_hint_y=None,
                height=40,
            )
            refresh_btn = Button(text="Actualizar")
            exit_btn = Button(text="Salir")
            refresh_btn.bind(on_press=self._start_load)
            exit_btn.bind(on_press=lambda *_args: self.stop())
            actions.add_widget(refresh_btn)
            actions.add_widget(exit_btn)
            root.add_widget(actions)

            self.today_label = Label(
                text="Today: 0 steps",
                font_size="24sp",
                bold=True,
                size_hint_y=None,
                height=48,
            )
            root.add_widget(self.today_label)

            root.add_widget(
                Label(text="Progress to Goal", size_hint_y=None, height=28)
            )
            self.progress = ProgressBar(max=config.goal, value=0, size_hint_y=None)
            self.progress.height = 24
            root.add_widget(self.progress)
            self.progress_label = Label(
                text=f"0 / {format_steps(config.goal)} steps",
                size_hint_y=None,
                height=28,
            )
            root.add_widget(self.progress_label)

            self.charts = TextInput(
                readonly=True,
                text="",
                multiline=True,
                do_wrap=False,
            )
            if self._chart_font:
                self.charts.font_name = self._chart_font
            root.add_widget(self.charts)

            self.status = Label(text="Sin datos", size_hint_y=None, height=30)
            root.add_widget(self.status)

            self._render(DashboardView.empty(config.goal))
            return root

        def on_start(self) -> None:
            self._start_load()

        def on_stop(self) -> None:
            if self.loader is not None:
                self.loader.close()

        def _on_key_down(
            self,
            _window: object,
            keycode: int,
            _scancode: int,
            _text: str,
            _modifiers: list[str],
        ) -> bool:
            # Esc: salir de fullscreen o cerrar app.
            if keycode != 27:
                return False
            if Window.fullscreen:
                Window.fullscreen = False
            else:
                self.stop()
            return True

        def _start_load(self, *_args: object) -> None:
            previous = self.loader
            if previous is not None:
                previous.close()
            source = make_source(config)
            loader = DashboardLoader(
                StepProvider(source, config),
                goal=config.goal,
                on_update=lambda view: self._on_view(loader, view),
                initial=previous.view if previous is not None else None,
            )
            self.loader = loader
            if self.status is not None:
                self.status.text = "Cargando..."
            threading.Thread(
                target=self._run_cycle, args=(source, loader), daemon=True
            ).start()

        def _run_cycle(self, source: DataSource, loader: DashboardLoader) -> None:
            # Corre en un hilo aparte; la UI solo se toca desde Clock.
            try:
                source.validate()
                asyncio.run(loader.load(datetime.now(tz=config.tzinfo)))
            except Exception as exc:
                details = traceback.format_exc()
                Clock.schedule_once(
                    lambda _dt, err=exc: self._show_error(loader, err, details)
                )
                return
            Clock.schedule_once(lambda _dt: self._on_cycle_done(loader))

        def _on_view(self, loader: DashboardLoader, view: DashboardView) -> None:
            # Se vuelve a comprobar en el hilo principal: un refresh pudo
            # reemplazar el loader entre la publicacion y el dibujo.
            def _draw(_dt: float) -> None:
                if is_current(loader, self.loader):
                    self._render(view)

            Clock.schedule_once(_draw)

        def _on_cycle_done(self, loader: DashboardLoader) -> None:
            if not is_current(loader, self.loader) or self.status is None:
                return
            if loader.failures:
                names = ", ".join(name for name, _ in loader.failures)
                self.status.text = f"Error al cargar: {names}"
            else:
                self.status.text = "OK"

        def _render(self, view: DashboardView) -> None:
            if self.today_label is not None:
                self.today_label.text = f"Today: {format_steps(view.today_steps)} steps"
            if self.progress is not None:
                self.progress.value = clamp_progress(view)
            if self.progress_label is not None:
                self.progress_label.text = (
                    f"{format_steps(view.progress)} / {format_steps(view.goal)} steps"
                )
            if self.charts is not None:
                self.charts.text = "\n".join(chart_lines(view))

        def _show_error(
            self, loader: DashboardLoader, exc: Exception, details: str
        ) -> None:
            if not is_current(loader, self.loader):
                return
            error_type = type(exc).__name__
            if self.status is not None:
                self.status.text = f"Error al cargar ({error_type}): {exc}"
            if self.charts is not None:
                self.charts.text = details

    StepDashboardApp().run()
    return 0


def is_current(loader: DashboardLoader, current: DashboardLoader | None) -> bool:
    """True while ``loader`` is the screen's live loader and still open."""
    return loader is current and not loader.closed


def clamp_progress(view: DashboardView) -> float:
    """Progress value for a bar whose maximum is the goal."""
    return min(max(view.progress, 0.0), view.goal)
