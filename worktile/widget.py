"""Widget controller: one read, transition, persist, render cycle per event."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from datetime import date

from worktile.actions import ActionDispatcher, HostSignal, Tap, parse_tap
from worktile.config import WidgetConfig
from worktile.datetime_utils import local_now
from worktile.render import RenderInstruction, build_instruction
from worktile.settings_store import JsonFileStore, KeyValueStore, WidgetSettings, WorkSession
from worktile.sizing import DEFAULT_SIZE_THRESHOLDS, SIZING_PROFILES, measure
from worktile.state import PageStateMachine, WidgetState

LOGGER = logging.getLogger(__name__)


def parse_size_payload(payload: str) -> tuple[int, int, float] | None:
    """Parse ``WIDTHxHEIGHT@DENSITY`` (density optional, default 1.0)."""
    text = payload.strip().lower()
    if not text:
        return None
    dims, _, density_text = text.partition("@")
    width_text, sep, height_text = dims.partition("x")
    if not sep:
        return None
    try:
        width = int(width_text)
        height = int(height_text)
        density = float(density_text) if density_text else 1.0
    except ValueError:
        return None
    if width <= 0 or height <= 0 or density <= 0:
        return None
    return width, height, density


class WidgetController:
    """Composition root tying the stores, state machine and emitter together.

    Callers pass store handles in; nothing here is global. Cycles are
    serialised with a lock because actions may arrive on a network thread.
    """

    def __init__(
        self,
        settings: WidgetSettings,
        session_store: KeyValueStore,
        *,
        machine: PageStateMachine | None = None,
        host_signal: HostSignal | None = None,
        size: tuple[int, int, float] = (360, 360, 2.0),
        size_thresholds: tuple[int, int, int] = DEFAULT_SIZE_THRESHOLDS,
        clock: Callable[[], float] = time.time,
        today: Callable[[], date] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.settings = settings
        self.session_store = session_store
        self.machine = machine or PageStateMachine()
        self.logger = logger or LOGGER
        self.dispatcher = ActionDispatcher(self.machine, session_store, host_signal, logger=self.logger)
        self._size = size
        self._size_thresholds = size_thresholds
        self._clock = clock
        self._today = today or (lambda: local_now().date())
        self._lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        config: WidgetConfig,
        *,
        host_signal: HostSignal | None = None,
        logger: logging.Logger | None = None,
    ) -> WidgetController:
        log = logger or LOGGER
        settings = WidgetSettings(
            JsonFileStore(config.store.settings_path, logger=log),
            namespace=config.store.namespace,
            logger=log,
        )
        display = config.display
        machine = PageStateMachine(
            policy=display.page_policy,
            transparency_step=display.transparency_step,
            settings_timeout_seconds=display.settings_timeout_seconds,
        )
        return cls(
            settings,
            JsonFileStore(config.store.session_path, logger=log),
            machine=machine,
            host_signal=host_signal,
            size=(display.width_px, display.height_px, display.density),
            size_thresholds=display.size_thresholds,
            logger=log,
        )

    @property
    def size(self) -> tuple[int, int, float]:
        return self._size

    def resize(self, width_px: int, height_px: int, density: float) -> None:
        self._size = (width_px, height_px, density)

    def state(self) -> WidgetState:
        return self.settings.load()

    def handle(self, tap: Tap) -> RenderInstruction:
        """Apply one tap, persist the result and render it."""
        with self._lock:
            now = self._clock()
            current = self.settings.load()
            updated = self.dispatcher.dispatch(current, tap, now)
            self.settings.save(current, updated)
            return self._render(updated)

    def handle_text(self, text: str) -> RenderInstruction | None:
        """Parse wire text into a tap and handle it; unknown actions are dropped."""
        tap = parse_tap(text)
        if tap is None:
            self.logger.warning("[widget] Ignoring unknown widget action: %r", text)
            return None
        return self.handle(tap)

    def refresh(self) -> RenderInstruction:
        """Re-render without user input, expiring a stale settings overlay."""
        with self._lock:
            now = self._clock()
            current = self.settings.load()
            updated = self.machine.expire_settings(current, now)
            if updated.settings_mode != current.settings_mode:
                self.logger.info("[widget] Settings mode idle for too long, returning to %s", updated.title)
            self.settings.save(current, updated)
            return self._render(updated)

    def _render(self, state: WidgetState) -> RenderInstruction:
        width_px, height_px, density = self._size
        widget_size = measure(width_px, height_px, density, self._size_thresholds)
        session = WorkSession.from_store(self.session_store, logger=self.logger)
        return build_instruction(state, session, SIZING_PROFILES[widget_size.tier], self._today())
