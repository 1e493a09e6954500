"""Widget tap actions and their dispatch.

Every tap is one member of the closed ``WidgetAction`` enum. Wire text that
does not name a member is rejected by ``parse_tap`` at the boundary, so
``apply_tap`` only ever sees known actions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from worktile.settings_store import KEY_REQUESTED_ACTION, KeyValueStore, WorkSession
from worktile.state import PageStateMachine, WidgetState
from worktile.utils import parse_int

LOGGER = logging.getLogger(__name__)


class WidgetAction(str, Enum):
    PREVIOUS = "previous"
    NEXT = "next"
    TOGGLE_SETTINGS = "toggle_settings"
    ENTER_SETTINGS = "enter_settings"
    EXIT_SETTINGS = "exit_settings"
    TRANSPARENCY_UP = "transparency_up"
    TRANSPARENCY_DOWN = "transparency_down"
    SET_TRANSPARENCY = "set_transparency"
    THEME_NEXT = "theme_next"
    THEME_PREVIOUS = "theme_previous"
    SET_BACKGROUND = "set_background"
    CLOCK_IN_OUT = "clock_in_out"


class PendingAction(str, Enum):
    CLOCK_IN = "clock_in"
    CLOCK_OUT = "clock_out"


# Actions that need a value after the colon on the wire.
VALUE_ACTIONS = frozenset({WidgetAction.SET_TRANSPARENCY, WidgetAction.SET_BACKGROUND})


@dataclass(frozen=True)
class Tap:
    action: WidgetAction
    value: str | None = None


class HostSignal(Protocol):
    """Wakes the main application so it can consume the pending action."""

    def request(self, action: PendingAction) -> None: ...


def parse_tap(text: str) -> Tap | None:
    """Parse ``name`` or ``name:value`` wire text into a ``Tap``."""
    name, _, value = text.strip().partition(":")
    try:
        action = WidgetAction(name.strip().lower())
    except ValueError:
        return None
    value = value.strip()
    if action in VALUE_ACTIONS:
        if not value:
            return None
        return Tap(action, value)
    return Tap(action)


def apply_tap(machine: PageStateMachine, state: WidgetState, tap: Tap, now: float) -> WidgetState:
    """Single transition function for every non-clock action."""
    action = tap.action
    if action is WidgetAction.PREVIOUS:
        return machine.previous(state)
    if action is WidgetAction.NEXT:
        return machine.next(state)
    if action is WidgetAction.TOGGLE_SETTINGS:
        return machine.toggle_settings(state, now)
    if action is WidgetAction.ENTER_SETTINGS:
        return machine.enter_settings(state, now)
    if action is WidgetAction.EXIT_SETTINGS:
        return machine.exit_settings(state)
    if action is WidgetAction.TRANSPARENCY_UP:
        return machine.change_transparency(state, 1, now)
    if action is WidgetAction.TRANSPARENCY_DOWN:
        return machine.change_transparency(state, -1, now)
    if action is WidgetAction.SET_TRANSPARENCY:
        value = parse_int(tap.value, state.transparency)
        return machine.set_transparency(state, value, now)
    if action is WidgetAction.THEME_NEXT:
        return machine.change_theme(state, 1, now)
    if action is WidgetAction.THEME_PREVIOUS:
        return machine.change_theme(state, -1, now)
    if action is WidgetAction.SET_BACKGROUND:
        return machine.change_background_color(state, tap.value or "", now)
    if action is WidgetAction.CLOCK_IN_OUT:
        # Handled by ActionDispatcher; state is unchanged.
        return state
    raise AssertionError(f"unhandled widget action {action!r}")


class ActionDispatcher:
    """Routes taps to state transitions or to the host application."""

    def __init__(
        self,
        machine: PageStateMachine,
        session_store: KeyValueStore,
        host_signal: HostSignal | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.machine = machine
        self.session_store = session_store
        self.host_signal = host_signal
        self.logger = logger or LOGGER

    def dispatch(self, state: WidgetState, tap: Tap, now: float) -> WidgetState:
        if tap.action is WidgetAction.CLOCK_IN_OUT:
            self.request_clock_action(state)
            return state
        new_state = apply_tap(self.machine, state, tap, now)
        if new_state != state:
            self.logger.debug("[actions] %s: %s -> %s", tap.action.value, state, new_state)
        return new_state

    def request_clock_action(self, state: WidgetState) -> PendingAction | None:
        """Write the pending clock action and wake the host application."""
        if state.settings_mode:
            self.logger.debug("[actions] Ignoring clock action while in settings mode")
            return None
        session = WorkSession.from_store(self.session_store, logger=self.logger)
        pending = PendingAction.CLOCK_OUT if session.is_clocked_in else PendingAction.CLOCK_IN
        try:
            self.session_store.put(KEY_REQUESTED_ACTION, pending.value)
        except Exception as exc:
            self.logger.error("[actions] Failed to store pending action '%s': %s", pending.value, exc)
            return None
        if self.host_signal is not None:
            try:
                self.host_signal.request(pending)
            except Exception as exc:
                self.logger.error("[actions] Failed to signal host application: %s", exc)
        self.logger.info("[actions] Requested %s from host application", pending.value)
        return pending
