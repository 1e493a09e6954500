"""Page and settings state for the widget.

``WidgetState`` is an immutable snapshot. ``PageStateMachine`` turns one
snapshot into the next; it never raises and never touches the store, so the
caller decides when to persist.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from enum import IntEnum

from worktile.config import DEFAULT_SETTINGS_TIMEOUT_SECONDS, DEFAULT_TRANSPARENCY_STEP, PagePolicy
from worktile.utils import clamp


class Page(IntEnum):
    HOME = 0
    HISTORY = 1
    SUMMARY = 2
    SALARY = 3


PAGE_TITLES: dict[Page, str] = {
    Page.HOME: "Home Screen",
    Page.HISTORY: "History",
    Page.SUMMARY: "Summary",
    Page.SALARY: "Salary",
}
SETTINGS_TITLE = "Settings"

THEMES: tuple[str, ...] = ("teal", "blue", "green", "purple", "orange")
BACKGROUND_COLORS: tuple[str, ...] = ("white", "black", "blue", "green")

DEFAULT_THEME = THEMES[0]
DEFAULT_BACKGROUND = "white"
DEFAULT_TRANSPARENCY = 100
MIN_TRANSPARENCY = 0
MAX_TRANSPARENCY = 100


@dataclass(frozen=True)
class WidgetState:
    page: Page = Page.HOME
    settings_mode: bool = False
    transparency: int = DEFAULT_TRANSPARENCY
    theme: str = DEFAULT_THEME
    background_color: str = DEFAULT_BACKGROUND
    settings_entered_at: float | None = None

    @property
    def title(self) -> str:
        return SETTINGS_TITLE if self.settings_mode else PAGE_TITLES[self.page]


class PageStateMachine:
    """Transition rules for paging, the settings overlay and cosmetic settings."""

    def __init__(
        self,
        *,
        policy: PagePolicy = PagePolicy.WRAP,
        transparency_step: int = DEFAULT_TRANSPARENCY_STEP,
        settings_timeout_seconds: float = DEFAULT_SETTINGS_TIMEOUT_SECONDS,
        themes: Sequence[str] = THEMES,
        background_colors: Sequence[str] = BACKGROUND_COLORS,
    ) -> None:
        self.policy = policy
        self.transparency_step = transparency_step
        self.settings_timeout_seconds = settings_timeout_seconds
        self.themes = tuple(themes) or THEMES
        self.background_colors = tuple(background_colors) or BACKGROUND_COLORS
        self._pages = tuple(Page)

    # ------------------------------------------------------------------
    # Paging
    # ------------------------------------------------------------------

    def _step_page(self, state: WidgetState, offset: int) -> WidgetState:
        if state.settings_mode:
            return state
        count = len(self._pages)
        index = int(state.page) + offset
        if self.policy is PagePolicy.WRAP:
            index %= count
        else:
            index = clamp(index, 0, count - 1)
        if index == int(state.page):
            return state
        return replace(state, page=Page(index))

    def previous(self, state: WidgetState) -> WidgetState:
        return self._step_page(state, -1)

    def next(self, state: WidgetState) -> WidgetState:
        return self._step_page(state, 1)

    # ------------------------------------------------------------------
    # Settings overlay
    # ------------------------------------------------------------------

    def enter_settings(self, state: WidgetState, now: float) -> WidgetState:
        return replace(state, settings_mode=True, settings_entered_at=now)

    def exit_settings(self, state: WidgetState) -> WidgetState:
        if not state.settings_mode:
            return state
        return replace(state, settings_mode=False)

    def toggle_settings(self, state: WidgetState, now: float) -> WidgetState:
        if state.settings_mode:
            return self.exit_settings(state)
        return self.enter_settings(state, now)

    def expire_settings(self, state: WidgetState, now: float) -> WidgetState:
        """Leave settings mode when it has been idle past the timeout."""
        if not state.settings_mode or self.settings_timeout_seconds <= 0:
            return state
        if state.settings_entered_at is None:
            # No timestamp yet: start the clock instead of treating it as stale.
            return replace(state, settings_entered_at=now)
        if now - state.settings_entered_at > self.settings_timeout_seconds:
            return self.exit_settings(state)
        return state

    def _touch(self, state: WidgetState, now: float | None) -> WidgetState:
        if state.settings_mode and now is not None:
            return replace(state, settings_entered_at=now)
        return state

    # ------------------------------------------------------------------
    # Cosmetics
    # ------------------------------------------------------------------

    def change_transparency(self, state: WidgetState, steps: int, now: float | None = None) -> WidgetState:
        value = clamp(state.transparency + steps * self.transparency_step, MIN_TRANSPARENCY, MAX_TRANSPARENCY)
        return self._touch(replace(state, transparency=value), now)

    def set_transparency(self, state: WidgetState, value: int, now: float | None = None) -> WidgetState:
        return self._touch(replace(state, transparency=clamp(value, MIN_TRANSPARENCY, MAX_TRANSPARENCY)), now)

    def change_theme(self, state: WidgetState, direction: int, now: float | None = None) -> WidgetState:
        if direction == 0:
            return state
        count = len(self.themes)
        try:
            index = self.themes.index(state.theme)
        except ValueError:
            # Unknown theme: stepping forward lands on the first, backward on the last.
            index = -1 if direction > 0 else count
        offset = 1 if direction > 0 else -1
        return self._touch(replace(state, theme=self.themes[(index + offset) % count]), now)

    def change_background_color(self, state: WidgetState, color: str, now: float | None = None) -> WidgetState:
        normalized = color.strip().lower()
        if normalized not in self.background_colors:
            return state
        return self._touch(replace(state, background_color=normalized), now)
