"""Build the immutable render instruction for one refresh cycle."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Protocol

from worktile.datetime_utils import format_clock_time, month_header
from worktile.day_status import CALENDAR_CAPACITY, DayStatusEntry, decode_feed, is_dark_background, status_color
from worktile.settings_store import WorkSession
from worktile.sizing import SizingProfile
from worktile.state import Page, WidgetState

BACKGROUND_RGB: dict[str, str] = {
    "white": "FFFFFF",
    "black": "000000",
    "blue": "2196F3",
    "green": "4CAF50",
}

THEME_ACCENTS: dict[str, str] = {
    "teal": "#009688",
    "blue": "#2196F3",
    "green": "#4CAF50",
    "purple": "#9C27B0",
    "orange": "#FF9800",
}
FALLBACK_ACCENT = THEME_ACCENTS["teal"]

DARK_TEXT = "#000000"
LIGHT_TEXT = "#FFFFFF"

DAY_SLOTS: tuple[str, ...] = tuple(f"day_{index}" for index in range(1, CALENDAR_CAPACITY + 1))

HOME_SLOTS = ("clock_in", "clock_out", "clock_button")
SUMMARY_SLOTS = ("remaining_label", "remaining_value", "overtime_label", "overtime_value")
SALARY_SLOTS = (
    "today_earnings_label",
    "today_earnings_value",
    "monthly_earnings_label",
    "monthly_earnings_value",
)
HISTORY_SLOTS = ("calendar", "calendar_header")
SETTINGS_SLOTS = ("settings_panel", "transparency_label")
NAV_SLOTS = ("previous", "next")

# Every slot the host renderer knows about, in paint order.
ALL_SLOTS: tuple[str, ...] = (
    "root",
    "title",
    *HOME_SLOTS,
    "loading",
    *SUMMARY_SLOTS,
    *SALARY_SLOTS,
    *HISTORY_SLOTS,
    *DAY_SLOTS,
    *SETTINGS_SLOTS,
    *NAV_SLOTS,
    "settings",
)

# Slots whose text follows the background-derived text color.
TEXT_SLOTS: tuple[str, ...] = (
    "title",
    "clock_in",
    "clock_out",
    "loading",
    *SUMMARY_SLOTS,
    *SALARY_SLOTS,
    "calendar_header",
    "transparency_label",
)


class RenderSink(Protocol):
    """Host renderer target keyed by slot name."""

    def set_visible(self, slot: str, visible: bool) -> None: ...

    def set_text(self, slot: str, text: str) -> None: ...

    def set_color(self, slot: str, color: str) -> None: ...


@dataclass(frozen=True)
class DayCell:
    slot: str
    text: str
    status: str
    color: str


@dataclass(frozen=True)
class RenderInstruction:
    """Everything the host needs to paint one frame."""

    visible_page: str
    title: str
    settings_mode: bool
    nav_buttons_visible: bool
    visibility: Mapping[str, bool]
    texts: Mapping[str, str]
    colors: Mapping[str, str]
    day_cells: tuple[DayCell, ...]
    theme: str
    accent_color: str
    background_argb: str
    text_color: str
    sizing: SizingProfile

    def as_dict(self) -> dict[str, Any]:
        return {
            "visible_page": self.visible_page,
            "title": self.title,
            "settings_mode": self.settings_mode,
            "nav_buttons_visible": self.nav_buttons_visible,
            "visibility": dict(self.visibility),
            "texts": dict(self.texts),
            "colors": dict(self.colors),
            "day_cells": [asdict(cell) for cell in self.day_cells],
            "theme": self.theme,
            "accent_color": self.accent_color,
            "background_argb": self.background_argb,
            "text_color": self.text_color,
            "sizing": {key: (value.value if key == "tier" else value) for key, value in asdict(self.sizing).items()},
        }


def background_argb(background_color: str, transparency: int) -> str:
    """``#AARRGGBB`` for the widget root; transparency is the opacity percent."""
    alpha = max(0, min(255, transparency * 255 // 100))
    rgb = BACKGROUND_RGB.get(background_color, BACKGROUND_RGB["white"])
    return f"#{alpha:02X}{rgb}"


def text_color_for(background_color: str) -> str:
    return LIGHT_TEXT if is_dark_background(background_color) else DARK_TEXT


def _page_slots(page: Page) -> Iterable[str]:
    if page is Page.HOME:
        return HOME_SLOTS
    if page is Page.HISTORY:
        return (*HISTORY_SLOTS, *DAY_SLOTS)
    if page is Page.SUMMARY:
        return SUMMARY_SLOTS
    return SALARY_SLOTS


def _visibility(state: WidgetState, session: WorkSession) -> dict[str, bool]:
    visible = dict.fromkeys(ALL_SLOTS, False)
    visible["root"] = True
    visible["title"] = True
    visible["settings"] = True
    if state.settings_mode:
        for slot in SETTINGS_SLOTS:
            visible[slot] = True
        return visible
    for slot in (*_page_slots(state.page), *NAV_SLOTS):
        visible[slot] = True
    if state.page is Page.HOME and session.is_loading:
        visible["loading"] = True
    return visible


def _day_cells(entries: Iterable[DayStatusEntry], background_color: str) -> tuple[DayCell, ...]:
    return tuple(
        DayCell(
            slot=slot,
            text=entry.text,
            status=entry.status.value,
            color=status_color(entry.status, background_color),
        )
        for slot, entry in zip(DAY_SLOTS, entries, strict=False)
    )


def build_instruction(
    state: WidgetState,
    session: WorkSession,
    sizing: SizingProfile,
    today: date,
) -> RenderInstruction:
    """Combine state, work-session data and sizing into one frame description."""
    text_color = text_color_for(state.background_color)
    visibility = _visibility(state, session)

    texts: dict[str, str] = {
        "title": state.title,
        "clock_in": f"Clock In: {format_clock_time(session.clock_in)}",
        "clock_out": f"Clock Out: {format_clock_time(session.clock_out)}",
        "clock_button": "Clock Out" if session.is_clocked_in else "Clock In",
        "loading": "Loading…",
        "remaining_label": "Remaining",
        "remaining_value": session.remaining_text,
        "overtime_label": "Overtime",
        "overtime_value": session.overtime_text,
        "today_earnings_label": "Today",
        "today_earnings_value": session.today_earnings,
        "monthly_earnings_label": "This Month",
        "monthly_earnings_value": session.monthly_earnings,
        "calendar_header": month_header(today),
        "transparency_label": f"Transparency: {state.transparency}%",
    }

    day_cells: tuple[DayCell, ...] = ()
    if visibility["calendar"]:
        day_cells = _day_cells(decode_feed(session.calendar_data), state.background_color)
        for cell in day_cells:
            texts[cell.slot] = cell.text

    colors: dict[str, str] = {slot: text_color for slot in TEXT_SLOTS}
    colors["root"] = background_argb(state.background_color, state.transparency)
    colors["clock_button"] = THEME_ACCENTS.get(state.theme, FALLBACK_ACCENT)
    for cell in day_cells:
        colors[cell.slot] = cell.color

    return RenderInstruction(
        visible_page="settings" if state.settings_mode else state.page.name.lower(),
        title=state.title,
        settings_mode=state.settings_mode,
        nav_buttons_visible=not state.settings_mode,
        visibility=visibility,
        texts=texts,
        colors=colors,
        day_cells=day_cells,
        theme=state.theme,
        accent_color=THEME_ACCENTS.get(state.theme, FALLBACK_ACCENT),
        background_argb=colors["root"],
        text_color=text_color,
        sizing=sizing,
    )


def apply_instruction(instruction: RenderInstruction, sink: RenderSink) -> None:
    """Push one instruction into a render sink, slot by slot."""
    for slot in ALL_SLOTS:
        visible = instruction.visibility.get(slot, False)
        sink.set_visible(slot, visible)
        if not visible:
            continue
        text = instruction.texts.get(slot)
        if text is not None:
            sink.set_text(slot, text)
        color = instruction.colors.get(slot)
        if color is not None:
            sink.set_color(slot, color)
