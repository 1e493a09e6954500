"""Tests for render instruction building (worktile/render.py)."""

from __future__ import annotations

import json
from datetime import date
from unittest.mock import Mock, call

import pytest

from worktile.render import (
    ALL_SLOTS,
    DAY_SLOTS,
    HISTORY_SLOTS,
    HOME_SLOTS,
    NAV_SLOTS,
    SALARY_SLOTS,
    SUMMARY_SLOTS,
    apply_instruction,
    background_argb,
    build_instruction,
    text_color_for,
)
from worktile.settings_store import MemoryStore, WorkSession
from worktile.sizing import SIZING_PROFILES, SizeTier
from worktile.state import Page, WidgetState

TODAY = date(2026, 10, 19)
PROFILE = SIZING_PROFILES[SizeTier.LARGE]


@pytest.fixture
def session(session_store):
    return WorkSession.from_store(session_store)


def _visible(instruction):
    return {slot for slot, shown in instruction.visibility.items() if shown}


class TestVisibility:
    @pytest.mark.parametrize(
        ("page", "slots"),
        [
            (Page.HOME, HOME_SLOTS),
            (Page.HISTORY, (*HISTORY_SLOTS, *DAY_SLOTS)),
            (Page.SUMMARY, SUMMARY_SLOTS),
            (Page.SALARY, SALARY_SLOTS),
        ],
    )
    def test_exactly_one_page_visible(self, session, page, slots):
        instruction = build_instruction(WidgetState(page=page), session, PROFILE, TODAY)
        assert _visible(instruction) == {"root", "title", "settings", *slots, *NAV_SLOTS}
        assert instruction.visible_page == page.name.lower()
        assert instruction.nav_buttons_visible is True

    def test_settings_mode_hides_pages_and_nav(self, session):
        state = WidgetState(page=Page.SUMMARY, settings_mode=True)
        instruction = build_instruction(state, session, PROFILE, TODAY)
        assert _visible(instruction) == {"root", "title", "settings", "settings_panel", "transparency_label"}
        assert instruction.visible_page == "settings"
        assert instruction.title == "Settings"
        assert instruction.nav_buttons_visible is False

    def test_loading_shown_on_home_only(self):
        session = WorkSession.from_store(MemoryStore({"_isLoading": True}))
        home = build_instruction(WidgetState(), session, PROFILE, TODAY)
        summary = build_instruction(WidgetState(page=Page.SUMMARY), session, PROFILE, TODAY)
        assert home.visibility["loading"] is True
        assert summary.visibility["loading"] is False


class TestTexts:
    def test_home_texts(self, session):
        instruction = build_instruction(WidgetState(), session, PROFILE, TODAY)
        assert instruction.title == "Home Screen"
        assert instruction.texts["clock_in"] == "Clock In: 08:30"
        assert instruction.texts["clock_out"] == "Clock Out: --:--"
        assert instruction.texts["clock_button"] == "Clock In"

    def test_clock_button_when_clocked_in(self):
        session = WorkSession.from_store(MemoryStore({"isClockedIn": True}))
        instruction = build_instruction(WidgetState(), session, PROFILE, TODAY)
        assert instruction.texts["clock_button"] == "Clock Out"

    def test_summary_and_salary_values(self, session):
        instruction = build_instruction(WidgetState(page=Page.SALARY), session, PROFILE, TODAY)
        assert instruction.texts["remaining_value"] == "3h 15m"
        assert instruction.texts["today_earnings_value"] == "$96.00"
        assert instruction.texts["monthly_earnings_value"] == "$1,420.50"

    def test_transparency_label(self, session):
        instruction = build_instruction(WidgetState(transparency=40), session, PROFILE, TODAY)
        assert instruction.texts["transparency_label"] == "Transparency: 40%"

    def test_calendar_header(self, session):
        instruction = build_instruction(WidgetState(page=Page.HISTORY), session, PROFILE, TODAY)
        assert instruction.texts["calendar_header"] == "Oct 2026"


class TestCalendarCells:
    def test_cells_decoded_on_history_page(self, session):
        instruction = build_instruction(WidgetState(page=Page.HISTORY), session, PROFILE, TODAY)
        assert len(instruction.day_cells) == len(DAY_SLOTS)
        first = instruction.day_cells[0]
        assert first.slot == "day_1"
        assert first.text == "1\n09:15 ✅"
        assert first.color == "#388E3C"
        assert instruction.texts["day_3"] == "3\nOFF 💤"

    def test_cells_use_dark_palette_on_dark_background(self, session):
        state = WidgetState(page=Page.HISTORY, background_color="black")
        instruction = build_instruction(state, session, PROFILE, TODAY)
        assert instruction.colors["day_1"] == "#A5D6A7"
        assert instruction.colors["day_2"] == "#FFD180"
        assert instruction.colors["day_3"] == "#90CAF9"

    def test_cells_skipped_when_calendar_hidden(self, session):
        instruction = build_instruction(WidgetState(), session, PROFILE, TODAY)
        assert instruction.day_cells == ()
        assert "day_1" not in instruction.texts


class TestColors:
    @pytest.mark.parametrize(
        ("background", "transparency", "expected"),
        [
            ("white", 100, "#FFFFFFFF"),
            ("black", 0, "#00000000"),
            ("blue", 50, "#7F2196F3"),
            ("green", 80, "#CC4CAF50"),
            ("unknown", 100, "#FFFFFFFF"),
        ],
    )
    def test_background_argb(self, background, transparency, expected):
        assert background_argb(background, transparency) == expected

    def test_text_color(self):
        assert text_color_for("white") == "#000000"
        assert text_color_for("blue") == "#FFFFFF"

    def test_theme_accent_on_clock_button(self, session):
        instruction = build_instruction(WidgetState(theme="purple"), session, PROFILE, TODAY)
        assert instruction.accent_color == "#9C27B0"
        assert instruction.colors["clock_button"] == "#9C27B0"

    def test_unknown_theme_uses_fallback_accent(self, session):
        instruction = build_instruction(WidgetState(theme="neon"), session, PROFILE, TODAY)
        assert instruction.accent_color == "#009688"


def test_as_dict_is_json_serialisable(session):
    instruction = build_instruction(WidgetState(page=Page.HISTORY), session, PROFILE, TODAY)
    payload = json.loads(json.dumps(instruction.as_dict()))
    assert payload["visible_page"] == "history"
    assert payload["sizing"]["tier"] == "large"
    assert payload["day_cells"][0]["status"] == "completed"


def test_apply_instruction_drives_sink(session):
    instruction = build_instruction(WidgetState(), session, PROFILE, TODAY)
    sink = Mock()
    apply_instruction(instruction, sink)

    assert sink.set_visible.call_count == len(ALL_SLOTS)
    sink.set_visible.assert_any_call("clock_button", True)
    sink.set_visible.assert_any_call("calendar", False)
    sink.set_text.assert_any_call("clock_in", "Clock In: 08:30")
    assert call("calendar_header", "Oct 2026") not in sink.set_text.call_args_list
    sink.set_color.assert_any_call("root", "#FFFFFFFF")
