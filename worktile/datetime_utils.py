"""Shared datetime helpers for the widget."""

from __future__ import annotations

from datetime import date, datetime

PLACEHOLDER_TIME = "--:--"

MONTH_ABBREVIATIONS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def local_now() -> datetime:
    """Get current datetime in local timezone."""
    return datetime.now().astimezone()


def parse_iso_datetime(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp, returning None for anything unparseable."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_clock_time(value: str | None) -> str:
    """Render a stored clock-in/out timestamp as ``HH:MM``.

    Aware timestamps are shown in local time; naive ones are shown as written,
    matching how the main application stores them.
    """
    parsed = parse_iso_datetime(value)
    if parsed is None:
        return PLACEHOLDER_TIME
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.strftime("%H:%M")


def month_header(day: date) -> str:
    """Calendar header such as ``Oct 2026``."""
    return f"{MONTH_ABBREVIATIONS[day.month - 1]} {day.year}"
