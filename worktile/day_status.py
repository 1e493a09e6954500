"""Decode the compact day-status feed used by the mini calendar.

The main application publishes one string per month, for example::

    1:completed:09:15,2:inprogress,3:offday,4:

Each comma-separated entry is ``day:status[:time]``. Decoding never raises:
malformed entries degrade to an empty two-line cell so the calendar grid keeps
its shape.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

CALENDAR_CAPACITY = 42

DARK_BACKGROUNDS = frozenset({"black", "blue", "green"})


class DayStatus(str, Enum):
    COMPLETED = "completed"
    IN_PROGRESS = "inprogress"
    OFF_DAY = "offday"
    EMPTY = "empty"


# status -> (second line when no time is given, glyph)
_STATUS_MARKS: dict[DayStatus, tuple[str, str]] = {
    DayStatus.COMPLETED: ("✓", "✅"),
    DayStatus.IN_PROGRESS: ("○", "🕒"),
    DayStatus.OFF_DAY: ("OFF", "💤"),
}

# status -> (color on dark background, color on light background)
STATUS_COLORS: dict[DayStatus, tuple[str, str]] = {
    DayStatus.COMPLETED: ("#A5D6A7", "#388E3C"),
    DayStatus.IN_PROGRESS: ("#FFD180", "#FFA500"),
    DayStatus.OFF_DAY: ("#90CAF9", "#1976D2"),
    DayStatus.EMPTY: ("#FFFFFF", "#000000"),
}


@dataclass(frozen=True)
class DayStatusEntry:
    """One decoded calendar cell."""

    day_label: str
    status: DayStatus
    detail_time: str | None
    text: str


BLANK_ENTRY = DayStatusEntry(day_label="", status=DayStatus.EMPTY, detail_time=None, text="")


def is_dark_background(background_color: str) -> bool:
    return background_color.strip().lower() in DARK_BACKGROUNDS


def status_color(status: DayStatus, background_color: str) -> str:
    """Pick the text color for a cell given the widget background."""
    dark, light = STATUS_COLORS.get(status, STATUS_COLORS[DayStatus.EMPTY])
    return dark if is_dark_background(background_color) else light


def _parse_status(value: str) -> DayStatus:
    try:
        status = DayStatus(value.strip().lower())
    except ValueError:
        return DayStatus.EMPTY
    return status


def decode_entry(raw: str) -> DayStatusEntry:
    """Decode a single ``day:status[:time]`` entry."""
    parts = raw.split(":")
    if len(parts) < 2:
        return DayStatusEntry(day_label=parts[0], status=DayStatus.EMPTY, detail_time=None, text=f"{parts[0]}\n ")

    day = parts[0]
    # Times carry their own colon ("09:15"), so keep everything after the status.
    time_text = ":".join(parts[2:]) if len(parts) > 2 else ""
    status = _parse_status(parts[1])

    if status is DayStatus.OFF_DAY:
        second_line, glyph = _STATUS_MARKS[status]
    elif status in _STATUS_MARKS:
        fallback, glyph = _STATUS_MARKS[status]
        second_line = time_text or fallback
    else:
        second_line, glyph = " ", ""

    text = f"{day}\n{second_line} {glyph}".rstrip()
    if status is DayStatus.EMPTY:
        # Keep the second line reserved so every cell has the same height.
        text = f"{day}\n "
    return DayStatusEntry(
        day_label=day,
        status=status,
        detail_time=time_text or None,
        text=text,
    )


def decode_entries(entries: Iterable[str], capacity: int = CALENDAR_CAPACITY) -> tuple[DayStatusEntry, ...]:
    """Decode up to ``capacity`` entries and pad the rest with blank cells."""
    cells: list[DayStatusEntry] = []
    for raw in entries:
        if len(cells) >= capacity:
            break
        cells.append(decode_entry(raw))
    cells.extend(BLANK_ENTRY for _ in range(capacity - len(cells)))
    return tuple(cells)


def decode_feed(feed: str | None, capacity: int = CALENDAR_CAPACITY) -> tuple[DayStatusEntry, ...]:
    """Decode a full comma-separated feed into exactly ``capacity`` cells."""
    if not feed:
        return decode_entries((), capacity)
    return decode_entries(feed.split(","), capacity)
