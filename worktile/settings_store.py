"""Key-value stores behind the widget.

Two stores feed the widget:

- the settings store, holding the widget's own scalars (page, settings mode,
  transparency, theme, background color);
- the work-session store, written by the main application and read-only here
  apart from the single ``requestedAction`` key.

Both are accessed through the small ``KeyValueStore`` protocol so callers pass
a store handle in and tests substitute ``MemoryStore``. Reads and writes never
raise: failures are logged and treated as "absent" or as a no-op.
"""

from __future__ import annotations

import fcntl
import json
import logging
import shutil
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from worktile.state import (
    BACKGROUND_COLORS,
    DEFAULT_BACKGROUND,
    DEFAULT_THEME,
    DEFAULT_TRANSPARENCY,
    Page,
    WidgetState,
)
from worktile.utils import clamp, coerce_bool, coerce_float, coerce_int, coerce_str

LOGGER = logging.getLogger(__name__)

Scalar = str | int | float | bool

LOCK_FILE_SUFFIX = ".lock"

# Settings keys shared by every widget instance unless a namespace is given.
KEY_CURRENT_TAB = "current_tab"
KEY_SETTINGS_MODE = "settings_mode"
KEY_TRANSPARENCY = "transparency"
KEY_THEME = "theme"
KEY_BACKGROUND_COLOR = "backgroundColor"
KEY_LAST_SETTINGS_TIME = "last_settings_time"

# Work-session keys owned by the main application.
KEY_REQUESTED_ACTION = "requestedAction"


class KeyValueStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def put(self, key: str, value: Scalar) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """Process-local store; also the test double for the file store."""

    def __init__(self, initial: Mapping[str, Scalar] | None = None) -> None:
        self._data: dict[str, Scalar] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(key, default)

    def put(self, key: str, value: Scalar) -> None:
        with self._lock:
            self._data[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def as_dict(self) -> dict[str, Scalar]:
        with self._lock:
            return dict(self._data)


class JsonFileStore:
    """Flat JSON object on disk, re-read on every access.

    Writes take an ``fcntl`` lock on a sidecar lock file so the widget and the
    main application do not interleave partial writes. The last writer wins.
    """

    def __init__(self, path: Path, logger: logging.Logger | None = None) -> None:
        self._path = path
        self._logger = logger or LOGGER
        self._write_lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, Any]:
        try:
            content = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except UnicodeDecodeError as exc:
            self._logger.warning("[settings_store] Ignoring corrupt store '%s': %s", self._path, exc)
            return {}
        except OSError as exc:
            self._logger.error("[settings_store] Failed to read '%s': %s", self._path, exc)
            return {}
        if not content.strip():
            return {}
        try:
            data = json.loads(content)
        except ValueError as exc:
            self._logger.warning("[settings_store] Ignoring corrupt store '%s': %s", self._path, exc)
            return {}
        if not isinstance(data, dict):
            self._logger.warning("[settings_store] Store '%s' is not a JSON object, ignoring", self._path)
            return {}
        return data

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def put(self, key: str, value: Scalar) -> None:
        self._mutate(key, value, remove=False)

    def remove(self, key: str) -> None:
        self._mutate(key, None, remove=True)

    def _mutate(self, key: str, value: Scalar | None, *, remove: bool) -> None:
        with self._write_lock:
            lock_fd = None
            try:
                try:
                    self._path.parent.mkdir(parents=True, exist_ok=True)
                    lock_path = Path(str(self._path) + LOCK_FILE_SUFFIX)
                    lock_fd = open(lock_path, "w")
                    fcntl.flock(lock_fd.fileno(), fcntl.LOCK_EX)
                except OSError as exc:
                    self._logger.warning("[settings_store] Could not acquire store lock: %s", exc)

                data = self._read()
                if remove:
                    if key not in data:
                        return
                    data.pop(key)
                else:
                    data[key] = value

                if self._path.exists():
                    backup_path = Path(str(self._path) + ".backup")
                    try:
                        shutil.copy2(self._path, backup_path)
                    except OSError as exc:
                        self._logger.warning("[settings_store] Failed to create store backup: %s", exc)

                tmp_path = Path(str(self._path) + ".tmp")
                try:
                    tmp_path.write_text(json.dumps(data, sort_keys=True, indent=2), encoding="utf-8")
                    tmp_path.replace(self._path)
                except OSError as exc:
                    self._logger.error("[settings_store] Failed to write '%s': %s", self._path, exc)
            finally:
                if lock_fd is not None:
                    try:
                        fcntl.flock(lock_fd.fileno(), fcntl.LOCK_UN)
                        lock_fd.close()
                    except OSError:
                        pass


def _safe_get(store: KeyValueStore, key: str, logger: logging.Logger) -> Any:
    try:
        return store.get(key)
    except Exception as exc:
        logger.error("[settings_store] Failed to read key '%s': %s", key, exc)
        return None


def _safe_put(store: KeyValueStore, key: str, value: Scalar, logger: logging.Logger) -> bool:
    try:
        store.put(key, value)
    except Exception as exc:
        logger.error("[settings_store] Failed to write key '%s': %s", key, exc)
        return False
    return True


class WidgetSettings:
    """Typed view of the widget's settings keys with per-key defaults.

    By default every widget instance reads and writes the same global keys, so
    two placed widgets always show the same page. Passing ``namespace`` prefixes
    every key and gives an instance its own state.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        namespace: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.namespace = namespace
        self.logger = logger or LOGGER

    def key(self, name: str) -> str:
        return f"{self.namespace}.{name}" if self.namespace else name

    def load(self) -> WidgetState:
        """Read a full state snapshot, substituting defaults for absent or bad values."""
        raw_page = _safe_get(self.store, self.key(KEY_CURRENT_TAB), self.logger)
        try:
            page = Page(coerce_int(raw_page, int(Page.HOME)))
        except ValueError:
            self.logger.debug("[settings_store] Page %r out of range, using home page", raw_page)
            page = Page.HOME

        raw_transparency = _safe_get(self.store, self.key(KEY_TRANSPARENCY), self.logger)
        transparency = clamp(coerce_int(raw_transparency, DEFAULT_TRANSPARENCY), 0, 100)

        background = coerce_str(
            _safe_get(self.store, self.key(KEY_BACKGROUND_COLOR), self.logger),
            DEFAULT_BACKGROUND,
        ).lower()
        if background not in BACKGROUND_COLORS:
            background = DEFAULT_BACKGROUND

        return WidgetState(
            page=page,
            settings_mode=coerce_bool(_safe_get(self.store, self.key(KEY_SETTINGS_MODE), self.logger), False),
            transparency=transparency,
            theme=coerce_str(_safe_get(self.store, self.key(KEY_THEME), self.logger), DEFAULT_THEME),
            background_color=background,
            settings_entered_at=coerce_float(
                _safe_get(self.store, self.key(KEY_LAST_SETTINGS_TIME), self.logger),
                None,
            ),
        )

    def save(self, previous: WidgetState, current: WidgetState) -> list[str]:
        """Persist the fields that changed between two snapshots.

        Returns the keys that were written successfully.
        """
        changes: list[tuple[str, Scalar]] = []
        if current.page != previous.page:
            changes.append((KEY_CURRENT_TAB, int(current.page)))
        if current.settings_mode != previous.settings_mode:
            changes.append((KEY_SETTINGS_MODE, current.settings_mode))
        if current.transparency != previous.transparency:
            changes.append((KEY_TRANSPARENCY, current.transparency))
        if current.theme != previous.theme:
            changes.append((KEY_THEME, current.theme))
        if current.background_color != previous.background_color:
            changes.append((KEY_BACKGROUND_COLOR, current.background_color))
        if current.settings_entered_at != previous.settings_entered_at and current.settings_entered_at is not None:
            changes.append((KEY_LAST_SETTINGS_TIME, current.settings_entered_at))

        written: list[str] = []
        for name, value in changes:
            key = self.key(name)
            if _safe_put(self.store, key, value, self.logger):
                written.append(key)
        if written:
            self.logger.debug("[settings_store] Persisted %s", ", ".join(written))
        return written


@dataclass(frozen=True)
class WorkSession:
    """Read-only snapshot of the main application's work-session values."""

    clock_in: str | None
    clock_out: str | None
    duration: str
    overtime: str
    monthly_hours: str
    monthly_overtime: str
    work_days: str
    remaining_text: str
    overtime_text: str
    today_earnings: str
    monthly_earnings: str
    calendar_data: str
    is_clocked_in: bool
    is_loading: bool

    @staticmethod
    def from_store(store: KeyValueStore, logger: logging.Logger | None = None) -> WorkSession:
        log = logger or LOGGER

        def _text(key: str, default: str) -> str:
            value = _safe_get(store, key, log)
            if value is None or isinstance(value, bool):
                return default
            return str(value)

        def _optional(key: str) -> str | None:
            value = _safe_get(store, key, log)
            if value is None or isinstance(value, bool):
                return None
            text = str(value).strip()
            return text or None

        return WorkSession(
            clock_in=_optional("clockIn"),
            clock_out=_optional("clockOut"),
            duration=_text("duration", ""),
            overtime=_text("overtime", ""),
            monthly_hours=_text("monthlyHours", "0"),
            monthly_overtime=_text("monthlyOvertime", "0"),
            work_days=_text("workDays", "0"),
            remaining_text=_text("_remainingText", "--h --m"),
            overtime_text=_text("_overtimeText", "--h --m"),
            today_earnings=_text("_todayEarnings", "$0.00"),
            monthly_earnings=_text("_monthlyEarnings", "$0.00"),
            calendar_data=_text("_calendarData", ""),
            is_clocked_in=coerce_bool(_safe_get(store, "isClockedIn", log), False),
            is_loading=coerce_bool(_safe_get(store, "_isLoading", log), False),
        )
