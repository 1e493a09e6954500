"""Configuration helpers for the worktile widget service."""

from __future__ import annotations

import os
import socket
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from worktile.sizing import DEFAULT_SIZE_THRESHOLDS
from worktile.utils import (
    parse_bool,
    parse_float,
    parse_int,
    sanitize_hostname_for_topic,
    split_csv,
)

DEFAULT_SETTINGS_PATH = Path("/var/lib/worktile/widget-settings.json")
DEFAULT_SESSION_PATH = Path("/var/lib/worktile/work-session.json")
DEFAULT_TRANSPARENCY_STEP = 10
DEFAULT_SETTINGS_TIMEOUT_SECONDS = 30 * 60


class WorktileError(Exception):
    """Raised for configuration problems detected at start-up."""


class PagePolicy(str, Enum):
    """What Previous/Next do at the first and last page."""

    WRAP = "wrap"
    CLAMP = "clamp"


def _strip_or_none(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _parse_page_policy(value: str | None) -> PagePolicy:
    if value is None or not value.strip():
        return PagePolicy.WRAP
    try:
        return PagePolicy(value.strip().lower())
    except ValueError as exc:
        raise WorktileError(f"Unknown page policy '{value}' (expected 'wrap' or 'clamp')") from exc


def _parse_thresholds(value: str | None) -> tuple[int, int, int]:
    tokens = split_csv(value)
    if len(tokens) != 3:
        return DEFAULT_SIZE_THRESHOLDS
    parsed = [parse_int(token, -1) for token in tokens]
    if any(item <= 0 for item in parsed) or parsed != sorted(parsed):
        return DEFAULT_SIZE_THRESHOLDS
    return parsed[0], parsed[1], parsed[2]


@dataclass(frozen=True)
class MqttConfig:
    host: str | None
    port: int
    username: str | None
    password: str | None
    tls_enabled: bool
    cert: str | None
    key: str | None
    ca_cert: str | None
    topic_base: str


@dataclass(frozen=True)
class StoreConfig:
    settings_path: Path
    session_path: Path
    namespace: str | None = None


@dataclass(frozen=True)
class DisplayConfig:
    page_policy: PagePolicy
    transparency_step: int
    settings_timeout_seconds: float
    size_thresholds: tuple[int, int, int]
    width_px: int
    height_px: int
    density: float
    refresh_seconds: float = 60.0


@dataclass(frozen=True)
class WidgetConfig:
    hostname: str
    mqtt: MqttConfig
    store: StoreConfig
    display: DisplayConfig
    log_level: str

    @property
    def action_topic(self) -> str:
        return f"{self.mqtt.topic_base}/action/set"

    @property
    def refresh_topic(self) -> str:
        return f"{self.mqtt.topic_base}/refresh"

    @property
    def render_topic(self) -> str:
        return f"{self.mqtt.topic_base}/render"

    @property
    def requested_action_topic(self) -> str:
        return f"{self.mqtt.topic_base}/requested_action"

    @property
    def availability_topic(self) -> str:
        return f"{self.mqtt.topic_base}/availability"

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> WidgetConfig:
        source = os.environ if env is None else env
        hostname = source.get("WORKTILE_HOSTNAME") or socket.gethostname()

        topic_base = source.get("WORKTILE_TOPIC_BASE") or f"worktile/{sanitize_hostname_for_topic(hostname)}/widget"
        mqtt = MqttConfig(
            host=_strip_or_none(source.get("MQTT_HOST")),
            port=parse_int(source.get("MQTT_PORT"), 1883),
            username=_strip_or_none(source.get("MQTT_USER") or source.get("MQTT_USERNAME")),
            password=_strip_or_none(source.get("MQTT_PASS") or source.get("MQTT_PASSWORD")),
            tls_enabled=parse_bool(source.get("MQTT_TLS_ENABLED"), False),
            cert=_strip_or_none(source.get("MQTT_CERT")),
            key=_strip_or_none(source.get("MQTT_KEY")),
            ca_cert=_strip_or_none(source.get("MQTT_CA_CERT")),
            topic_base=topic_base.rstrip("/"),
        )

        settings_path = _strip_or_none(source.get("WORKTILE_SETTINGS_PATH"))
        session_path = _strip_or_none(source.get("WORKTILE_SESSION_PATH"))
        store = StoreConfig(
            settings_path=Path(settings_path) if settings_path else DEFAULT_SETTINGS_PATH,
            session_path=Path(session_path) if session_path else DEFAULT_SESSION_PATH,
            namespace=_strip_or_none(source.get("WORKTILE_INSTANCE_NAMESPACE")),
        )

        step = parse_int(source.get("WORKTILE_TRANSPARENCY_STEP"), DEFAULT_TRANSPARENCY_STEP)
        if step <= 0 or step > 100:
            step = DEFAULT_TRANSPARENCY_STEP
        timeout = parse_float(source.get("WORKTILE_SETTINGS_TIMEOUT_SECONDS"), DEFAULT_SETTINGS_TIMEOUT_SECONDS)
        display = DisplayConfig(
            page_policy=_parse_page_policy(source.get("WORKTILE_PAGE_POLICY")),
            transparency_step=step,
            settings_timeout_seconds=max(0.0, timeout),
            size_thresholds=_parse_thresholds(source.get("WORKTILE_SIZE_THRESHOLDS")),
            width_px=max(1, parse_int(source.get("WORKTILE_WIDTH_PX"), 360)),
            height_px=max(1, parse_int(source.get("WORKTILE_HEIGHT_PX"), 360)),
            density=parse_float(source.get("WORKTILE_DENSITY"), 2.0),
            refresh_seconds=max(1.0, parse_float(source.get("WORKTILE_REFRESH_SECONDS"), 60.0)),
        )

        return WidgetConfig(
            hostname=hostname,
            mqtt=mqtt,
            store=store,
            display=display,
            log_level=(source.get("WORKTILE_LOG_LEVEL") or "INFO").strip().upper(),
        )
