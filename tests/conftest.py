"""Shared test fixtures for the worktile test suite.

This module provides reusable fixtures for:
- Logger mocking
- In-memory settings and work-session stores
- MQTT configuration and client mocking
- State machine and controller construction
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any
from unittest.mock import Mock

import paho.mqtt.client as mqtt
import pytest

from worktile.config import MqttConfig, PagePolicy
from worktile.settings_store import MemoryStore, WidgetSettings
from worktile.state import PageStateMachine
from worktile.widget import WidgetController

# ============================================================================
# Logging Fixtures
# ============================================================================


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing.

    Returns a Mock with spec=logging.Logger to ensure only valid
    logger methods can be called.
    """
    return Mock(spec=logging.Logger)


# ============================================================================
# Store Fixtures
# ============================================================================


@pytest.fixture
def settings_store():
    """Empty in-memory settings store."""
    return MemoryStore()


@pytest.fixture
def session_store():
    """In-memory work-session store with a typical clocked-out day."""
    return MemoryStore(
        {
            "clockIn": "2026-10-19T08:30:00",
            "isClockedIn": False,
            "_remainingText": "3h 15m",
            "_overtimeText": "0h 45m",
            "_todayEarnings": "$96.00",
            "_monthlyEarnings": "$1,420.50",
            "_calendarData": "1:completed:09:15,2:inprogress,3:offday",
        }
    )


@pytest.fixture
def widget_settings(settings_store):
    return WidgetSettings(settings_store)


# ============================================================================
# State Fixtures
# ============================================================================


@pytest.fixture
def machine():
    """State machine with wrap-around paging and default steps."""
    return PageStateMachine()


@pytest.fixture
def clamp_machine():
    return PageStateMachine(policy=PagePolicy.CLAMP)


@pytest.fixture
def make_controller(settings_store, session_store):
    """Factory fixture for controllers backed by the shared memory stores.

    Usage:
        controller = make_controller(host_signal=signal, clock=lambda: 100.0)
    """

    def _create(**overrides: Any) -> WidgetController:
        kwargs: dict[str, Any] = {
            "clock": lambda: 1_000.0,
            "today": lambda: date(2026, 10, 19),
        }
        kwargs.update(overrides)
        settings = kwargs.pop("settings", None) or WidgetSettings(settings_store)
        return WidgetController(settings, session_store, **kwargs)

    return _create


# ============================================================================
# MQTT Fixtures
# ============================================================================


@pytest.fixture
def mqtt_config():
    """Create a basic MQTT configuration for testing."""
    return MqttConfig(
        host="localhost",
        port=1883,
        username=None,
        password=None,
        tls_enabled=False,
        cert=None,
        key=None,
        ca_cert=None,
        topic_base="worktile/test-device/widget",
    )


@pytest.fixture
def mqtt_config_with_tls():
    """Create MQTT configuration with TLS and authentication enabled."""
    return MqttConfig(
        host="localhost",
        port=8883,
        username="mqtt_user",
        password="mqtt_pass",
        tls_enabled=True,
        cert="/path/to/client.crt",
        key="/path/to/client.key",
        ca_cert="/path/to/ca.crt",
        topic_base="worktile/test-device/widget",
    )


@pytest.fixture
def mock_mqtt_client():
    """Create a mock paho MQTT client."""
    client = Mock(spec=mqtt.Client)
    client.subscribe = Mock(return_value=(mqtt.MQTT_ERR_SUCCESS, 1))
    client.is_connected = Mock(return_value=True)
    return client
