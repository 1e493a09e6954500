"""MQTT transport for the widget service.

Subscriptions are remembered so they survive broker reconnects, and an
optional availability topic carries ``online``/``offline`` (the latter as the
client's last will).
"""

from __future__ import annotations

import json
import logging
import ssl
import threading
from collections.abc import Callable
from typing import Any

import paho.mqtt.client as mqtt

from worktile.actions import PendingAction
from worktile.config import MqttConfig

MessageHandler = Callable[[str], None]

ONLINE = "online"
OFFLINE = "offline"


def _is_success(reason_code: Any) -> bool:
    if hasattr(reason_code, "is_failure"):
        return not reason_code.is_failure
    try:
        return int(reason_code) == 0
    except (TypeError, ValueError):
        return False


class WidgetMqtt:
    def __init__(
        self,
        config: MqttConfig,
        logger: logging.Logger | None = None,
        *,
        availability_topic: str | None = None,
    ) -> None:
        self.config = config
        self.availability_topic = availability_topic
        self._logger = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._handlers: dict[str, MessageHandler] = {}
        self._lock = threading.Lock()

    def _build_client(self) -> mqtt.Client:
        callback_kwargs: dict[str, object] = {}
        if hasattr(mqtt, "CallbackAPIVersion"):
            callback_kwargs["callback_api_version"] = mqtt.CallbackAPIVersion.VERSION2
        client = mqtt.Client(
            client_id=f"worktile-widget-{self.config.topic_base}",
            clean_session=True,
            **callback_kwargs,
        )
        if self.config.username:
            client.username_pw_set(self.config.username, self.config.password or "")
        if self.config.tls_enabled:
            tls_kwargs: dict[str, object] = {"tls_version": getattr(ssl, "PROTOCOL_TLS_CLIENT", ssl.PROTOCOL_TLS)}
            for name, value in (
                ("ca_certs", self.config.ca_cert),
                ("certfile", self.config.cert),
                ("keyfile", self.config.key),
            ):
                if value:
                    tls_kwargs[name] = value
            client.tls_set(**tls_kwargs)
        if self.availability_topic:
            client.will_set(self.availability_topic, payload=OFFLINE, qos=1, retain=True)
        client.on_connect = self._on_connect
        return client

    def connect(self) -> None:
        if not self.config.host:
            self._logger.debug("[mqtt] MQTT host not configured; widget actions disabled")
            return
        with self._lock:
            if self._client is not None:
                return
            client = self._build_client()
            try:
                client.connect(self.config.host, self.config.port, keepalive=30)
            except Exception as exc:
                self._logger.warning("[mqtt] Failed to connect to MQTT at %s:%s: %s", self.config.host, self.config.port, exc)
                return
            client.loop_start()
            self._client = client
        self._logger.info("[mqtt] Connecting to MQTT broker %s:%s", self.config.host, self.config.port)

    def _on_connect(self, client, _userdata, _flags, reason_code, properties=None):  # type: ignore[no-untyped-def]
        if not _is_success(reason_code):
            self._logger.warning("[mqtt] MQTT connection refused (reason=%s)", reason_code)
            return
        with self._lock:
            topics = list(self._handlers)
        for topic in topics:
            self._subscribe_client(client, topic)
        if self.availability_topic:
            client.publish(self.availability_topic, payload=ONLINE, qos=1, retain=True)
        self._logger.debug("[mqtt] Connected; restored %d subscription(s)", len(topics))

    def disconnect(self) -> None:
        with self._lock:
            client = self._client
            self._client = None
        if not client:
            return
        if self.availability_topic:
            try:
                client.publish(self.availability_topic, payload=OFFLINE, qos=1, retain=True)
            except Exception as exc:
                self._logger.debug("[mqtt] Failed to publish offline state: %s", exc)
        client.loop_stop()
        client.disconnect()

    def is_connected(self) -> bool:
        client = self._client
        try:
            return bool(client and client.is_connected())
        except Exception:
            return False

    def publish(self, topic: str, payload: str, retain: bool = False, qos: int = 0) -> None:
        client = self._client
        if not client:
            return
        try:
            client.publish(topic, payload=payload, qos=qos, retain=retain)
        except Exception as exc:
            self._logger.debug("[mqtt] Failed to publish to %s: %s", topic, exc)

    def publish_json(self, topic: str, data: Any, retain: bool = False, qos: int = 0) -> None:
        self.publish(topic, json.dumps(data, ensure_ascii=False, separators=(",", ":")), retain=retain, qos=qos)

    def subscribe(self, topic: str, on_message: MessageHandler) -> None:
        """Register a text handler for ``topic``.

        The subscription is made now when connected and again after every
        reconnect.
        """
        with self._lock:
            self._handlers[topic] = on_message
            client = self._client
        if client is not None:
            self._subscribe_client(client, topic)

    def _subscribe_client(self, client: mqtt.Client, topic: str) -> None:
        handler = self._handlers.get(topic)
        if handler is None:
            return

        def _callback(_client, _userdata, message):  # type: ignore[no-untyped-def]
            try:
                handler(message.payload.decode("utf-8", errors="ignore"))
            except Exception as exc:
                self._logger.error("[mqtt] Handler for '%s' failed: %s", topic, exc, exc_info=True)

        result, _mid = client.subscribe(topic, qos=1)
        if result != mqtt.MQTT_ERR_SUCCESS:
            self._logger.warning("[mqtt] Failed to subscribe to topic: %s (rc=%s)", topic, result)
        client.message_callback_add(topic, _callback)


class MqttHostSignal:
    """Publishes the pending clock action so the main application wakes up.

    The message is retained until the application clears it by publishing an
    empty retained payload on the same topic.
    """

    def __init__(self, mqtt_client: WidgetMqtt, topic: str) -> None:
        self.mqtt = mqtt_client
        self.topic = topic

    def request(self, action: PendingAction) -> None:
        self.mqtt.publish(self.topic, action.value, retain=True, qos=1)
