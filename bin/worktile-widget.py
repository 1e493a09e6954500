#!/usr/bin/env python3
"""Widget service: turns MQTT taps into persisted state and render instructions."""

from __future__ import annotations

import argparse
import logging
import signal
import threading

from worktile.config import WidgetConfig, WorktileError
from worktile.mqtt import MqttHostSignal, WidgetMqtt
from worktile.render import RenderInstruction
from worktile.widget import WidgetController, parse_size_payload

LOGGER = logging.getLogger("worktile-widget")


class WidgetService:
    def __init__(self, config: WidgetConfig) -> None:
        self.config = config
        self.mqtt = WidgetMqtt(config.mqtt, logger=LOGGER, availability_topic=config.availability_topic)
        self.controller = WidgetController.from_config(
            config,
            host_signal=MqttHostSignal(self.mqtt, config.requested_action_topic),
            logger=LOGGER,
        )
        self._stop = threading.Event()

    def _publish(self, instruction: RenderInstruction | None) -> None:
        if instruction is not None:
            self.mqtt.publish_json(self.config.render_topic, instruction.as_dict(), retain=True)

    def _on_action(self, payload: str) -> None:
        self._publish(self.controller.handle_text(payload))

    def _on_refresh(self, payload: str) -> None:
        size = parse_size_payload(payload)
        if size is not None:
            self.controller.resize(*size)
        elif payload.strip():
            LOGGER.debug("Ignoring malformed refresh payload: %r", payload)
        self._publish(self.controller.refresh())

    def run(self) -> None:
        # Registered before connecting; the transport subscribes once the broker accepts us.
        self.mqtt.subscribe(self.config.action_topic, self._on_action)
        self.mqtt.subscribe(self.config.refresh_topic, self._on_refresh)
        self.mqtt.connect()
        if not self.config.mqtt.host:
            LOGGER.warning("MQTT_HOST not set; the widget will only re-render locally")
        LOGGER.info(
            "Widget service running (actions: %s, render: %s)",
            self.config.action_topic,
            self.config.render_topic,
        )
        interval = self.config.display.refresh_seconds
        while not self._stop.is_set():
            self._publish(self.controller.refresh())
            self._stop.wait(interval)
        self.mqtt.disconnect()

    def stop(self) -> None:
        self._stop.set()


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--log-level", default=None)
    args = parser.parse_args()

    try:
        config = WidgetConfig.from_env()
    except WorktileError as exc:
        parser.error(str(exc))
    level = (args.log_level or config.log_level).upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO))

    service = WidgetService(config)

    def _handle_signal(signum, _frame):  # type: ignore[no-untyped-def]
        LOGGER.info("Received signal %s, shutting down", signum)
        service.stop()

    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, _handle_signal)
    service.run()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
