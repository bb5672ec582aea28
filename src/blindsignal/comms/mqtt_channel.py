"""MQTTChannel -- pings over a shared MQTT broker topic.

Every participant in a session publishes to, and subscribes on, one topic:

    blindsignal/{session_id}/{topic}      <- all pings, JSON payload

Payload:
    {"x": float, "y": float, "intensity": float, "playerId": str}

Delivery is whatever the broker gives us: QoS 0, no reordering, no dedup.
The broker also echoes our own publishes back; those go through the
perception filter like everyone else's.

Failures never escape into the game loop:
  - no broker host / refused connection -> logged, kept in stats["last_error"],
    publish() becomes a no-op
  - malformed inbound payload -> dropped, counted in stats["messages_dropped"]
"""

from __future__ import annotations

import json
import logging
import threading
import time
from typing import Any, Callable

from blindsignal.events import AcousticEvent, PayloadError

from .channel import PingChannel
from .event_bus import DEFAULT_QUEUE_SIZE

logger = logging.getLogger("blindsignal.mqtt")

TOPIC_ROOT = "blindsignal"


def _default_client_factory(client_id: str) -> Any:
    import paho.mqtt.client as mqtt

    return mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=client_id)


class MQTTChannel(PingChannel):
    """Bridges the session's MQTT ping topic <-> local subscribers."""

    def __init__(
        self,
        session_id: str = "lobby",
        broker_host: str = "localhost",
        broker_port: int = 1883,
        topic: str = "pings",
        username: str = "",
        password: str = "",
        queue_size: int = DEFAULT_QUEUE_SIZE,
        client_factory: Callable[[str], Any] | None = None,
    ) -> None:
        super().__init__(queue_size=queue_size)
        self._session = session_id
        self._broker_host = broker_host
        self._broker_port = broker_port
        self._topic = f"{TOPIC_ROOT}/{session_id}/{topic}"
        self._username = username
        self._password = password
        self._client_factory = client_factory or _default_client_factory
        self._client = None
        self._connected = False
        self._running = False
        self._lock = threading.Lock()
        # Stats; written from the paho network thread and the caller's thread
        self._stats_lock = threading.Lock()
        self._messages_received: int = 0
        self._messages_published: int = 0
        self._messages_dropped: int = 0
        self._last_error: str = ""

    @property
    def topic(self) -> str:
        return self._topic

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def stats(self) -> dict:
        with self._stats_lock:
            return {
                "connected": self._connected,
                "broker": f"{self._broker_host}:{self._broker_port}",
                "topic": self._topic,
                "messages_received": self._messages_received,
                "messages_published": self._messages_published,
                "messages_dropped": self._messages_dropped,
                "last_error": self._last_error,
            }

    def start(self) -> None:
        """Connect to the broker and start the network loop."""
        if self._running or self._closed:
            return
        if not self._broker_host:
            self._last_error = "MQTT broker host not configured"
            logger.error("MQTT channel disabled: broker host not configured")
            return

        client_id = f"blindsignal-{self._session}-{int(time.time()) % 10000}"
        try:
            client = self._client_factory(client_id)
        except ImportError:
            self._last_error = "paho-mqtt not installed"
            logger.error("paho-mqtt not installed; MQTT channel disabled")
            return

        if self._username:
            client.username_pw_set(self._username, self._password)
        client.on_connect = self._on_connect
        client.on_disconnect = self._on_disconnect
        client.on_message = self._on_message

        self._running = True
        self._client = client
        try:
            client.connect(self._broker_host, self._broker_port, keepalive=60)
            client.loop_start()
            logger.info(f"MQTT ping channel connecting to {self._broker_host}:{self._broker_port}")
        except Exception as e:
            logger.error(f"MQTT connection failed: {e}")
            self._last_error = str(e)
            self._client = None
            self._running = False

    def _shutdown(self) -> None:
        self._running = False
        with self._lock:
            client, self._client = self._client, None
        if client is not None:
            try:
                client.unsubscribe(self._topic)
                client.loop_stop()
                client.disconnect()
            except Exception as e:
                logger.warning(f"MQTT teardown error: {e}")
        self._connected = False

    # --- Connection callbacks ---

    def _on_connect(self, client, userdata, flags, reason_code, properties=None) -> None:
        if reason_code == 0:
            self._connected = True
            client.subscribe(self._topic, qos=0)
            logger.info(f"MQTT subscribed to {self._topic}")
        else:
            self._connected = False
            self._last_error = f"Connection refused (rc={reason_code})"
            logger.error(f"MQTT connection refused: rc={reason_code}")

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None) -> None:
        self._connected = False
        if reason_code != 0:
            self._last_error = f"Unexpected disconnect (rc={reason_code})"
            logger.warning(f"MQTT unexpected disconnect (rc={reason_code})")

    # --- Inbound ---

    def _on_message(self, client, userdata, msg) -> None:
        if self._closed:
            return
        with self._stats_lock:
            self._messages_received += 1
        try:
            payload = json.loads(msg.payload.decode("utf-8"))
            event = AcousticEvent.from_payload(payload)
        except (ValueError, RecursionError) as e:
            # JSONDecodeError, UnicodeDecodeError and PayloadError are all ValueErrors
            with self._stats_lock:
                self._messages_dropped += 1
            logger.debug(f"MQTT bad ping payload on {msg.topic}: {e}")
            return
        self._deliver(event)

    # --- Outbound ---

    def publish(self, event: AcousticEvent) -> None:
        client = self._client
        if not self._connected or client is None:
            logger.debug("MQTT not connected; ping from %s not sent", event.source_id)
            return
        try:
            client.publish(self._topic, json.dumps(event.to_payload()), qos=0)
            with self._stats_lock:
                self._messages_published += 1
        except Exception as e:
            self._last_error = str(e)
            logger.debug(f"MQTT publish error: {e}")
