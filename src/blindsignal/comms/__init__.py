"""Ping transport -- channel contract, local fan-out, simulator, MQTT backend."""
from .channel import PingChannel, create_channel
from .event_bus import PingBus, Subscription
from .mqtt_channel import MQTTChannel
from .simulated import MOCK_REMOTE_ID, SimulatedChannel

__all__ = [
    "MOCK_REMOTE_ID",
    "MQTTChannel",
    "PingBus",
    "PingChannel",
    "SimulatedChannel",
    "Subscription",
    "create_channel",
]
