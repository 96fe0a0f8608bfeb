"""MQTT bridge implementation."""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import paho.mqtt.client as mqtt

from constants import (
    DEFAULT_BASE_TOPIC,
    MQTT_KEEPALIVE,
    MQTT_QOS,
)
from models import HubRequest
from topics import parse_request_topic, request_subscriptions

logger = logging.getLogger(__name__)


def parse_request(topic: str, payload: bytes, base: str = DEFAULT_BASE_TOPIC) -> Optional[HubRequest]:
    """Turn one MQTT message into a HubRequest, or None when it is not one."""
    parsed = parse_request_topic(topic, base)
    if parsed is None:
        logger.debug(f"Ignoring malformed topic: {topic}")
        return None
    address, action, prop = parsed
    text = (payload or b"").decode("utf-8", errors="replace").strip()

    if prop is not None:
        # set/<property> carries a raw value, JSON when it parses as such
        try:
            value: Any = json.loads(text)
        except ValueError:
            value = text
        return HubRequest(address=address, action=action, values={prop: value})

    try:
        values = json.loads(text) if text else {}
    except ValueError:
        logger.warning(f"Invalid JSON on {topic}: {text!r}")
        return None
    if not isinstance(values, dict):
        logger.warning(f"Expected a JSON object on {topic}, got {text!r}")
        return None
    return HubRequest(address=address, action=action, values=values)


class MqttBridge:
    """Bridge between MQTT and asyncio event loop."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        request_queue: "asyncio.Queue[HubRequest]",
        host: str = "localhost",
        port: int = 1883,
        base_topic: str = DEFAULT_BASE_TOPIC,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ):
        self.loop = loop
        self.request_queue = request_queue
        self.host = host
        self.port = port
        self.base_topic = base_topic
        self.client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)
        if username:
            self.client.username_pw_set(username, password)

        self.client.on_connect = self._on_connect
        self.client.on_message = self._on_message

    def connect(self):
        """Connect to MQTT broker."""
        try:
            self.client.connect(self.host, self.port, keepalive=MQTT_KEEPALIVE)
            self.client.loop_start()
            logger.info(f"Connected to MQTT broker at {self.host}:{self.port}")
        except Exception as e:
            logger.error(f"Failed to connect to MQTT broker: {e}")
            raise

    def close(self):
        """Close MQTT connection."""
        try:
            self.client.loop_stop()
        finally:
            self.client.disconnect()

    def publish_retained(self, topic: str, payload: str):
        """Publish a retained message."""
        self.client.publish(topic, payload=payload, qos=MQTT_QOS, retain=True)
        logger.debug(f"Published to {topic}: {payload}")

    def publish_json(self, topic: str, data: Dict[str, Any]):
        self.publish_retained(topic, json.dumps(data, sort_keys=True))

    def _on_connect(self, client, userdata, flags, reason_code, properties):
        """Handle MQTT connection."""
        if reason_code == 0:
            logger.info("Connected to MQTT broker successfully")
        else:
            logger.warning(f"Connected to MQTT broker with code {reason_code}")
        for pattern in request_subscriptions(self.base_topic):
            client.subscribe(pattern, qos=MQTT_QOS)
            logger.info(f"Subscribed to: {pattern}")

    def _on_message(self, client, userdata, msg):
        """Handle incoming MQTT message."""
        try:
            request = parse_request(msg.topic, msg.payload, self.base_topic)
            if request is None:
                return
            logger.info(f"Received {request.action} request for {request.address}: {request.values}")
            # push into asyncio loop safely from MQTT thread
            self.loop.call_soon_threadsafe(self.request_queue.put_nowait, request)
        except Exception as e:
            logger.error(f"Error handling MQTT message: {e}", exc_info=True)
