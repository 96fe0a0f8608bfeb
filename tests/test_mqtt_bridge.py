"""Tests for MQTT topic handling."""

import asyncio
from types import SimpleNamespace

import pytest

from models import HubRequest
from mqtt_bridge import MqttBridge, parse_request
from topics import parse_request_topic, request_subscriptions, topic_available, topic_state

ADDRESS = "0x00124b0001abcdef"


class TestTopics:
    def test_state_topics(self):
        assert topic_state(ADDRESS) == f"acw02/{ADDRESS}"
        assert topic_available(ADDRESS, "hvac") == f"hvac/{ADDRESS}/availability"

    def test_parse(self):
        assert parse_request_topic(f"acw02/{ADDRESS}/set") == (ADDRESS, "set", None)
        assert parse_request_topic(f"acw02/{ADDRESS}/set/fan_mode") == (ADDRESS, "set", "fan_mode")
        assert parse_request_topic(f"acw02/{ADDRESS}/options") == (ADDRESS, "options", None)

    @pytest.mark.parametrize("topic", [
        f"acw02/{ADDRESS}",
        f"acw02/{ADDRESS}/availability",
        f"other/{ADDRESS}/set",
        "acw02/bridge/set",
        f"acw02/{ADDRESS}/get/fan_mode",
        f"acw02/{ADDRESS}/set/",
    ])
    def test_rejected(self, topic):
        assert parse_request_topic(topic) is None


class TestParseRequest:
    def test_set_object(self):
        request = parse_request(f"acw02/{ADDRESS}/set", b'{"fan_mode": "low", "eco_mode": "ON"}')
        assert request == HubRequest(address=ADDRESS, action="set",
                                     values={"fan_mode": "low", "eco_mode": "ON"})

    def test_set_single_property(self):
        assert parse_request(f"acw02/{ADDRESS}/set/eco_mode", b"ON").values == {"eco_mode": "ON"}
        assert parse_request(
            f"acw02/{ADDRESS}/set/occupied_heating_setpoint", b"22.5"
        ).values == {"occupied_heating_setpoint": 22.5}

    def test_get(self):
        request = parse_request(f"acw02/{ADDRESS}/get", b'{"fan_mode": ""}')
        assert request.action == "get"
        assert list(request.values) == ["fan_mode"]

    def test_invalid_json(self):
        assert parse_request(f"acw02/{ADDRESS}/set", b"{fan_mode") is None

    def test_json_must_be_object(self):
        assert parse_request(f"acw02/{ADDRESS}/set", b'["ON"]') is None

    def test_malformed_topic(self):
        assert parse_request(f"acw02/{ADDRESS}/state", b"{}") is None


class TestMqttBridge:
    @pytest.mark.asyncio
    async def test_message_queued_on_loop(self):
        queue = asyncio.Queue()
        bridge = MqttBridge(asyncio.get_running_loop(), queue)
        msg = SimpleNamespace(topic=f"acw02/{ADDRESS}/set", payload=b'{"mute": "OFF"}')
        bridge._on_message(None, None, msg)
        await asyncio.sleep(0)
        assert queue.get_nowait() == HubRequest(address=ADDRESS, action="set", values={"mute": "OFF"})

    @pytest.mark.asyncio
    async def test_ignored_message(self):
        queue = asyncio.Queue()
        bridge = MqttBridge(asyncio.get_running_loop(), queue)
        bridge._on_message(None, None, SimpleNamespace(topic="acw02/x/y/z", payload=b""))
        await asyncio.sleep(0)
        assert queue.empty()

    @pytest.mark.asyncio
    async def test_subscribes_on_connect(self):
        subscribed = []
        client = SimpleNamespace(subscribe=lambda topic, qos: subscribed.append(topic))
        bridge = MqttBridge(asyncio.get_running_loop(), asyncio.Queue(), base_topic="hvac")
        bridge._on_connect(client, None, None, 0, None)
        assert subscribed == list(request_subscriptions("hvac"))
