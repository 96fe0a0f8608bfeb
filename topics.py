"""Topic utilities for MQTT."""

from typing import Optional, Tuple

from constants import DEFAULT_BASE_TOPIC


def topic_state(address: str, base: str = DEFAULT_BASE_TOPIC) -> str:
    """Get MQTT topic for device state."""
    return f"{base}/{address}"


def topic_available(address: str, base: str = DEFAULT_BASE_TOPIC) -> str:
    """Get MQTT topic for device availability."""
    return f"{base}/{address}/availability"


def topic_definition(base: str = DEFAULT_BASE_TOPIC) -> str:
    """Get MQTT topic for the exposes and role map."""
    return f"{base}/bridge/definition"


def request_subscriptions(base: str = DEFAULT_BASE_TOPIC) -> Tuple[str, ...]:
    """Topic filters for requests addressed to any device."""
    return (f"{base}/+/set", f"{base}/+/set/+", f"{base}/+/get", f"{base}/+/options")


def parse_request_topic(topic: str, base: str = DEFAULT_BASE_TOPIC) -> Optional[Tuple[str, str, Optional[str]]]:
    """
    Split a request topic into (address, action, property):
      <base>/<address>/set              -> (address, "set", None)
      <base>/<address>/set/<property>   -> (address, "set", property)
      <base>/<address>/get | options    -> (address, action, None)
    Returns None for anything else.
    """
    prefix = f"{base}/"
    if not topic.startswith(prefix):
        return None
    parts = topic[len(prefix):].split("/")
    if len(parts) == 2 and parts[1] in ("set", "get", "options"):
        address, action = parts
        prop = None
    elif len(parts) == 3 and parts[1] == "set":
        address, action, prop = parts
    else:
        return None
    if not address or address == "bridge" or prop == "":
        return None
    return address, action, prop
