"""Conversion of requested property values into device intents."""

from typing import Any, Callable, Dict, Mapping, Optional

from constants import (
    BASIC_CLUSTER,
    FAN_CONTROL_CLUSTER,
    FAN_MODE_ATTRIBUTE,
    HEATING_SETPOINT_ATTRIBUTE,
    LOCAL_TEMP_ATTRIBUTE,
    LOCATION_DESC_ATTRIBUTE,
    ONOFF_ATTRIBUTE,
    ONOFF_CLUSTER,
    PAYLOAD_OFF,
    PAYLOAD_ON,
    PAYLOAD_TOGGLE,
    RUNNING_MODE_ATTRIBUTE,
    SETPOINT_MAX,
    SETPOINT_MIN,
    SYSTEM_MODE_ATTRIBUTE,
    TEMPERATURE_SCALE,
    THERMOSTAT_CLUSTER,
)
from endpoint_router import ONOFF_PROPERTIES, READ_ONLY_ROLES, EndpointRouter
from enum_codec import FAN_MODE, SYSTEM_MODE, encode
from errors import InvalidArgument
from models import CommandIntent, IntentKind, Role


class OutboundConverter:
    """Read-only property: only ``get`` is supported."""

    settable = False

    def __init__(self, key: str, role: Role, cluster: str, attribute: str):
        self.key = key
        self.role = role
        self.cluster = cluster
        self.attribute = attribute

    def set(self, router: EndpointRouter, value: Any) -> CommandIntent:
        """Build the intent that applies ``value``."""
        raise InvalidArgument(f"'{self.key}' is read-only")

    def get(self, router: EndpointRouter) -> CommandIntent:
        """Build the read that refreshes this property."""
        return CommandIntent(
            kind=IntentKind.READ,
            endpoint_id=router.endpoint_for(self.role),
            cluster=self.cluster,
            attributes=(self.attribute,),
        )

    def optimistic_state(self, value: Any) -> Dict[str, Any]:
        """State published once ``set(value)`` succeeded."""
        return {}


class AttributeConverter(OutboundConverter):
    """Settable property written as a single cluster attribute."""

    settable = True

    def __init__(
        self,
        key: str,
        role: Role,
        cluster: str,
        attribute: str,
        encoder: Callable[[Any], int],
        normalize: Optional[Callable[[Any], Any]] = None,
    ):
        super().__init__(key, role, cluster, attribute)
        self._encoder = encoder
        self._normalize = normalize or (lambda v: v)

    def set(self, router: EndpointRouter, value: Any) -> CommandIntent:
        encoded = self._encoder(value)
        return CommandIntent(
            kind=IntentKind.WRITE,
            endpoint_id=router.endpoint_for(self.role),
            cluster=self.cluster,
            values={self.attribute: encoded},
        )

    def optimistic_state(self, value: Any) -> Dict[str, Any]:
        return {self.key: self._normalize(value)}


def _switch_action(value: Any) -> str:
    """Map a hub switch value to the on, off or toggle command."""
    if isinstance(value, bool):
        return "on" if value else "off"
    text = str(value).strip().upper()
    if text in (PAYLOAD_ON, "1", "TRUE"):
        return "on"
    if text in (PAYLOAD_OFF, "0", "FALSE"):
        return "off"
    if text == PAYLOAD_TOGGLE:
        return "toggle"
    raise InvalidArgument(f"Invalid switch value '{value}', expected ON, OFF or TOGGLE")


class SwitchConverter(OutboundConverter):
    """On/off endpoint driven with discrete on/off commands, not attribute writes."""

    settable = True

    def __init__(self, key: str, role: Role):
        super().__init__(key, role, ONOFF_CLUSTER, ONOFF_ATTRIBUTE)

    def set(self, router: EndpointRouter, value: Any) -> CommandIntent:
        return CommandIntent(
            kind=IntentKind.COMMAND,
            endpoint_id=router.endpoint_for(self.role),
            cluster=ONOFF_CLUSTER,
            command=_switch_action(value),
        )

    def optimistic_state(self, value: Any) -> Dict[str, Any]:
        action = _switch_action(value)
        if action == "toggle":
            return {}
        return {self.key: PAYLOAD_ON if action == "on" else PAYLOAD_OFF}


def _encode_setpoint(value: Any) -> int:
    try:
        degrees = float(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f"Invalid setpoint '{value}'") from None
    if not SETPOINT_MIN <= degrees <= SETPOINT_MAX:
        raise InvalidArgument(f"Setpoint {degrees} outside {SETPOINT_MIN}-{SETPOINT_MAX}")
    return int(round(degrees * TEMPERATURE_SCALE))


def _build_converters() -> Dict[str, OutboundConverter]:
    converters = [
        OutboundConverter("local_temperature", Role.THERMOSTAT, THERMOSTAT_CLUSTER, LOCAL_TEMP_ATTRIBUTE),
        OutboundConverter("running_state", Role.THERMOSTAT, THERMOSTAT_CLUSTER, RUNNING_MODE_ATTRIBUTE),
        OutboundConverter("error_text", Role.THERMOSTAT, BASIC_CLUSTER, LOCATION_DESC_ATTRIBUTE),
        OutboundConverter("error_text_raw", Role.THERMOSTAT, BASIC_CLUSTER, LOCATION_DESC_ATTRIBUTE),
        AttributeConverter(
            "occupied_heating_setpoint", Role.THERMOSTAT, THERMOSTAT_CLUSTER,
            HEATING_SETPOINT_ATTRIBUTE, _encode_setpoint, normalize=float,
        ),
        AttributeConverter(
            "system_mode", Role.THERMOSTAT, THERMOSTAT_CLUSTER,
            SYSTEM_MODE_ATTRIBUTE, lambda v: encode(SYSTEM_MODE, v),
        ),
        AttributeConverter(
            "fan_mode", Role.THERMOSTAT, FAN_CONTROL_CLUSTER,
            FAN_MODE_ATTRIBUTE, lambda v: encode(FAN_MODE, v),
        ),
    ]
    for role, key in ONOFF_PROPERTIES.items():
        if role in READ_ONLY_ROLES:
            converters.append(OutboundConverter(key, role, ONOFF_CLUSTER, ONOFF_ATTRIBUTE))
        else:
            converters.append(SwitchConverter(key, role))
    return {c.key: c for c in converters}


OUTBOUND_CONVERTERS: Mapping[str, OutboundConverter] = _build_converters()


def converter_for(key: str) -> OutboundConverter:
    """Converter for property ``key``; unknown properties raise InvalidArgument."""
    try:
        return OUTBOUND_CONVERTERS[key]
    except KeyError:
        raise InvalidArgument(f"Unknown property '{key}'") from None
