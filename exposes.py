"""Declarative list of the properties exposed to the hub."""

from dataclasses import asdict, dataclass
from enum import IntFlag
from typing import Any, Dict, List, Optional, Tuple

from constants import PAYLOAD_OFF, PAYLOAD_ON, SETPOINT_MAX, SETPOINT_MIN, SETPOINT_STEP
from endpoint_router import ONOFF_PROPERTIES, READ_ONLY_ROLES
from enum_codec import FAN_MODE, RUNNING_MODE, SYSTEM_MODE
from models import Role


class Access(IntFlag):
    """Bit flags: published in state, settable, gettable."""
    STATE = 1
    SET = 2
    GET = 4
    READ_ONLY = STATE | GET
    ALL = STATE | SET | GET

    def describe(self) -> str:
        if self & Access.SET and self & Access.STATE:
            return "read-write"
        if self & Access.SET:
            return "write-only"
        return "read-only"


@dataclass(frozen=True)
class Expose:
    name: str
    kind: str  # "numeric" | "enum" | "binary" | "text"
    access: Access
    role: Role
    description: str = ""
    values: Tuple[str, ...] = ()
    value_min: Optional[float] = None
    value_max: Optional[float] = None
    value_step: Optional[float] = None
    unit: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        data = {k: v for k, v in asdict(self).items() if v not in (None, ())}
        data["access"] = int(self.access)
        data["access_mode"] = self.access.describe()
        data["role"] = self.role.value
        return data


_SWITCH_DESCRIPTIONS = {
    "eco_mode": "Eco mode",
    "swing_mode": "Swing mode",
    "display": "Display on/off",
    "night_mode": "Night mode (sleep mode with adjusted settings)",
    "purifier": "Air purifier/ionizer",
    "mute": "Mute beep sounds on AC",
    "filter_clean_status": "Filter cleaning status indicator (cleared by AC unit)",
    "ac_error_status": "Error status indicator (ON when AC has an error)",
}


def _build_exposes() -> List[Expose]:
    exposes = [
        Expose("local_temperature", "numeric", Access.READ_ONLY, Role.THERMOSTAT,
               "Measured room temperature", unit="°C"),
        Expose("occupied_heating_setpoint", "numeric", Access.ALL, Role.THERMOSTAT,
               "Target temperature, used for heating and cooling",
               value_min=SETPOINT_MIN, value_max=SETPOINT_MAX, value_step=SETPOINT_STEP, unit="°C"),
        Expose("system_mode", "enum", Access.ALL, Role.THERMOSTAT,
               "Operating mode", values=SYSTEM_MODE.tokens),
        Expose("running_state", "enum", Access.READ_ONLY, Role.THERMOSTAT,
               "What the unit is currently doing", values=RUNNING_MODE.tokens),
        Expose("fan_mode", "enum", Access.ALL, Role.THERMOSTAT,
               "Fan speed: quiet=SILENT, low=P20, low-med=P40, medium=P60, "
               "med-high=P80, high=P100, auto=AUTO", values=FAN_MODE.tokens),
        Expose("error_text", "text", Access.READ_ONLY, Role.THERMOSTAT,
               "Error message from the AC, empty when there is no error"),
        Expose("error_text_raw", "text", Access.READ_ONLY, Role.THERMOSTAT,
               "Error text exactly as reported by the AC, for diagnostics"),
    ]
    for role, name in ONOFF_PROPERTIES.items():
        access = Access.READ_ONLY if role in READ_ONLY_ROLES else Access.ALL
        exposes.append(Expose(name, "binary", access, role, _SWITCH_DESCRIPTIONS.get(name, ""),
                              values=(PAYLOAD_ON, PAYLOAD_OFF)))
    return exposes


EXPOSES: List[Expose] = _build_exposes()


def definition_payload(role_map: Dict[str, int]) -> Dict[str, Any]:
    """Exposes and role map as published to the hub."""
    return {
        "exposes": [e.as_dict() for e in EXPOSES],
        "endpoints": role_map,
    }
