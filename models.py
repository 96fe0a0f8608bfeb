"""Data models and dataclasses."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from constants import REPORT_ATTRIBUTE, REPORT_READ_RESPONSE


class Role(str, Enum):
    """Semantic role of a device endpoint."""
    THERMOSTAT = "thermostat"
    ECO_SWITCH = "eco_switch"
    SWING_SWITCH = "swing_switch"
    DISPLAY_SWITCH = "display_switch"
    NIGHT_MODE_SWITCH = "night_mode_switch"
    PURIFIER_SWITCH = "purifier_switch"
    CLEAN_STATUS_SENSOR = "clean_status_sensor"
    MUTE_SWITCH = "mute_switch"
    ERROR_STATUS_SENSOR = "error_status_sensor"
    UNASSIGNED = "unassigned"


class DeviceEvent(str, Enum):
    """Device lifecycle notifications delivered by the transport."""
    START = "start"
    JOIN = "join"
    STOP = "stop"
    LEAVE = "leave"

    @classmethod
    def parse(cls, value: str) -> "DeviceEvent":
        """Accept the transport's event names, including ``deviceAnnounce``."""
        name = value.strip().lower()
        if name in ("announce", "deviceannounce"):
            return cls.JOIN
        return cls(name)


@dataclass(frozen=True)
class AttributeReport:
    """Decoded attribute map received from one endpoint."""
    endpoint_id: int
    cluster: str
    attributes: Mapping[str, Any]
    kind: str = REPORT_ATTRIBUTE

    @property
    def is_state(self) -> bool:
        """True for pushed reports and read responses, which both carry state."""
        return self.kind in (REPORT_ATTRIBUTE, REPORT_READ_RESPONSE)


class IntentKind(str, Enum):
    """How an intent reaches the device."""
    WRITE = "write"
    COMMAND = "command"
    READ = "read"


@dataclass(frozen=True)
class CommandIntent:
    """A single write, command or read scoped to one endpoint."""
    kind: IntentKind
    endpoint_id: int
    cluster: str
    values: Mapping[str, Any] = field(default_factory=dict)  # attribute writes
    command: Optional[str] = None
    params: Mapping[str, Any] = field(default_factory=dict)
    attributes: Tuple[str, ...] = ()  # attribute reads

    def describe(self) -> str:
        """Short human-readable form used in log messages."""
        if self.kind is IntentKind.WRITE:
            target = ",".join(self.values)
        elif self.kind is IntentKind.COMMAND:
            target = self.command or ""
        else:
            target = ",".join(self.attributes)
        return f"{self.kind.value} {self.cluster}[{target}] on endpoint {self.endpoint_id}"


@dataclass
class IntentResult:
    """Outcome of one intent executed inside a batch."""
    intent: CommandIntent
    ok: bool
    error: Optional[BaseException] = None


@dataclass
class PollConfig:
    """Polling settings for one device; interval <= 0 disables polling."""
    interval_seconds: int
    enabled: bool = True

    @property
    def is_active(self) -> bool:
        """Whether the scheduler should keep a timer for this device."""
        return self.enabled and self.interval_seconds > 0


@dataclass
class HubRequest:
    """Request received from MQTT."""
    address: str
    action: str  # "set" | "get" | "options"
    values: Dict[str, Any]
