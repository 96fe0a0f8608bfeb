"""Endpoint id to semantic role mapping."""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from constants import BASIC_CLUSTER, FAN_CONTROL_CLUSTER, ONOFF_CLUSTER, THERMOSTAT_CLUSTER
from errors import ConfigurationError
from models import AttributeReport, Role

logger = logging.getLogger(__name__)

ROLE_MAP: Mapping[int, Role] = MappingProxyType({
    1: Role.THERMOSTAT,
    2: Role.ECO_SWITCH,
    3: Role.SWING_SWITCH,
    4: Role.DISPLAY_SWITCH,
    5: Role.NIGHT_MODE_SWITCH,
    6: Role.PURIFIER_SWITCH,
    7: Role.CLEAN_STATUS_SENSOR,
    8: Role.MUTE_SWITCH,
    9: Role.ERROR_STATUS_SENSOR,
})

# Published property of each on/off endpoint
ONOFF_PROPERTIES: Mapping[Role, str] = MappingProxyType({
    Role.ECO_SWITCH: "eco_mode",
    Role.SWING_SWITCH: "swing_mode",
    Role.DISPLAY_SWITCH: "display",
    Role.NIGHT_MODE_SWITCH: "night_mode",
    Role.PURIFIER_SWITCH: "purifier",
    Role.CLEAN_STATUS_SENSOR: "filter_clean_status",
    Role.MUTE_SWITCH: "mute",
    Role.ERROR_STATUS_SENSOR: "ac_error_status",
})

READ_ONLY_ROLES = frozenset({Role.CLEAN_STATUS_SENSOR, Role.ERROR_STATUS_SENSOR})

# Clusters each role is expected to report
_ROLE_CLUSTERS: Mapping[Role, frozenset] = MappingProxyType({
    Role.THERMOSTAT: frozenset({THERMOSTAT_CLUSTER, FAN_CONTROL_CLUSTER, BASIC_CLUSTER}),
    **{role: frozenset({ONOFF_CLUSTER}) for role in ONOFF_PROPERTIES},
})


@dataclass(frozen=True)
class Route:
    """A report resolved to its cluster and endpoint role."""
    cluster: str
    role: Role
    property: Optional[str] = None


class EndpointRouter:
    """Resolve endpoint ids to roles and back."""

    def __init__(self, role_map: Mapping[int, Role] = ROLE_MAP):
        """Reject maps that assign UNASSIGNED or give one role to two endpoints."""
        endpoints: Dict[Role, int] = {}
        for endpoint_id, role in role_map.items():
            if role is Role.UNASSIGNED:
                raise ConfigurationError(f"Endpoint {endpoint_id} cannot be mapped to '{role.value}'")
            if role in endpoints:
                raise ConfigurationError(
                    f"Role '{role.value}' mapped to endpoints {endpoints[role]} and {endpoint_id}"
                )
            endpoints[role] = endpoint_id
        self.role_map: Mapping[int, Role] = MappingProxyType(dict(role_map))
        self._endpoints: Mapping[Role, int] = MappingProxyType(endpoints)

    def role_of(self, endpoint_id: int) -> Role:
        """Role of ``endpoint_id``; UNASSIGNED when the endpoint is not mapped."""
        return self.role_map.get(endpoint_id, Role.UNASSIGNED)

    def endpoint_for(self, role: Role) -> int:
        """Endpoint carrying ``role``; raises ConfigurationError when none does."""
        try:
            return self._endpoints[role]
        except KeyError:
            raise ConfigurationError(f"No endpoint is assigned the role '{role.value}'") from None

    def property_for(self, role: Role) -> Optional[str]:
        """Published on/off property of a switch or sensor role."""
        return ONOFF_PROPERTIES.get(role)

    def route(self, report: AttributeReport) -> Optional[Route]:
        """Resolve ``report`` once; None means the report is dropped."""
        role = self.role_of(report.endpoint_id)
        if role is Role.UNASSIGNED:
            logger.debug(f"Dropping {report.cluster} report from unmapped endpoint {report.endpoint_id}")
            return None
        if report.cluster not in _ROLE_CLUSTERS.get(role, ()):
            logger.debug(f"Dropping {report.cluster} report from {role.value} endpoint {report.endpoint_id}")
            return None
        return Route(cluster=report.cluster, role=role, property=self.property_for(role))

    def describe(self) -> Dict[str, int]:
        """Role map as published to the hub: role name -> endpoint id."""
        return {role.value: endpoint_id for endpoint_id, role in sorted(self.role_map.items())}
