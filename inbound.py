"""Conversion of attribute reports into partial published state."""

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from constants import (
    BASIC_CLUSTER,
    COOLING_SETPOINT_ATTRIBUTE,
    FAN_CONTROL_CLUSTER,
    FAN_MODE_ATTRIBUTE,
    HEATING_SETPOINT_ATTRIBUTE,
    LOCAL_TEMP_ATTRIBUTE,
    LOCATION_DESC_ATTRIBUTE,
    ONOFF_ATTRIBUTE,
    ONOFF_CLUSTER,
    PAYLOAD_OFF,
    PAYLOAD_ON,
    RUNNING_MODE_ATTRIBUTE,
    SYSTEM_MODE_ATTRIBUTE,
    TEMPERATURE_SCALE,
    THERMOSTAT_CLUSTER,
)
from endpoint_router import ONOFF_PROPERTIES, EndpointRouter, Route
from enum_codec import FAN_MODE, RUNNING_MODE, SYSTEM_MODE, decode
from models import AttributeReport, Role
from text_decoder import ErrorTextPolicy, decode_length_prefixed

logger = logging.getLogger(__name__)

State = Dict[str, Any]
Converter = Callable[[Mapping[str, Any], Route, "ConversionContext"], State]


class ConversionContext:
    """Per-device settings the converters need."""

    def __init__(self, error_policy: Optional[ErrorTextPolicy] = None):
        self.error_policy = error_policy or ErrorTextPolicy()


def _scaled(value: Any) -> float:
    return float(value) / TEMPERATURE_SCALE


def _convert_attribute(
    result: State, data: Mapping[str, Any], attribute: str, convert: Callable[[Any], State]
) -> bool:
    """Apply ``convert`` to one attribute; a bad value is logged and skipped."""
    if attribute not in data:
        return False
    try:
        result.update(convert(data[attribute]))
    except (TypeError, ValueError, OverflowError) as e:
        logger.warning(f"Ignoring malformed {attribute}={data[attribute]!r}: {e}")
        return False
    return True


def convert_thermostat(data: Mapping[str, Any], route: Route, ctx: ConversionContext) -> State:
    """Temperatures, modes and the single setpoint of the thermostat endpoint."""
    result: State = {}
    _convert_attribute(result, data, LOCAL_TEMP_ATTRIBUTE,
                       lambda v: {"local_temperature": _scaled(v)})
    _convert_attribute(result, data, RUNNING_MODE_ATTRIBUTE,
                       lambda v: {"running_state": decode(RUNNING_MODE, v)})
    _convert_attribute(result, data, SYSTEM_MODE_ATTRIBUTE,
                       lambda v: {"system_mode": decode(SYSTEM_MODE, v)})
    # A single setpoint is used for heating and cooling; heating wins.
    if not _convert_attribute(result, data, HEATING_SETPOINT_ATTRIBUTE,
                              lambda v: {"occupied_heating_setpoint": _scaled(v)}):
        _convert_attribute(result, data, COOLING_SETPOINT_ATTRIBUTE,
                           lambda v: {"occupied_heating_setpoint": _scaled(v)})
    return result


def convert_fan(data: Mapping[str, Any], route: Route, ctx: ConversionContext) -> State:
    """Fan speed from the fan control cluster."""
    result: State = {}
    _convert_attribute(result, data, FAN_MODE_ATTRIBUTE,
                       lambda v: {"fan_mode": decode(FAN_MODE, v)})
    return result


def convert_on_off(data: Mapping[str, Any], route: Route, ctx: ConversionContext) -> State:
    """ON/OFF under the property the router resolved for the endpoint."""
    result: State = {}
    if route.property is None:
        return result
    _convert_attribute(result, data, ONOFF_ATTRIBUTE,
                       lambda v: {route.property: PAYLOAD_ON if int(v) == 1 else PAYLOAD_OFF})
    return result


def convert_error_text(data: Mapping[str, Any], route: Route, ctx: ConversionContext) -> State:
    """Classified error text plus the raw text for diagnostics."""
    if LOCATION_DESC_ATTRIBUTE not in data:
        return {}
    error = ctx.error_policy.classify(decode_length_prefixed(data[LOCATION_DESC_ATTRIBUTE]))
    return {"error_text": error.text, "error_text_raw": error.raw}


INBOUND_CONVERTERS: Mapping[Tuple[str, Role], Converter] = {
    (THERMOSTAT_CLUSTER, Role.THERMOSTAT): convert_thermostat,
    (FAN_CONTROL_CLUSTER, Role.THERMOSTAT): convert_fan,
    (BASIC_CLUSTER, Role.THERMOSTAT): convert_error_text,
    **{(ONOFF_CLUSTER, role): convert_on_off for role in ONOFF_PROPERTIES},
}


def convert_report(
    report: AttributeReport, router: EndpointRouter, ctx: Optional[ConversionContext] = None
) -> State:
    """Turn one report into a partial state update; {} when nothing applies."""
    if not report.is_state:
        logger.debug(f"Ignoring {report.kind} message on endpoint {report.endpoint_id}")
        return {}
    route = router.route(report)
    if route is None:
        return {}
    converter = INBOUND_CONVERTERS.get((route.cluster, route.role))
    if converter is None:
        logger.debug(f"No converter for {route.cluster} on {route.role.value}")
        return {}
    return converter(report.attributes, route, ctx or ConversionContext())
