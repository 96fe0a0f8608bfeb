"""Tests for property value to intent conversion."""

import pytest

from constants import FAN_CONTROL_CLUSTER, ONOFF_CLUSTER, THERMOSTAT_CLUSTER
from endpoint_router import EndpointRouter
from errors import ConfigurationError, InvalidArgument
from models import CommandIntent, IntentKind, Role
from outbound import OUTBOUND_CONVERTERS, converter_for


@pytest.fixture
def router():
    return EndpointRouter()


class TestAttributeWrites:
    def test_fan_mode(self, router):
        intent = converter_for("fan_mode").set(router, "quiet")
        assert intent == CommandIntent(
            kind=IntentKind.WRITE, endpoint_id=1, cluster=FAN_CONTROL_CLUSTER, values={"fanMode": 0x06}
        )

    def test_fan_mode_rejects_unknown_token(self, router):
        with pytest.raises(InvalidArgument):
            converter_for("fan_mode").set(router, "turbo")

    def test_system_mode(self, router):
        intent = converter_for("system_mode").set(router, "cool")
        assert intent.cluster == THERMOSTAT_CLUSTER
        assert intent.values == {"systemMode": 0x03}

    def test_setpoint_scaled(self, router):
        intent = converter_for("occupied_heating_setpoint").set(router, 22.5)
        assert intent.values == {"occupiedHeatingSetpoint": 2250}

    @pytest.mark.parametrize("value", [15, 32, "warm", None])
    def test_setpoint_out_of_range(self, router, value):
        with pytest.raises(InvalidArgument):
            converter_for("occupied_heating_setpoint").set(router, value)

    def test_setpoint_optimistic_state(self):
        assert converter_for("occupied_heating_setpoint").optimistic_state("22") == {
            "occupied_heating_setpoint": 22.0
        }


class TestSwitches:
    def test_on_is_a_command(self, router):
        intent = converter_for("eco_mode").set(router, "ON")
        assert intent.kind is IntentKind.COMMAND
        assert intent.endpoint_id == 2
        assert intent.cluster == ONOFF_CLUSTER
        assert intent.command == "on"

    @pytest.mark.parametrize("value,command", [
        ("OFF", "off"), ("off", "off"), (False, "off"), (True, "on"), ("toggle", "toggle"),
    ])
    def test_values(self, router, value, command):
        assert converter_for("mute").set(router, value).command == command

    def test_invalid_value(self, router):
        with pytest.raises(InvalidArgument):
            converter_for("display").set(router, "maybe")

    def test_get_reads_on_off(self, router):
        intent = converter_for("swing_mode").get(router)
        assert intent == CommandIntent(
            kind=IntentKind.READ, endpoint_id=3, cluster=ONOFF_CLUSTER, attributes=("onOff",)
        )

    def test_optimistic_state(self):
        assert converter_for("night_mode").optimistic_state("on") == {"night_mode": "ON"}
        assert converter_for("night_mode").optimistic_state("TOGGLE") == {}

    def test_missing_role(self):
        router = EndpointRouter({1: Role.THERMOSTAT})
        with pytest.raises(ConfigurationError):
            converter_for("purifier").set(router, "ON")


class TestReadOnly:
    @pytest.mark.parametrize("key", [
        "local_temperature", "running_state", "error_text", "error_text_raw", "filter_clean_status", "ac_error_status",
    ])
    def test_set_rejected(self, router, key):
        assert not OUTBOUND_CONVERTERS[key].settable
        with pytest.raises(InvalidArgument):
            converter_for(key).set(router, "ON")

    def test_clean_status_get(self, router):
        intent = converter_for("filter_clean_status").get(router)
        assert intent.endpoint_id == 7
        assert intent.attributes == ("onOff",)

    def test_error_text_get(self, router):
        intent = converter_for("error_text").get(router)
        assert intent.cluster == "genBasic"
        assert intent.attributes == ("locationDesc",)


def test_unknown_property():
    with pytest.raises(InvalidArgument):
        converter_for("turbo_boost")
