"""Tests for attribute report conversion."""

import pytest

from constants import BASIC_CLUSTER, FAN_CONTROL_CLUSTER, ONOFF_CLUSTER, THERMOSTAT_CLUSTER
from endpoint_router import EndpointRouter
from inbound import ConversionContext, convert_report
from models import AttributeReport
from text_decoder import ErrorTextPolicy


@pytest.fixture
def router():
    return EndpointRouter()


def _report(endpoint_id, cluster, kind="attributeReport", **attributes):
    return AttributeReport(endpoint_id=endpoint_id, cluster=cluster, attributes=attributes, kind=kind)


class TestThermostat:
    def test_full_report(self, router):
        report = _report(1, THERMOSTAT_CLUSTER, localTemp=2350, runningMode=3,
                         systemMode=4, occupiedHeatingSetpoint=2400)
        assert convert_report(report, router) == {
            "local_temperature": 23.5,
            "running_state": "cool",
            "system_mode": "heat",
            "occupied_heating_setpoint": 24.0,
        }

    def test_heating_setpoint_wins(self, router):
        report = _report(1, THERMOSTAT_CLUSTER, occupiedHeatingSetpoint=2100,
                         occupiedCoolingSetpoint=2600)
        assert convert_report(report, router) == {"occupied_heating_setpoint": 21.0}

    def test_cooling_setpoint_published_as_single_setpoint(self, router):
        report = _report(1, THERMOSTAT_CLUSTER, occupiedCoolingSetpoint=2600)
        assert convert_report(report, router) == {"occupied_heating_setpoint": 26.0}

    def test_unknown_modes_fall_back(self, router):
        report = _report(1, THERMOSTAT_CLUSTER, runningMode=0x42, systemMode=0x09)
        assert convert_report(report, router) == {"running_state": "idle", "system_mode": "off"}

    def test_malformed_attribute_isolated(self, router):
        report = _report(1, THERMOSTAT_CLUSTER, localTemp="n/a", systemMode=1)
        assert convert_report(report, router) == {"system_mode": "auto"}

    def test_non_finite_mode_isolated(self, router):
        report = _report(1, THERMOSTAT_CLUSTER, runningMode=float("inf"), systemMode=1)
        assert convert_report(report, router) == {"running_state": "idle", "system_mode": "auto"}

    def test_nothing_relevant(self, router):
        assert convert_report(_report(1, THERMOSTAT_CLUSTER, pIHeatingDemand=10), router) == {}


class TestFan:
    def test_turbo_reported_as_quiet(self, router):
        assert convert_report(_report(1, FAN_CONTROL_CLUSTER, fanMode=0x0D), router) == {"fan_mode": "quiet"}

    def test_read_response(self, router):
        report = _report(1, FAN_CONTROL_CLUSTER, kind="readResponse", fanMode=0x02)
        assert convert_report(report, router) == {"fan_mode": "low-med"}


class TestOnOff:
    def test_fan_out_by_endpoint(self, router):
        eco = convert_report(_report(2, ONOFF_CLUSTER, onOff=1), router)
        clean = convert_report(_report(7, ONOFF_CLUSTER, onOff=1), router)
        assert eco == {"eco_mode": "ON"}
        assert clean == {"filter_clean_status": "ON"}

    def test_off(self, router):
        assert convert_report(_report(9, ONOFF_CLUSTER, onOff=0), router) == {"ac_error_status": "OFF"}

    def test_boolean_value(self, router):
        assert convert_report(_report(8, ONOFF_CLUSTER, onOff=True), router) == {"mute": "ON"}

    def test_non_finite_value_skipped(self, router):
        assert convert_report(_report(2, ONOFF_CLUSTER, onOff=float("inf")), router) == {}

    def test_unmapped_endpoint_dropped(self, router):
        assert convert_report(_report(12, ONOFF_CLUSTER, onOff=1), router) == {}

    def test_thermostat_endpoint_has_no_switch(self, router):
        assert convert_report(_report(1, ONOFF_CLUSTER, onOff=1), router) == {}


class TestErrorText:
    def test_known_error(self, router):
        report = _report(1, BASIC_CLUSTER, locationDesc=[2, 69, 49])
        assert convert_report(report, router) == {"error_text": "E1", "error_text_raw": "E1"}

    def test_no_error(self, router):
        report = _report(1, BASIC_CLUSTER, locationDesc=[0])
        assert convert_report(report, router) == {"error_text": "", "error_text_raw": ""}

    def test_unknown_error(self, router):
        ctx = ConversionContext(ErrorTextPolicy(fallback="Check the unit"))
        report = _report(1, BASIC_CLUSTER, locationDesc="low refrigerant")
        assert convert_report(report, router, ctx) == {
            "error_text": "Check the unit",
            "error_text_raw": "low refrigerant",
        }

    def test_passthrough(self, router):
        ctx = ConversionContext(ErrorTextPolicy(mode="passthrough"))
        report = _report(1, BASIC_CLUSTER, locationDesc="low refrigerant")
        assert convert_report(report, router, ctx)["error_text"] == "low refrigerant"

    def test_only_thermostat_endpoint(self, router):
        assert convert_report(_report(2, BASIC_CLUSTER, locationDesc="E1"), router) == {}

    def test_other_basic_attributes(self, router):
        assert convert_report(_report(1, BASIC_CLUSTER, modelId="acw02-z"), router) == {}


def test_non_state_messages_ignored(router):
    report = _report(1, FAN_CONTROL_CLUSTER, kind="configureReportingResponse", fanMode=1)
    assert convert_report(report, router) == {}
