"""Main ACW02 to MQTT bridge application."""

import asyncio
import logging
import os
from typing import Any, Dict, List, Optional

import yaml

from constants import (
    DEFAULT_BASE_TOPIC,
    DEFAULT_CONFIG_FILE,
    DEFAULT_ERROR_FALLBACK,
    DEFAULT_KNOWN_ERROR_PATTERNS,
    DEFAULT_POLL_INTERVAL,
    ERROR_TEXT_MODE_CLASSIFY,
    MQTT_PAYLOAD_AVAILABLE,
    MQTT_PAYLOAD_UNAVAILABLE,
)
from device import Acw02Device
from endpoint_router import EndpointRouter
from errors import Acw02Error, ConfigurationError
from exposes import definition_payload
from inbound import ConversionContext
from models import AttributeReport, DeviceEvent, HubRequest, PollConfig
from mqtt_bridge import MqttBridge
from poll_scheduler import PollScheduler
from text_decoder import ErrorTextPolicy
from topics import topic_available, topic_definition, topic_state
from transport import Transport, load_transport_factory

logger = logging.getLogger(__name__)


def _parse_interval(value: Any, where: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid poll interval {value!r} in '{where}'") from None


def load_config(path: str = DEFAULT_CONFIG_FILE) -> Dict[str, Any]:
    """Load and validate configuration file."""
    if not os.path.exists(path):
        raise FileNotFoundError(
            f"Configuration file '{path}' not found. "
            f"Please copy '{path}.example' to '{path}' "
            f"and update with your settings."
        )

    try:
        with open(path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in '{path}': {e}")

    if not config:
        raise ValueError(f"'{path}' is empty")
    return validate_config(config)


def validate_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Check required sections and fill in defaults."""
    if not isinstance(config, dict):
        raise ValueError("Configuration must be a mapping")

    # Validate required sections
    if 'mqtt' not in config:
        raise ValueError("Missing 'mqtt' section in configuration")
    if 'transport' not in config:
        raise ValueError("Missing 'transport' section in configuration")

    # Validate required keys
    mqtt_config = config.get('mqtt') or {}
    if 'host' not in mqtt_config:
        raise ValueError("Missing 'mqtt.host' in configuration")
    if 'port' not in mqtt_config:
        raise ValueError("Missing 'mqtt.port' in configuration")
    mqtt_config.setdefault('base_topic', DEFAULT_BASE_TOPIC)

    transport_config = config.get('transport') or {}
    if 'factory' not in transport_config:
        raise ValueError("Missing 'transport.factory' in configuration")

    polling = config.setdefault('polling', {}) or {}
    polling['interval'] = _parse_interval(polling.get('interval', DEFAULT_POLL_INTERVAL), 'polling.interval')
    enabled = polling.get('enabled', True)
    if not isinstance(enabled, bool):
        raise ValueError(f"Invalid 'polling.enabled' {enabled!r}, expected true or false")
    polling['enabled'] = enabled
    config['polling'] = polling

    devices = config.get('devices') or {}
    if not isinstance(devices, dict):
        raise ValueError("'devices' must map device addresses to settings")
    for address, settings in devices.items():
        settings = settings or {}
        if 'poll_interval' in settings:
            settings['poll_interval'] = _parse_interval(
                settings['poll_interval'], f"devices.{address}.poll_interval"
            )
        devices[address] = settings
    config['devices'] = devices

    config['mqtt'] = mqtt_config
    config['transport'] = transport_config
    config['error_text'] = config.get('error_text') or {}
    try:
        error_policy_from_config(config)
    except ConfigurationError as e:
        raise ValueError(f"Invalid 'error_text' section: {e}") from None
    return config


def error_policy_from_config(config: Dict[str, Any]) -> ErrorTextPolicy:
    """Build the error text policy from the ``error_text`` section."""
    section = config.get('error_text') or {}
    return ErrorTextPolicy(
        known_patterns=section.get('known_patterns', DEFAULT_KNOWN_ERROR_PATTERNS),
        fallback=section.get('fallback', DEFAULT_ERROR_FALLBACK),
        mode=section.get('mode', ERROR_TEXT_MODE_CLASSIFY),
    )


class Acw02MQTT:
    """Main bridge application."""

    def __init__(
        self,
        config: Dict[str, Any],
        transport: Optional[Transport] = None,
        mqtt: Optional[MqttBridge] = None,
        router: Optional[EndpointRouter] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.config = config
        self.loop = loop or asyncio.get_running_loop()
        self.request_queue: asyncio.Queue[HubRequest] = asyncio.Queue()
        self.base_topic: str = config['mqtt'].get('base_topic', DEFAULT_BASE_TOPIC)

        if mqtt is None:
            mqtt_config = config['mqtt']
            mqtt = MqttBridge(
                self.loop,
                self.request_queue,
                host=mqtt_config['host'],
                port=int(mqtt_config['port']),
                base_topic=self.base_topic,
                username=mqtt_config.get('username'),
                password=mqtt_config.get('password'),
            )
        self.mqtt = mqtt

        if transport is None:
            factory = load_transport_factory(config['transport']['factory'])
            transport = factory(config['transport'])
        self.transport = transport

        self.router = router or EndpointRouter()
        self.context = ConversionContext(error_policy_from_config(config))
        self.scheduler = PollScheduler(self._poll_device, self.poll_config)
        self.devices: Dict[str, Acw02Device] = {}

        # Per-device poll interval overrides, changeable at runtime
        self.poll_intervals: Dict[str, int] = {
            address: settings['poll_interval']
            for address, settings in config.get('devices', {}).items()
            if 'poll_interval' in settings
        }

        self.running = True
        self._tasks: List[asyncio.Task] = []

    async def start(self):
        """Start the bridge."""
        self.mqtt.connect()
        logger.info("MQTT bridge connected")
        self.mqtt.publish_json(topic_definition(self.base_topic), definition_payload(self.router.describe()))

        await self.transport.start(self)
        logger.info("Transport started")

        self._tasks = [
            asyncio.create_task(self.request_consumer_task(), name="request_consumer"),
        ]

        # Wait until tasks finish (they won't until stopped)
        await asyncio.gather(*self._tasks)

    async def stop(self):
        """Stop the bridge."""
        if not self.running:
            return
        self.running = False

        for address in list(self.devices):
            self.scheduler.stop(address)

        # Cancel tasks first
        for t in self._tasks:
            t.cancel()
        for t in self._tasks:
            try:
                await t
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.debug(f"Task {t.get_name()} ended with: {e}")

        # Then close resources
        try:
            await self.transport.stop()
        except Exception as e:
            logger.warning(f"Error stopping transport: {e}")
        try:
            self.mqtt.close()
        except Exception as e:
            logger.warning(f"Error closing MQTT connection: {e}")

    def poll_config(self, address: str) -> PollConfig:
        """Effective polling settings of ``address``."""
        interval = self.poll_intervals.get(address, self.config['polling']['interval'])
        return PollConfig(interval_seconds=interval, enabled=self.config['polling']['enabled'])

    def device(self, address: str) -> Acw02Device:
        """Return the device for ``address``, creating it on first contact."""
        device = self.devices.get(address)
        if device is None:
            device = Acw02Device(
                address,
                self.transport,
                router=self.router,
                context=self.context,
                on_state=self.publish_state,
            )
            self.devices[address] = device
            logger.info(f"Tracking device {address}")
        return device

    def publish_state(self, address: str, state: Dict[str, Any]):
        """Publish the full state of ``address`` as JSON."""
        self.mqtt.publish_json(topic_state(address, self.base_topic), state)

    def publish_availability(self, address: str, available: bool):
        """Publish retained online/offline availability."""
        value = MQTT_PAYLOAD_AVAILABLE if available else MQTT_PAYLOAD_UNAVAILABLE
        self.mqtt.publish_retained(topic_available(address, self.base_topic), value)
        logger.info(f"Published availability for {address}: {value}")

    # Transport listener

    def on_attribute_report(self, address: str, report: AttributeReport) -> None:
        """Merge a report into the device state and publish it."""
        try:
            self.device(address).handle_report(report)
        except Exception as e:
            logger.error(f"Failed to handle {report.cluster} report from {address}: {e}", exc_info=True)

    def on_device_event(self, address: str, event: str) -> None:
        """Track availability and polling across device lifecycle events."""
        try:
            parsed = DeviceEvent.parse(event)
        except ValueError:
            logger.warning(f"Unknown device event '{event}' for {address}")
            return
        logger.info(f"Device {address}: {parsed.value}")

        if parsed in (DeviceEvent.START, DeviceEvent.JOIN):
            self.device(address)
            self.publish_availability(address, True)
            self.scheduler.on_device_event(address, parsed)
            return

        self.scheduler.on_device_event(address, parsed)
        if address in self.devices:
            self.publish_availability(address, False)
        if parsed is DeviceEvent.LEAVE:
            self.devices.pop(address, None)

    async def _poll_device(self, address: str):
        device = self.devices.get(address)
        if device is None:
            logger.debug(f"Skipping poll of unknown device {address}")
            return []
        return await device.poll()

    # Hub requests

    async def handle_request(self, request: HubRequest) -> Dict[str, bool]:
        """Apply each key of ``request`` independently; returns key -> success."""
        device = self.devices.get(request.address)
        if device is None and request.action != "options":
            logger.warning(f"{request.action} request for unknown device {request.address}")
            return {}

        results: Dict[str, bool] = {}
        for key, value in request.values.items():
            try:
                if request.action == "set":
                    await device.set_property(key, value)
                elif request.action == "get":
                    await device.get_property(key)
                elif request.action == "options":
                    self.set_option(request.address, key, value)
                else:
                    raise ConfigurationError(f"Unknown action '{request.action}'")
                results[key] = True
            except Acw02Error as e:
                logger.error(f"{request.action} {key} on {request.address} failed: {e}")
                results[key] = False
        return results

    def set_option(self, address: str, key: str, value: Any):
        """Apply a runtime option; only ``poll_interval`` is supported."""
        if key != "poll_interval":
            raise ConfigurationError(f"Unknown option '{key}'")
        try:
            interval = int(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid poll interval {value!r}") from None
        self.poll_intervals[address] = interval
        logger.info(f"Poll interval for {address} set to {interval}s")
        self.scheduler.on_interval_changed(address)

    async def request_consumer_task(self):
        """Consume requests from MQTT queue and send to devices."""
        while self.running:
            request = await self.request_queue.get()
            try:
                await self.handle_request(request)
            except Exception as e:
                logger.error(f"Failed to handle request for {request.address}: {e}", exc_info=True)
