"""Interface of the transport that carries reports and requests to devices."""

import importlib
from typing import Any, Callable, Dict, Mapping, Protocol, Sequence

from errors import ConfigurationError
from models import AttributeReport


class TransportListener(Protocol):
    """Receives what the transport decodes from the network."""

    def on_attribute_report(self, address: str, report: AttributeReport) -> None:
        ...

    def on_device_event(self, address: str, event: str) -> None:
        ...


class Transport(Protocol):
    """Reads, writes and commands addressed to one device endpoint."""

    async def start(self, listener: TransportListener) -> None:
        ...

    async def stop(self) -> None:
        ...

    async def read_attributes(
        self, address: str, endpoint_id: int, cluster: str, attributes: Sequence[str]
    ) -> None:
        ...

    async def write_attributes(
        self, address: str, endpoint_id: int, cluster: str, values: Mapping[str, Any]
    ) -> None:
        ...

    async def invoke_command(
        self, address: str, endpoint_id: int, cluster: str, command: str, params: Mapping[str, Any]
    ) -> None:
        ...


def load_transport_factory(spec: str) -> Callable[[Dict[str, Any]], Transport]:
    """Resolve a ``"package.module:callable"`` transport factory."""
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigurationError(f"Invalid transport factory '{spec}', expected 'module:callable'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import transport module '{module_name}': {e}") from e
    factory = getattr(module, attr, None)
    if not callable(factory):
        raise ConfigurationError(f"'{spec}' is not a callable transport factory")
    return factory
