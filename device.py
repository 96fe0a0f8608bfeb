"""Per-device published state and intent execution."""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from constants import DEVICE_COMMAND_TIMEOUT, POLLED_PROPERTIES
from endpoint_router import EndpointRouter
from errors import Acw02Error, TransportFailure
from inbound import ConversionContext, convert_report
from models import AttributeReport, CommandIntent, IntentKind, IntentResult
from outbound import converter_for
from poll_scheduler import run_isolated
from transport import Transport

logger = logging.getLogger(__name__)

StateCallback = Callable[[str, Dict[str, Any]], None]


class Acw02Device:
    """One ACW02 unit: merges reports into its state and sends intents."""

    def __init__(
        self,
        address: str,
        transport: Transport,
        router: Optional[EndpointRouter] = None,
        context: Optional[ConversionContext] = None,
        on_state: Optional[StateCallback] = None,
        timeout: float = DEVICE_COMMAND_TIMEOUT,
    ):
        self.address = address
        self.transport = transport
        self.router = router or EndpointRouter()
        self.context = context or ConversionContext()
        self.on_state = on_state
        self.timeout = timeout
        self.state: Dict[str, Any] = {}

    def handle_report(self, report: AttributeReport) -> Dict[str, Any]:
        """Convert ``report`` and merge it; returns the applied patch."""
        patch = convert_report(report, self.router, self.context)
        self.apply(patch)
        return patch

    def apply(self, patch: Dict[str, Any]) -> None:
        if not patch:
            return
        self.state.update(patch)
        logger.debug(f"State update for {self.address}: {patch}")
        if self.on_state is not None:
            self.on_state(self.address, dict(self.state))

    async def execute(self, intent: CommandIntent) -> None:
        """Send ``intent`` to the device; any failure surfaces as TransportFailure."""
        if intent.kind is IntentKind.WRITE:
            coro = self.transport.write_attributes(
                self.address, intent.endpoint_id, intent.cluster, dict(intent.values)
            )
        elif intent.kind is IntentKind.COMMAND:
            coro = self.transport.invoke_command(
                self.address, intent.endpoint_id, intent.cluster, intent.command, dict(intent.params)
            )
        else:
            coro = self.transport.read_attributes(
                self.address, intent.endpoint_id, intent.cluster, list(intent.attributes)
            )
        logger.debug(f"Sending {intent.describe()} to {self.address}")
        try:
            await asyncio.wait_for(coro, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise TransportFailure(f"{intent.describe()} timed out after {self.timeout}s") from e
        except TransportFailure:
            raise
        except Exception as e:
            raise TransportFailure(f"{intent.describe()} failed: {e}") from e

    async def set_property(self, key: str, value: Any) -> Dict[str, Any]:
        """Write ``value`` to property ``key``; returns the optimistic state applied."""
        converter = converter_for(key)
        intent = converter.set(self.router, value)
        await self.execute(intent)
        patch = converter.optimistic_state(value)
        self.apply(patch)
        return patch

    async def get_property(self, key: str) -> None:
        """Request a read-back; the value arrives later as a readResponse."""
        await self.execute(converter_for(key).get(self.router))

    async def poll(self) -> List[IntentResult]:
        """Read every attribute the device cannot report, in declared order."""
        intents: List[CommandIntent] = []
        for key in POLLED_PROPERTIES:
            try:
                intents.append(converter_for(key).get(self.router))
            except Acw02Error as e:
                logger.error(f"Cannot poll {key} on {self.address}: {e}")
        results = await run_isolated(self.execute, intents)
        failed = sum(1 for r in results if not r.ok)
        if failed:
            logger.warning(f"Poll of {self.address}: {failed}/{len(results)} reads failed")
        return results
