"""Periodic reads of attributes the device cannot report on its own."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Set, Tuple

from models import CommandIntent, DeviceEvent, IntentResult, PollConfig

logger = logging.getLogger(__name__)


async def run_isolated(
    execute: Callable[[CommandIntent], Awaitable[Any]],
    intents: Iterable[CommandIntent],
) -> List[IntentResult]:
    """
    Issue ``intents`` in order and wait for all of them. A failing intent is
    logged and reported in its IntentResult; it never cancels its siblings.
    """

    async def _run(intent: CommandIntent) -> IntentResult:
        try:
            await execute(intent)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"{intent.describe()} failed: {e}")
            return IntentResult(intent=intent, ok=False, error=e)
        return IntentResult(intent=intent, ok=True)

    return list(await asyncio.gather(*(_run(i) for i in intents)))


class PollScheduler:
    """
    Owns one poll timer per device address:
      Stopped --start/join--> Running(interval) --interval change--> Running(new)
      Running --stop/leave or interval <= 0--> Stopped
    """

    def __init__(
        self,
        poll: Callable[[str], Awaitable[Any]],
        config_for: Callable[[str], PollConfig],
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self._poll = poll
        self._config_for = config_for
        self._loop = loop
        self._timers: Dict[str, Tuple[object, asyncio.TimerHandle]] = {}
        self._batches: Dict[str, "asyncio.Task[Any]"] = {}
        self._started: Set[str] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def is_running(self, address: str) -> bool:
        """True while a poll timer is armed for ``address``."""
        return address in self._timers

    def on_device_event(self, address: str, event: DeviceEvent) -> None:
        """Join polls at once and starts; start only starts; stop and leave stop."""
        if event is DeviceEvent.JOIN:
            self.start(address, poll_now=True)
        elif event is DeviceEvent.START:
            self.start(address)
        else:
            self.stop(address)

    def start(self, address: str, poll_now: bool = False) -> bool:
        """Enter Running with the configured interval; False when polling is disabled."""
        self._started.add(address)
        config = self._config_for(address)
        if not config.is_active:
            logger.info(f"Polling disabled for {address}")
            self.cancel(address)
            return False
        if poll_now:
            self._spawn_batch(address)
        self.arm(address, config.interval_seconds)
        return True

    def stop(self, address: str) -> None:
        """Enter Stopped: no timer and no in-flight batch."""
        self._started.discard(address)
        self.cancel(address)

    def on_interval_changed(self, address: str) -> None:
        """Re-read the interval of a started device and re-arm or stop its timer."""
        if address not in self._started:
            return
        self.start(address)

    def arm(self, address: str, interval: float) -> None:
        """Replace any timer for ``address`` with one firing in ``interval`` seconds."""
        self._cancel_timer(address)
        token = object()
        handle = self.loop.call_later(interval, self._tick, address, token)
        self._timers[address] = (token, handle)
        logger.debug(f"Poll timer armed for {address}: {interval}s")

    def cancel(self, address: str) -> None:
        """Cancel the timer and any in-flight poll batch of ``address``."""
        if self._cancel_timer(address):
            logger.debug(f"Poll timer cancelled for {address}")
        batch = self._batches.pop(address, None)
        if batch is not None and not batch.done():
            batch.cancel()

    def _cancel_timer(self, address: str) -> bool:
        entry = self._timers.pop(address, None)
        if entry is None:
            return False
        entry[1].cancel()
        return True

    def _tick(self, address: str, token: object) -> None:
        entry = self._timers.get(address)
        if entry is None or entry[0] is not token:
            return
        del self._timers[address]
        config = self._config_for(address)
        if not config.is_active:
            logger.info(f"Polling disabled for {address}, stopping timer")
            self.cancel(address)
            return
        self._spawn_batch(address)
        self.arm(address, config.interval_seconds)

    def _spawn_batch(self, address: str) -> None:
        running = self._batches.get(address)
        if running is not None and not running.done():
            logger.debug(f"Previous poll of {address} still running, skipping")
            return
        task = self.loop.create_task(self._run_batch(address))
        self._batches[address] = task
        task.add_done_callback(lambda t, a=address: self._batch_done(a, t))

    def _batch_done(self, address: str, task: "asyncio.Task[Any]") -> None:
        if self._batches.get(address) is task:
            del self._batches[address]

    async def _run_batch(self, address: str) -> None:
        try:
            await self._poll(address)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Poll of {address} failed: {e}", exc_info=True)
