"""Shared fakes for the ACW02 bridge tests."""

import asyncio
from typing import Any, Dict, List, Optional

import pytest


class FakeTransport:
    """Records every call; raises for attributes/commands listed in ``fail``."""

    def __init__(self, fail=(), delay: float = 0.0):
        self.calls: List[tuple] = []
        self.fail = set(fail)
        self.delay = delay
        self.listener = None
        self.stopped = False

    async def start(self, listener):
        self.listener = listener

    async def stop(self):
        self.stopped = True

    async def _maybe_fail(self, names):
        if self.delay:
            await asyncio.sleep(self.delay)
        for name in names:
            if name in self.fail:
                raise RuntimeError(f"{name} timed out")

    async def read_attributes(self, address, endpoint_id, cluster, attributes):
        self.calls.append(("read", address, endpoint_id, cluster, tuple(attributes)))
        await self._maybe_fail(attributes)

    async def write_attributes(self, address, endpoint_id, cluster, values):
        self.calls.append(("write", address, endpoint_id, cluster, dict(values)))
        await self._maybe_fail(values)

    async def invoke_command(self, address, endpoint_id, cluster, command, params):
        self.calls.append(("command", address, endpoint_id, cluster, command))
        await self._maybe_fail([command])


class FakeTimerHandle:
    def __init__(self, delay, callback, args):
        self.delay = delay
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class FakeLoop:
    """Collects call_later timers so tests decide when they fire."""

    def __init__(self):
        self.timers: List[FakeTimerHandle] = []

    def call_later(self, delay, callback, *args):
        handle = FakeTimerHandle(delay, callback, args)
        self.timers.append(handle)
        return handle

    def create_task(self, coro):
        return asyncio.get_running_loop().create_task(coro)

    @property
    def pending(self) -> List[FakeTimerHandle]:
        return [h for h in self.timers if not h.cancelled and not h.fired]

    def fire(self, handle: FakeTimerHandle):
        handle.fired = True
        if not handle.cancelled:
            handle.callback(*handle.args)


class FakeMqtt:
    def __init__(self):
        self.connected = False
        self.closed = False
        self.published: Dict[str, str] = {}
        self.json: Dict[str, Any] = {}

    def connect(self):
        self.connected = True

    def close(self):
        self.closed = True

    def publish_retained(self, topic: str, payload: str):
        self.published[topic] = payload

    def publish_json(self, topic: str, data: Dict[str, Any]):
        self.json[topic] = data


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def fake_loop():
    return FakeLoop()


@pytest.fixture
def fake_mqtt():
    return FakeMqtt()
