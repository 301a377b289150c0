"""Test fixtures — a virtual clock and a recording transport.

FakeClock replaces both `now()` and `asyncio.sleep` for the publisher, so
ticks fire only when a test calls `advance()`. FakeWebSocket records every
frame the server would have written to the wire.
"""

import asyncio
import heapq
import itertools
import json
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from models import ConnectionRegistry, TimerPublisher


async def _settle(rounds: int = 10):
    """Let every ready task run until it blocks again."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeClock:
    def __init__(self, start=datetime(2024, 1, 1, tzinfo=timezone.utc)):
        self.start = start
        self.elapsed = 0.0
        self._waiters = []
        self._seq = itertools.count()

    def now(self) -> datetime:
        return self.start + timedelta(seconds=self.elapsed)

    async def sleep(self, seconds: float):
        fut = asyncio.get_running_loop().create_future()
        heapq.heappush(self._waiters, (self.elapsed + seconds, next(self._seq), fut))
        await fut

    async def advance(self, seconds: float):
        """Move time forward, waking sleepers in deadline order."""
        target = self.elapsed + seconds
        await _settle()
        while self._waiters and self._waiters[0][0] <= target + 1e-9:
            deadline, _, fut = heapq.heappop(self._waiters)
            self.elapsed = deadline
            if not fut.done():
                fut.set_result(None)
            await _settle()
        self.elapsed = target


class FakeWebSocket:
    """Transport mock: records sent frames, can be made to fail."""

    def __init__(self):
        self.sent = []
        self.fail = False

    async def send_text(self, data: str):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(json.loads(data))

    def events(self, name: str = "timer"):
        return [f["data"] for f in self.sent if f["event"] == name]


@pytest.fixture()
def clock():
    return FakeClock()


@pytest_asyncio.fixture()
async def registry(clock):
    reg = ConnectionRegistry(TimerPublisher(clock=clock.now, sleep=clock.sleep))
    yield reg
    await reg.close_all()


@pytest.fixture()
def websocket():
    return FakeWebSocket()
