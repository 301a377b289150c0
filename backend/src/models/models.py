import json
import uuid
import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from fastapi import WebSocket

from utilities import DeliveryFailure, make_frame, now_utc

# ------------ In-memory structures ------------
@dataclass(frozen=True)
class TimerEvent:
    ''' One tick of a subscription. Sent to exactly one connection.'''
    timestamp: datetime

    def payload(self) -> str:
        return self.timestamp.isoformat()


class Subscription:
    ''' Binds one connection to one repeating timer.'''

    def __init__(self, interval_ms: int):
        self.interval_ms = interval_ms
        # the ticking task, owned exclusively by this subscription
        self.task: Optional[asyncio.Task] = None
        self.ticks = 0
        self.created_at = now_utc()

    @property
    def interval(self) -> float:
        return self.interval_ms / 1000

    @property
    def active(self) -> bool:
        return self.task is not None and not self.task.done()

    # cancel the timer; a tick already in flight may or may not complete
    async def stop(self):
        task = self.task
        if task is None or task.done():
            return
        task.cancel()
        if task is asyncio.current_task():
            return
        try:
            await task
        except asyncio.CancelledError:
            pass


class Connection:
    ''' Handle to one duplex channel to exactly one peer.'''

    def __init__(self, websocket: WebSocket, connection_id: Optional[str] = None):
        self.id = connection_id or uuid.uuid4().hex
        self.websocket = websocket
        self.open = True
        self.subscription: Optional[Subscription] = None
        self.connected_at = now_utc()

    @property
    def subscribed(self) -> bool:
        return self.subscription is not None and self.subscription.active

    async def send(self, event: str, data: Any = None):
        if not self.open:
            raise DeliveryFailure(self.id)
        try:
            await self.websocket.send_text(json.dumps(make_frame(event, data)))
        except Exception as exc:
            # (broken pipe / closed) -> no more sends on this connection
            self.open = False
            raise DeliveryFailure(self.id, str(exc) or type(exc).__name__) from exc

    def __repr__(self):
        return f"<Connection {self.id} open={self.open}>"
