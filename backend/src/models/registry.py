from typing import Dict, List, Optional

import structlog
from fastapi import WebSocket

from .models import Connection
from .publisher import TimerPublisher

logger = structlog.get_logger()


class ConnectionRegistry:
    ''' Tracks live connections and guarantees their timers are cancelled.'''

    def __init__(self, publisher: Optional[TimerPublisher] = None):
        self.publisher = publisher or TimerPublisher()
        # a failed delivery is handled exactly like a disconnect
        self.publisher.on_delivery_failure = self.on_disconnect
        self._connections: Dict[str, Connection] = {}

    def on_connect(self, websocket: WebSocket) -> Connection:
        conn = Connection(websocket)
        self._connections[conn.id] = conn
        logger.info("registry.connected", connection_id=conn.id, connections=len(self))
        return conn

    async def on_disconnect(self, connection: Connection):
        # no-op for connections already removed
        if connection.id not in self._connections:
            return
        await self.publisher.unsubscribe(connection)
        connection.open = False
        self._connections.pop(connection.id, None)
        logger.info("registry.disconnected", connection_id=connection.id, connections=len(self))

    async def close_all(self):
        for conn in self.connections():
            await self.on_disconnect(conn)

    def get(self, connection_id: str) -> Optional[Connection]:
        return self._connections.get(connection_id)

    def connections(self) -> List[Connection]:
        return list(self._connections.values())

    def subscription_count(self) -> int:
        return sum(1 for c in self._connections.values() if c.subscribed)

    def __len__(self):
        return len(self._connections)

    def __contains__(self, connection: Connection):
        return connection.id in self._connections
