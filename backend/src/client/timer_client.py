import json
from typing import Callable, Optional

import structlog
import websockets

from schemas import TimerFrame
from utilities import (
    DEFAULT_CLIENT_URI,
    ERROR_EVENT,
    SUBSCRIBE_EVENT,
    TIMER_EVENT,
    ServerError,
    make_frame,
)

logger = structlog.get_logger()

# callback(error, timestamp): exactly one of the two is set
TimerCallback = Callable[[Optional[Exception], Optional[str]], None]


async def subscribe_to_timer(
    interval: int,
    callback: TimerCallback,
    uri: str = DEFAULT_CLIENT_URI,
    max_events: Optional[int] = None,
) -> int:
    """Subscribe once and call `callback(None, timestamp)` on every tick.

    Runs until the server closes the socket, sends an `error` event, or
    `max_events` ticks have been received. Returns the number of ticks seen.
    The server drops invalid intervals without replying, so a bad interval
    simply produces no ticks.
    """
    received = 0
    async with websockets.connect(uri) as ws:
        await ws.send(json.dumps(make_frame(SUBSCRIBE_EVENT, interval)))
        logger.info("client.subscribed", uri=uri, interval_ms=interval)
        try:
            async for raw in ws:
                frame = TimerFrame.model_validate_json(raw)
                if frame.event == TIMER_EVENT:
                    received += 1
                    callback(None, frame.data)
                    if max_events is not None and received >= max_events:
                        break
                elif frame.event == ERROR_EVENT:
                    error = frame.data or {}
                    callback(ServerError(error.get("code", "UNKNOWN"), error.get("message", "")), None)
                    break
        except websockets.exceptions.ConnectionClosedError as exc:
            callback(exc, None)
    return received
