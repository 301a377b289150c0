import asyncio
from datetime import datetime
from typing import Awaitable, Callable, Optional

import structlog

from utilities import MAX_INTERVAL_MS, TIMER_EVENT, DeliveryFailure, InvalidInterval, now_utc

from .models import Connection, Subscription, TimerEvent

logger = structlog.get_logger()

Clock = Callable[[], datetime]
Sleep = Callable[[float], Awaitable[None]]


def validate_interval(interval) -> int:
    """Return the interval in milliseconds, or raise InvalidInterval.

    bool is an int subclass but `true` is not an interval. Intervals
    above MAX_INTERVAL_MS are rejected.
    """
    if isinstance(interval, bool) or not isinstance(interval, int):
        raise InvalidInterval(interval)
    if interval <= 0 or interval > MAX_INTERVAL_MS:
        raise InvalidInterval(interval)
    return interval


class TimerPublisher:
    """Runs at most one repeating timer per connection and pushes a
    `timer` event to that connection on every tick.

    `clock` and `sleep` are injectable so tests can drive ticks from a
    virtual clock instead of wall time.
    """

    def __init__(
        self,
        clock: Clock = now_utc,
        sleep: Sleep = asyncio.sleep,
        on_delivery_failure: Optional[Callable[[Connection], Awaitable[None]]] = None,
    ):
        self._clock = clock
        self._sleep = sleep
        self.on_delivery_failure = on_delivery_failure

    async def subscribe(self, connection: Connection, interval) -> Subscription:
        """Start (or restart) the timer for `connection` at `interval` ms.

        An invalid interval raises InvalidInterval and leaves any running
        timer untouched.
        """
        interval_ms = validate_interval(interval)

        replaced = await self.unsubscribe(connection)
        sub = Subscription(interval_ms)
        connection.subscription = sub
        sub.task = asyncio.create_task(self._run(connection, sub))
        logger.info(
            "timer.subscribed",
            connection_id=connection.id,
            interval_ms=interval_ms,
            replaced=replaced,
        )
        return sub

    async def unsubscribe(self, connection: Connection) -> bool:
        """Cancel the timer for `connection`. Returns False if there was none."""
        sub = connection.subscription
        if sub is None:
            return False
        connection.subscription = None
        await sub.stop()
        logger.info("timer.unsubscribed", connection_id=connection.id, ticks=sub.ticks)
        return True

    async def _run(self, connection: Connection, sub: Subscription):
        while True:
            await self._sleep(sub.interval)
            event = TimerEvent(self._clock())
            try:
                await connection.send(TIMER_EVENT, event.payload())
            except DeliveryFailure as exc:
                logger.info(
                    "timer.delivery_failed",
                    connection_id=connection.id,
                    reason=exc.reason,
                    ticks=sub.ticks,
                )
                break
            sub.ticks += 1

        # undeliverable tick: same as a disconnect
        if connection.subscription is sub:
            connection.subscription = None
        if self.on_delivery_failure is not None:
            await self.on_delivery_failure(connection)
