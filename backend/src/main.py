import json
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from models import Connection, ConnectionRegistry
from schemas import ClientMessage
from utilities import (
    ERROR_EVENT,
    PING_EVENT,
    PONG_EVENT,
    SERVICE_TITLE,
    SUBSCRIBE_EVENT,
    UNSUBSCRIBE_EVENT,
    WS_PATH,
    DeliveryFailure,
    InvalidInterval,
    make_error,
    now_ts,
    now_utc,
)

logger = structlog.get_logger()

# Global registry
REGISTRY = ConnectionRegistry()

# Stats
START_TS = now_utc()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("timerstream.starting", ws_path=WS_PATH)
    yield
    # cancel every running timer before the loop goes away
    await REGISTRY.close_all()
    logger.info("timerstream.shutdown")


app = FastAPI(title=SERVICE_TITLE, lifespan=lifespan)


# -------------- Protocol handling --------------
async def handle_message(conn: Connection, data: str):
    """Dispatch one client frame. Interval errors are dropped silently."""
    try:
        payload = json.loads(data)
    except ValueError:
        # JSONDecodeError, or an integer literal past the int digit limit
        await conn.send(ERROR_EVENT, make_error("BAD_REQUEST", "invalid json"))
        return
    try:
        msg = ClientMessage.model_validate(payload)
    except ValidationError:
        await conn.send(ERROR_EVENT, make_error("BAD_REQUEST", "event required"))
        return

    if msg.event == SUBSCRIBE_EVENT:
        try:
            await REGISTRY.publisher.subscribe(conn, msg.data)
        except InvalidInterval as exc:
            # no stream is started and nothing is sent back
            logger.warning("timer.invalid_interval", connection_id=conn.id, interval=exc.interval)
        return

    if msg.event == UNSUBSCRIBE_EVENT:
        await REGISTRY.publisher.unsubscribe(conn)
        return

    if msg.event == PING_EVENT:
        await conn.send(PONG_EVENT, now_ts())
        return

    # unknown event
    await conn.send(ERROR_EVENT, make_error("BAD_REQUEST", f"unknown event: {msg.event}"))


# -------------- WebSocket handling --------------
@app.websocket(WS_PATH)
async def websocket_endpoint(ws: WebSocket):
    await ws.accept()
    conn = REGISTRY.on_connect(ws)
    try:
        while True:
            message = await ws.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            data = message.get("text")
            if data is None:
                await conn.send(ERROR_EVENT, make_error("BAD_REQUEST", "text frames only"))
                continue
            await handle_message(conn, data)
    except (WebSocketDisconnect, DeliveryFailure):
        # peer went away; cleanup below
        pass
    except Exception:
        logger.exception("timerstream.connection_error", connection_id=conn.id)
        try:
            await conn.send(ERROR_EVENT, make_error("INTERNAL", "server error"))
        except DeliveryFailure:
            pass
    finally:
        await REGISTRY.on_disconnect(conn)


# -------------- REST endpoints --------------
@app.get("/health")
async def rest_health():
    uptime_sec = int((now_utc() - START_TS).total_seconds())
    return {
        "uptime_sec": uptime_sec,
        "connections": len(REGISTRY),
        "subscriptions": REGISTRY.subscription_count(),
    }

@app.get("/stats")
async def rest_stats():
    out = []
    for conn in REGISTRY.connections():
        sub = conn.subscription
        out.append({
            "id": conn.id,
            "interval_ms": sub.interval_ms if sub else None,
            "ticks": sub.ticks if sub else 0,
        })
    return {"connections": out}
