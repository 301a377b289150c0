from datetime import datetime, timezone
from typing import Any


def now_utc() -> datetime:
    return datetime.now(timezone.utc)

def now_ts() -> str:
    return now_utc().isoformat()

# Server -> client frames are built as dicts: {"event": ..., "data": ...}
def make_frame(event: str, data: Any = None):
    return {"event": event, "data": data}

def make_error(code: str, message: str):
    return {"code": code, "message": message}
