from typing import Any, Optional

from pydantic import BaseModel


class ClientMessage(BaseModel):
    ''' One client -> server frame: {"event": "subscribeToTimer", "data": 1000}.'''
    event: str
    data: Optional[Any] = None


class TimerFrame(BaseModel):
    ''' One server -> client frame as seen by the client helper.'''
    event: str
    data: Optional[Any] = None
