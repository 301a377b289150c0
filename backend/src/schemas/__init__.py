from .schemas import ClientMessage, TimerFrame
