from .models import Connection, Subscription, TimerEvent
from .publisher import TimerPublisher, validate_interval
from .registry import ConnectionRegistry
