from .timer_client import TimerCallback, subscribe_to_timer
