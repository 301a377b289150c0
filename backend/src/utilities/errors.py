class TimerStreamError(Exception):
    """Base class for errors scoped to a single connection."""


class InvalidInterval(TimerStreamError, ValueError):
    """A subscribe request carried a missing, non-integer or non-positive interval."""

    def __init__(self, interval):
        super().__init__(f"invalid timer interval: {interval!r}")
        self.interval = interval


class DeliveryFailure(TimerStreamError):
    """Sending to a closed or broken connection failed."""

    def __init__(self, connection_id: str, reason: str = "connection closed"):
        super().__init__(f"delivery to {connection_id} failed: {reason}")
        self.connection_id = connection_id
        self.reason = reason


class ServerError(TimerStreamError):
    """The server answered with an `error` event."""

    def __init__(self, code: str, message: str):
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message
