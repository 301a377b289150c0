# ------------ Config ------------
SERVICE_TITLE = "Timer Stream"
WS_PATH = "/ws"
DEFAULT_CLIENT_URI = "ws://localhost:8000/ws"   # used by the client helper / examples

# event names on the wire
SUBSCRIBE_EVENT = "subscribeToTimer"        # client -> server, data: interval in ms
UNSUBSCRIBE_EVENT = "unsubscribeFromTimer"  # client -> server
PING_EVENT = "ping"
TIMER_EVENT = "timer"                       # server -> client, data: iso timestamp
PONG_EVENT = "pong"
ERROR_EVENT = "error"

# longest accepted timer cadence (ms): one day
MAX_INTERVAL_MS = 24 * 60 * 60 * 1000
# --------------------------------
