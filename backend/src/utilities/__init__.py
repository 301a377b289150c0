from .constants import *
from .errors import DeliveryFailure, InvalidInterval, ServerError, TimerStreamError
from .utility_functions import make_error, make_frame, now_ts, now_utc
