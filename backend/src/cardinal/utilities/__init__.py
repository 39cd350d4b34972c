from .constants import *  # noqa: F401,F403
from .errors import (
    CardinalError,
    DashboardError,
    DecodeError,
    InitializationError,
    SerializationError,
    TransportError,
)
from .utility_functions import format_status, make_error, make_pong, make_snapshot_event, now_ts, utc_now
