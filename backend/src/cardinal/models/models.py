import threading
import time
from collections import deque
from typing import Deque, List, Optional

from ..schemas import Envelope
from ..utilities import ACTIVITY_WINDOW, DISPLAY_QUEUE_SIZE

# ------------ In-memory structures ------------
class DisplayQueue:
    ''' Recently seen envelopes, shared by both loops and the dashboard.'''

    def __init__(self, capacity: int = DISPLAY_QUEUE_SIZE):
        # deque(maxlen) drops the oldest entry when a push hits capacity
        self.capacity = capacity
        self._items: Deque[Envelope] = deque(maxlen=capacity)
        self._lock = threading.Lock()
        self._last_change: Optional[float] = None

    def push(self, envelope: Envelope):
        with self._lock:
            self._items.append(envelope)
            self._last_change = time.monotonic()

    def snapshot(self) -> List[Envelope]:
        ''' Oldest first.'''
        with self._lock:
            return list(self._items)

    def is_active(self, window: float = ACTIVITY_WINDOW) -> bool:
        with self._lock:
            last = self._last_change
        return last is not None and time.monotonic() - last < window

    def clear(self):
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class PipelineStats:
    ''' Counters updated by the producer and consumer loops.'''

    def __init__(self):
        self._lock = threading.Lock()
        self.started_at = time.monotonic()
        self.published = 0
        self.received = 0
        self.publish_errors = 0

    def record_published(self):
        with self._lock:
            self.published += 1

    def record_received(self):
        with self._lock:
            self.received += 1

    def record_publish_error(self):
        with self._lock:
            self.publish_errors += 1

    def uptime(self) -> float:
        return time.monotonic() - self.started_at

    def message_rate(self) -> float:
        # received messages per second since start
        elapsed = self.uptime()
        if elapsed <= 0:
            return 0.0
        with self._lock:
            return self.received / elapsed
