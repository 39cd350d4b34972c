import threading
from collections import deque
from typing import Deque, Optional

from ..schemas import Envelope, encode_content
from ..utilities import MOCK_BUFFER_SIZE
from .base import Publisher, Subscriber


class MockTransport:
    """
    In-process stand-in for the native transport.

    All publishers and subscribers drawn from one instance share a single
    ring buffer. Receiving consumes the entry, so subscribers compete for
    messages instead of each getting a copy.
    """

    def __init__(self, capacity: int = MOCK_BUFFER_SIZE):
        self.capacity = capacity
        # oldest entry falls off when full
        self._messages: Deque[Envelope] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def create_publisher(self) -> "MockPublisher":
        return MockPublisher(self)

    def create_subscriber(self) -> "MockSubscriber":
        return MockSubscriber(self)

    def append(self, envelope: Envelope):
        with self._lock:
            self._messages.append(envelope)

    def pop(self) -> Optional[Envelope]:
        with self._lock:
            if not self._messages:
                return None
            return self._messages.popleft()

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)


class MockPublisher(Publisher):
    def __init__(self, system: MockTransport):
        self.system = system

    async def publish(self, envelope: Envelope) -> None:
        # same content rules as the native buffer
        encode_content(envelope)
        self.system.append(envelope)


class MockSubscriber(Subscriber):
    def __init__(self, system: MockTransport):
        self.system = system
        self.dropped = 0

    async def receive(self) -> Optional[Envelope]:
        return self.system.pop()
