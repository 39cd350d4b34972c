from collections import deque

import pytest

from cardinal.transports import MockTransport, Selection
from cardinal.transports.selector import STATUS_MOCK
from cardinal.utilities import MODE_MOCK_FALLBACK


class FakeNativeService:
    """
    In-memory stand-in for the Fast DDS C shim. Publishers and subscribers on
    the same topic share one queue of raw (bytes, timestamp) frames.
    """

    def __init__(self, fail_publisher=False, fail_subscriber=False, publish_status=0):
        self.fail_publisher = fail_publisher
        self.fail_subscriber = fail_subscriber
        self.publish_status = publish_status
        self.frames = deque()
        self.destroyed = []
        self.publish_calls = 0
        self._next = 1

    def _new_handle(self):
        handle = self._next
        self._next += 1
        return handle

    def create_publisher(self, topic):
        return None if self.fail_publisher else self._new_handle()

    def publish(self, handle, data, timestamp):
        self.publish_calls += 1
        if self.publish_status == 0:
            self.frames.append((data, timestamp))
        return self.publish_status

    def destroy_publisher(self, handle):
        self.destroyed.append(("publisher", handle))

    def create_subscriber(self, topic):
        return None if self.fail_subscriber else self._new_handle()

    def receive(self, handle):
        if not self.frames:
            return 1, b"", 0
        data, timestamp = self.frames.popleft()
        return 0, data, timestamp

    def destroy_subscriber(self, handle):
        self.destroyed.append(("subscriber", handle))


@pytest.fixture
def fake_service():
    return FakeNativeService()


@pytest.fixture
def mock_selection():
    system = MockTransport()
    return Selection(system.create_publisher(), system.create_subscriber(), MODE_MOCK_FALLBACK, STATUS_MOCK)
