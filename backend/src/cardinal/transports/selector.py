from typing import Callable, NamedTuple

from loguru import logger

from ..utilities import FORCE_MOCK, MODE_MOCK_FALLBACK, MODE_REAL, TOPIC_NAME, InitializationError
from .base import Publisher, Subscriber
from .mock import MockTransport
from .native import CtypesNativeService, NativeService
from .real import create_real_transport

STATUS_REAL = "Using real Fast DDS"
STATUS_MOCK = "Using mock DDS (Fast DDS failed)"


class Selection(NamedTuple):
    publisher: Publisher
    subscriber: Subscriber
    mode: str
    status: str

    def close(self):
        self.publisher.close()
        self.subscriber.close()


def select_transport(service_factory: Callable[[], NativeService] = CtypesNativeService,
                     topic: str = TOPIC_NAME,
                     force_mock: bool = FORCE_MOCK) -> Selection:
    """
    Pick the transport for this run.

    The real Fast DDS transport is tried first; any failure while building it
    falls back to a fresh MockTransport. Never raises.
    """
    try:
        if force_mock:
            raise InitializationError("real transport disabled by configuration")
        publisher, subscriber = create_real_transport(service_factory(), topic)
    except Exception as exc:
        logger.warning("Real DDS failed: {}, using mock DDS", exc)
        system = MockTransport()
        return Selection(system.create_publisher(), system.create_subscriber(),
                         MODE_MOCK_FALLBACK, STATUS_MOCK)

    logger.info("Using real Fast DDS on topic {}", topic)
    return Selection(publisher, subscriber, MODE_REAL, STATUS_REAL)
