import asyncio
import threading
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple

from ..schemas import Envelope, encode_content, utc_now
from ..utilities import TOPIC_NAME, DecodeError, InitializationError, TransportError
from .base import Publisher, Subscriber
from .native import NativeHandle, NativeService


def decode_envelope(data: bytes, timestamp: int) -> Envelope:
    ''' Build an envelope from a native receive buffer.'''
    raw = data.split(b"\0", 1)[0]
    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError(f"received bytes are not valid UTF-8: {exc}") from exc
    try:
        ts = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        ts = utc_now()
    return Envelope(content=content, timestamp=ts)


class _RealEndpoint:
    """
    One native publisher or subscriber bound to a topic.

    Native calls run in a worker thread under ``_call_lock``; ``close`` takes
    the same lock so the handle is never destroyed under an in-flight call.
    """

    kind = "endpoint"

    def __init__(self, service: NativeService, topic: str,
                 create: Callable[[str], Optional[int]],
                 destroy: Callable[[int], None]):
        value = create(topic)
        if not value:
            raise InitializationError(f"Failed to create DDS {self.kind} on topic {topic!r}")
        self.topic = topic
        self._service = service
        self._handle = NativeHandle(value, destroy)
        self._call_lock = threading.Lock()

    def _call(self, fn, *args):
        with self._call_lock:
            return fn(self._handle.value, *args)

    @property
    def closed(self) -> bool:
        return self._handle.released

    def close(self):
        # runs on the event loop thread: a hung native call blocks the whole loop here
        with self._call_lock:
            self._handle.release()


class RealPublisher(_RealEndpoint, Publisher):
    kind = "publisher"

    def __init__(self, service: NativeService, topic: str = TOPIC_NAME):
        super().__init__(service, topic, service.create_publisher, service.destroy_publisher)

    async def publish(self, envelope: Envelope) -> None:
        data = encode_content(envelope)
        timestamp = int(envelope.timestamp.timestamp())
        status = await asyncio.to_thread(self._call, self._service.publish, data, timestamp)
        if status != 0:
            raise TransportError(f"Failed to publish message (status {status})", status)


class RealSubscriber(_RealEndpoint, Subscriber):
    kind = "subscriber"

    def __init__(self, service: NativeService, topic: str = TOPIC_NAME):
        super().__init__(service, topic, service.create_subscriber, service.destroy_subscriber)
        self.dropped = 0

    async def receive(self) -> Optional[Envelope]:
        status, data, timestamp = await asyncio.to_thread(self._call, self._service.receive)
        if status != 0:
            return None
        try:
            return decode_envelope(data, timestamp)
        except DecodeError:
            # undecodable payloads are dropped; only the counter records them
            self.dropped += 1
            return None


def create_real_transport(service: NativeService,
                          topic: str = TOPIC_NAME) -> Tuple[RealPublisher, RealSubscriber]:
    ''' Create both native endpoints, releasing the publisher if the subscriber fails.'''
    publisher = RealPublisher(service, topic)
    try:
        subscriber = RealSubscriber(service, topic)
    except Exception:
        publisher.close()
        raise
    return publisher, subscriber
