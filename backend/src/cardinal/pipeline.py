import asyncio
from typing import AsyncIterator, List, Optional

from loguru import logger

from .models import DisplayQueue, PipelineStats
from .schemas import Envelope, Snapshot, Stats, utc_now
from .transports import Publisher, Selection, Subscriber
from .utilities import PUBLISH_INTERVAL, RECEIVE_INTERVAL, CardinalError


async def ticks(period: float) -> AsyncIterator[int]:
    """
    Fixed-rate ticker. The first tick fires immediately; later ticks keep to
    the schedule even when the loop body ran long.
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time()
    count = 0
    while True:
        delay = deadline - loop.time()
        if delay > 0:
            await asyncio.sleep(delay)
        count += 1
        yield count
        deadline += period


async def producer_loop(publisher: Publisher, display: DisplayQueue,
                        stats: Optional[PipelineStats] = None,
                        period: float = PUBLISH_INTERVAL):
    ''' Publish "Hello World #N" every period; successful envelopes go to the display queue.'''
    last_ts = None
    try:
        async for counter in ticks(period):
            timestamp = utc_now()
            # wall clock may step back; keep this loop's timestamps non-decreasing
            if last_ts is not None and timestamp < last_ts:
                timestamp = last_ts
            last_ts = timestamp
            envelope = Envelope(content=f"Hello World #{counter}", timestamp=timestamp)
            try:
                await publisher.publish(envelope)
            except CardinalError as exc:
                logger.error("Error publishing {!r}: {}", envelope.content, exc)
                if stats:
                    stats.record_publish_error()
                continue
            except Exception:
                logger.exception("Unexpected error publishing {!r}", envelope.content)
                if stats:
                    stats.record_publish_error()
                continue
            logger.info("Published: {}", envelope.content)
            display.push(envelope)
            if stats:
                stats.record_published()
    finally:
        publisher.close()


async def consumer_loop(subscriber: Subscriber, display: DisplayQueue,
                        stats: Optional[PipelineStats] = None,
                        period: float = RECEIVE_INTERVAL):
    ''' Poll the subscriber every period and push whatever arrives to the display queue.'''
    try:
        async for _ in ticks(period):
            try:
                envelope = await subscriber.receive()
            except Exception:
                # one bad poll must not end the loop
                logger.exception("Error receiving")
                continue
            if envelope is None:
                continue
            logger.info("Received: {}", envelope.content)
            display.push(envelope)
            if stats:
                stats.record_received()
    finally:
        subscriber.close()


class Pipeline:
    ''' Producer and consumer loops around one transport selection.'''

    def __init__(self, selection: Selection,
                 display: Optional[DisplayQueue] = None,
                 publish_interval: float = PUBLISH_INTERVAL,
                 receive_interval: float = RECEIVE_INTERVAL):
        self.selection = selection
        self.display = display if display is not None else DisplayQueue()
        self.stats = PipelineStats()
        self.publish_interval = publish_interval
        self.receive_interval = receive_interval
        self._tasks: List[asyncio.Task] = []

    @property
    def mode(self) -> str:
        return self.selection.mode

    @property
    def status(self) -> str:
        return self.selection.status

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    def start(self):
        if self._tasks:
            raise RuntimeError("pipeline already started")
        self._tasks = [
            asyncio.create_task(
                producer_loop(self.selection.publisher, self.display, self.stats, self.publish_interval),
                name="producer"),
            asyncio.create_task(
                consumer_loop(self.selection.subscriber, self.display, self.stats, self.receive_interval),
                name="consumer"),
        ]

    async def stop(self):
        ''' Cancel both loops and release the transport. The display queue is discarded.'''
        for task in self._tasks:
            task.cancel()
        try:
            results = await asyncio.gather(*self._tasks, return_exceptions=True)
            for task, result in zip(self._tasks, results):
                if isinstance(result, Exception):
                    logger.opt(exception=result).error("{} loop failed", task.get_name())
        finally:
            # a task cancelled before its first step never reaches its finally block
            self.selection.close()
            self.display.clear()
            self._tasks = []

    async def publish(self, content: str) -> Envelope:
        ''' Publish a caller supplied envelope through the active transport.'''
        envelope = Envelope(content=content)
        try:
            await self.selection.publisher.publish(envelope)
        except CardinalError:
            self.stats.record_publish_error()
            raise
        self.display.push(envelope)
        self.stats.record_published()
        return envelope

    def snapshot(self) -> Snapshot:
        return Snapshot(
            messages=self.display.snapshot(),
            status=self.status,
            mode=self.mode,
            active=self.display.is_active(),
        )

    def stats_view(self) -> Stats:
        return Stats(
            published=self.stats.published,
            received=self.stats.received,
            publish_errors=self.stats.publish_errors,
            decode_drops=self.selection.subscriber.dropped,
            uptime_sec=int(self.stats.uptime()),
            message_rate=round(self.stats.message_rate(), 3),
        )
