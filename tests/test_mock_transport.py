import asyncio

import pytest

from cardinal.schemas import Envelope
from cardinal.transports import MockTransport
from cardinal.utilities import SerializationError


def test_publish_then_receive_in_order_exactly_once():
    async def scenario():
        system = MockTransport()
        pub, sub = system.create_publisher(), system.create_subscriber()
        for content in ("A", "B", "C"):
            await pub.publish(Envelope(content=content))
        got = [await sub.receive() for _ in range(4)]
        return got

    got = asyncio.run(scenario())
    assert [e.content for e in got[:3]] == ["A", "B", "C"]
    assert got[3] is None


def test_round_trip_keeps_content_and_timestamp():
    async def scenario():
        system = MockTransport()
        env = Envelope(content="ü" * 127)
        await system.create_publisher().publish(env)
        return env, await system.create_subscriber().receive()

    sent, received = asyncio.run(scenario())
    assert received.content == sent.content
    assert received.timestamp == sent.timestamp


def test_ring_buffer_drops_oldest_past_capacity():
    async def scenario():
        system = MockTransport()
        pub = system.create_publisher()
        for i in range(150):
            await pub.publish(Envelope(content=str(i)))
            assert len(system) <= 100
        return system

    system = asyncio.run(scenario())
    assert len(system) == 100
    assert system.pop().content == "50"


def test_receive_on_empty_is_idempotent():
    async def scenario():
        system = MockTransport()
        sub = system.create_subscriber()
        return [await sub.receive() for _ in range(5)], len(system)

    results, size = asyncio.run(scenario())
    assert results == [None] * 5
    assert size == 0


def test_subscribers_compete_for_one_queue():
    async def scenario():
        system = MockTransport()
        pub = system.create_publisher()
        first, second = system.create_subscriber(), system.create_subscriber()
        await pub.publish(Envelope(content="only"))
        return await first.receive(), await second.receive()

    a, b = asyncio.run(scenario())
    assert a.content == "only"
    assert b is None


def test_mock_enforces_native_length_limit():
    async def scenario():
        system = MockTransport()
        await system.create_publisher().publish(Envelope(content="x" * 256))

    with pytest.raises(SerializationError):
        asyncio.run(scenario())


def test_rejected_publish_leaves_buffer_untouched():
    async def scenario():
        system = MockTransport()
        try:
            await system.create_publisher().publish(Envelope(content="a\x00b"))
        except SerializationError:
            pass
        return len(system)

    assert asyncio.run(scenario()) == 0


def test_255_byte_content_round_trips_exactly():
    content = "ü" * 127 + "x"   # 255 bytes

    async def scenario():
        system = MockTransport()
        await system.create_publisher().publish(Envelope(content=content))
        return await system.create_subscriber().receive()

    assert len(content.encode()) == 255
    assert asyncio.run(scenario()).content == content
