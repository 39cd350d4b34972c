import asyncio

from cardinal.schemas import Envelope
from cardinal.transports import MockPublisher, MockSubscriber, RealPublisher, RealSubscriber, select_transport
from cardinal.transports.selector import STATUS_MOCK, STATUS_REAL
from cardinal.utilities import MODE_MOCK_FALLBACK, MODE_REAL, InitializationError

from conftest import FakeNativeService


def test_selects_real_when_construction_succeeds(fake_service):
    selection = select_transport(lambda: fake_service, force_mock=False)
    assert selection.mode == MODE_REAL
    assert selection.status == STATUS_REAL
    assert isinstance(selection.publisher, RealPublisher)
    assert isinstance(selection.subscriber, RealSubscriber)


def test_falls_back_when_handle_is_null():
    selection = select_transport(lambda: FakeNativeService(fail_publisher=True), force_mock=False)
    assert selection.mode == MODE_MOCK_FALLBACK
    assert selection.status == STATUS_MOCK
    assert isinstance(selection.publisher, MockPublisher)
    assert isinstance(selection.subscriber, MockSubscriber)


def test_falls_back_when_library_cannot_load():
    def broken():
        raise InitializationError("no library")

    assert select_transport(broken, force_mock=False).mode == MODE_MOCK_FALLBACK


def test_partial_real_construction_is_released_before_fallback():
    service = FakeNativeService(fail_subscriber=True)
    selection = select_transport(lambda: service, force_mock=False)
    assert selection.mode == MODE_MOCK_FALLBACK
    assert service.destroyed == [("publisher", 1)]


def test_force_mock_skips_native(fake_service):
    calls = []

    def factory():
        calls.append(1)
        return fake_service

    assert select_transport(factory, force_mock=True).mode == MODE_MOCK_FALLBACK
    assert calls == []


def test_fallback_pair_shares_one_mock_system():
    async def scenario():
        selection = select_transport(lambda: FakeNativeService(fail_publisher=True), force_mock=False)
        await selection.publisher.publish(Envelope(content="through the mock"))
        return await selection.subscriber.receive()

    assert asyncio.run(scenario()).content == "through the mock"
