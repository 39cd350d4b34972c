from .base import Publisher, Subscriber
from .mock import MockPublisher, MockSubscriber, MockTransport
from .native import CtypesNativeService, NativeHandle, NativeService
from .real import RealPublisher, RealSubscriber, create_real_transport, decode_envelope
from .selector import STATUS_MOCK, STATUS_REAL, Selection, select_transport
