import ctypes
import threading
from typing import Callable, Optional, Protocol, Tuple

from loguru import logger

from ..utilities import FASTDDS_LIBRARY, MAX_CONTENT_BYTES, InitializationError, TransportError


class NativeService(Protocol):
    ''' The operations the bus needs from the native DDS library.'''

    def create_publisher(self, topic: str) -> Optional[int]: ...

    def publish(self, handle: int, data: bytes, timestamp: int) -> int: ...

    def destroy_publisher(self, handle: int) -> None: ...

    def create_subscriber(self, topic: str) -> Optional[int]: ...

    def receive(self, handle: int) -> Tuple[int, bytes, int]: ...

    def destroy_subscriber(self, handle: int) -> None: ...


class SimpleMessage(ctypes.Structure):
    _fields_ = [
        ("message", ctypes.c_char * MAX_CONTENT_BYTES),
        ("timestamp", ctypes.c_long),
    ]


class CtypesNativeService:
    ''' NativeService backed by the Fast DDS C shim, loaded with ctypes.'''

    def __init__(self, library_path: str = FASTDDS_LIBRARY):
        try:
            lib = ctypes.CDLL(library_path)
        except OSError as exc:
            raise InitializationError(f"cannot load {library_path}: {exc}") from exc

        lib.create_simple_publisher.argtypes = [ctypes.c_char_p]
        lib.create_simple_publisher.restype = ctypes.c_void_p
        lib.publish_simple_message.argtypes = [ctypes.c_void_p, ctypes.c_char_p, ctypes.c_long]
        lib.publish_simple_message.restype = ctypes.c_int
        lib.destroy_simple_publisher.argtypes = [ctypes.c_void_p]
        lib.destroy_simple_publisher.restype = None

        lib.create_simple_subscriber.argtypes = [ctypes.c_char_p]
        lib.create_simple_subscriber.restype = ctypes.c_void_p
        lib.receive_simple_message.argtypes = [ctypes.c_void_p, ctypes.POINTER(SimpleMessage)]
        lib.receive_simple_message.restype = ctypes.c_int
        lib.destroy_simple_subscriber.argtypes = [ctypes.c_void_p]
        lib.destroy_simple_subscriber.restype = None

        self.library_path = library_path
        self._lib = lib
        logger.debug("Loaded native DDS library {}", library_path)

    def create_publisher(self, topic: str) -> Optional[int]:
        return self._lib.create_simple_publisher(topic.encode("utf-8"))

    def publish(self, handle: int, data: bytes, timestamp: int) -> int:
        return self._lib.publish_simple_message(handle, data, timestamp)

    def destroy_publisher(self, handle: int) -> None:
        self._lib.destroy_simple_publisher(handle)

    def create_subscriber(self, topic: str) -> Optional[int]:
        return self._lib.create_simple_subscriber(topic.encode("utf-8"))

    def receive(self, handle: int) -> Tuple[int, bytes, int]:
        msg = SimpleMessage()
        status = self._lib.receive_simple_message(handle, ctypes.byref(msg))
        # c_char array fields read back as bytes up to the first NUL
        return status, msg.message, msg.timestamp

    def destroy_subscriber(self, handle: int) -> None:
        self._lib.destroy_simple_subscriber(handle)


class NativeHandle:
    ''' Owns one live native handle and releases it exactly once.'''

    def __init__(self, value: int, release: Callable[[int], None]):
        self._value: Optional[int] = value
        self._release = release
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        value = self._value
        if value is None:
            raise TransportError("native handle already released")
        return value

    @property
    def released(self) -> bool:
        return self._value is None

    def release(self):
        with self._lock:
            value, self._value = self._value, None
        if value is not None:
            self._release(value)

    # ownership moves, it is never shared
    def __copy__(self):
        raise TypeError("native handles cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("native handles cannot be copied")

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.release()
