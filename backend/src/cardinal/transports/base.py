from abc import ABC, abstractmethod
from typing import Optional

from ..schemas import Envelope


class Publisher(ABC):
    ''' Publishing half of a transport.'''

    @abstractmethod
    async def publish(self, envelope: Envelope) -> None:
        """
        Make one attempt to publish ``envelope``.

        Raises SerializationError if the content cannot be carried and
        TransportError if the backend rejects it. Never retries.
        """

    def close(self):
        ''' Release backend resources. Safe to call more than once.'''


class Subscriber(ABC):
    ''' Receiving half of a transport.'''

    # envelopes received but discarded because they could not be decoded
    dropped: int = 0

    @abstractmethod
    async def receive(self) -> Optional[Envelope]:
        ''' Non-blocking poll; None when nothing is waiting.'''

    def close(self):
        ''' Release backend resources. Safe to call more than once.'''
