class CardinalError(Exception):
    ''' Base class for every error raised by the bus.'''


class InitializationError(CardinalError):
    ''' The native transport could not be created (library missing or null handle).'''


class SerializationError(CardinalError):
    ''' Envelope content cannot be carried by the transport.'''


class TransportError(CardinalError):
    ''' The native publish call reported a nonzero status.'''

    def __init__(self, message: str, status: int = -1):
        super().__init__(message)
        self.status = status


class DecodeError(CardinalError):
    ''' Received bytes are not valid text.'''


class DashboardError(CardinalError):
    ''' The terminal could not be acquired for the dashboard.'''
