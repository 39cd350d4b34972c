"""
Cardinal: a single-topic pub/sub demo bus that prefers the native Fast DDS
transport and falls back to an in-process mock, with a live view of the
message flow.
"""
__version__ = "0.1.0"
