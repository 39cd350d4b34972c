from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from ..utilities import MAX_CONTENT_BYTES, SerializationError, utc_now


class Envelope(BaseModel):
    ''' A timestamped unit of message content. Read-only once created.'''
    model_config = ConfigDict(frozen=True)

    content: str
    timestamp: datetime = Field(default_factory=utc_now)


def encode_content(envelope: Envelope) -> bytes:
    """
    Validate an envelope for transport and return its wire bytes.

    Both backends call this so they accept exactly the same envelopes: the
    content must be UTF-8 encodable, free of NUL and fit the native buffer
    together with its terminator (at most MAX_CONTENT_BYTES - 1 bytes).
    Oversized content is rejected, never truncated.
    """
    try:
        data = envelope.content.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise SerializationError(f"content is not valid text: {exc}") from exc
    if b"\0" in data:
        raise SerializationError("content contains an embedded NUL byte")
    if len(data) >= MAX_CONTENT_BYTES:
        raise SerializationError(
            f"content is {len(data)} bytes; limit is {MAX_CONTENT_BYTES - 1}"
        )
    return data


class PublishRequest(BaseModel):
    content: str


class Snapshot(BaseModel):
    messages: List[Envelope]
    status: str
    mode: str
    active: bool


class Stats(BaseModel):
    published: int
    received: int
    publish_errors: int
    decode_drops: int
    uptime_sec: int
    message_rate: float
