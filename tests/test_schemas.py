from datetime import datetime

import pytest
from pydantic import ValidationError

from cardinal.schemas import Envelope, encode_content
from cardinal.utilities import SerializationError


def test_envelope_gets_utc_timestamp():
    env = Envelope(content="Hello World #1")
    assert isinstance(env.timestamp, datetime)
    assert env.timestamp.utcoffset().total_seconds() == 0


def test_envelope_is_read_only():
    env = Envelope(content="hi")
    with pytest.raises(ValidationError):
        env.content = "changed"


def test_encode_accepts_255_bytes():
    content = "x" * 255
    assert encode_content(Envelope(content=content)) == content.encode()


def test_encode_rejects_256_bytes():
    with pytest.raises(SerializationError):
        encode_content(Envelope(content="x" * 256))


def test_encode_counts_bytes_not_characters():
    # 128 two-byte characters = 256 bytes
    with pytest.raises(SerializationError):
        encode_content(Envelope(content="é" * 128))
    assert len(encode_content(Envelope(content="é" * 127))) == 254


def test_encode_rejects_embedded_nul():
    with pytest.raises(SerializationError):
        encode_content(Envelope(content="abc\x00def"))


def test_lone_surrogate_is_not_valid_text():
    # rejected either by the model or by the encoder
    with pytest.raises((SerializationError, ValidationError)):
        encode_content(Envelope(content="bad \ud800 text"))


def test_timestamps_and_reply_stamps_share_one_clock():
    from cardinal import schemas, utilities

    assert schemas.utc_now is utilities.utc_now
    stamp = datetime.fromisoformat(utilities.now_ts())
    assert stamp.utcoffset().total_seconds() == 0
