from .schemas import Envelope, PublishRequest, Snapshot, Stats, encode_content, utc_now
