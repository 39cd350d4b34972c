from datetime import datetime, timezone
from typing import Optional

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def now_ts() -> str:
    return utc_now().isoformat()

# Server -> client messages are built as dicts
def make_pong(request_id: Optional[str]):
    return {"type": "pong", "request_id": request_id, "ts": now_ts()}

def make_snapshot_event(snapshot: dict):
    return {"type": "snapshot", "snapshot": snapshot, "ts": now_ts()}

def make_error(request_id: Optional[str], code: str, message: str):
    return {"type": "error", "request_id": request_id, "error": {"code": code, "message": message}, "ts": now_ts()}

def format_status(status: str, active: bool) -> str:
    ''' Status line shown by the dashboards.'''
    return f"{status} ({'Active' if active else 'Idle'})"
