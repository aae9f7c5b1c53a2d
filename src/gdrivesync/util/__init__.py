from .context import SyncContext, call_with_deadline
from .time import ensure_aware, is_due, now_utc, parse_rfc3339, remaining_until, to_rfc3339

__all__ = [
    "SyncContext",
    "call_with_deadline",
    "now_utc",
    "ensure_aware",
    "parse_rfc3339",
    "to_rfc3339",
    "is_due",
    "remaining_until",
]
