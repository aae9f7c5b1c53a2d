"""Local catalog exports for gdrivesync."""

from __future__ import annotations

from .memory import InMemoryCatalogStore
from .store import LAST_SYNC_TIME_KEY, OFFLINE_MODE_KEY, CatalogStore
from .validators import validate_positive_duration, validate_record_id

__all__ = [
    "CatalogStore",
    "InMemoryCatalogStore",
    "LAST_SYNC_TIME_KEY",
    "OFFLINE_MODE_KEY",
    "validate_record_id",
    "validate_positive_duration",
]
