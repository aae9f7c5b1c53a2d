"""Remote store exports for gdrivesync."""

from __future__ import annotations

from .credentials import load_credentials
from .drive_store import DriveObjectStore
from .store import RemoteStore

__all__ = ["RemoteStore", "DriveObjectStore", "load_credentials"]
