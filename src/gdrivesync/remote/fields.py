"""Partial-response field masks for Drive API probes."""

from __future__ import annotations

DEFAULT_SCOPES: tuple[str, ...] = ("https://www.googleapis.com/auth/drive.readonly",)

EXISTS_FIELDS: str = "id,trashed"

ROOT_FIELDS: str = "id,mimeType,trashed"

PROBE_FIELDS: str = "user(emailAddress)"
