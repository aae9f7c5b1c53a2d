"""Shared state exports for gdrivesync."""

from __future__ import annotations

from .mode import ModeController

__all__ = ["ModeController"]
