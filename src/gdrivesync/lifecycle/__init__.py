"""Lifecycle exports for gdrivesync."""

from __future__ import annotations

from .periodic import PeriodicTask
from .sweeper import LifecycleSweeper

__all__ = ["LifecycleSweeper", "PeriodicTask"]
