"""Remote store collaborator contract."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from gdrivesync.util.context import SyncContext


@runtime_checkable
class RemoteStore(Protocol):
    """
    The two remote operations reconciliation needs.

    check_exists returns False when the object is definitely absent and raises
    for every other failure. test_connectivity raises if the store is
    unreachable or misconfigured.
    """

    def check_exists(self, ctx: SyncContext, key: str) -> bool: ...

    def test_connectivity(self, ctx: SyncContext) -> None: ...
