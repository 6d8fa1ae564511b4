"""In-memory registry of open catalog workspaces.

One workspace per page load. Nothing is persisted: restarting the process
or reloading the page starts from an empty selection. Pages that go away
without closing their workspace are evicted once idle for longer than
idle_ttl seconds; the sweep runs on every create().
"""

from __future__ import annotations

import time
from collections.abc import Callable

import structlog

from src.catalog.workspace.session import CatalogWorkspace

logger = structlog.get_logger(__name__)


class WorkspaceNotFoundError(KeyError):
    """No open workspace with the given id."""


class WorkspaceRegistry:
    """Creates, looks up and closes workspaces.

    Args:
        factory: Builds a fresh CatalogWorkspace.
        idle_ttl: Seconds without a lookup after which a workspace is
            evicted. None disables eviction.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        factory: Callable[[], CatalogWorkspace],
        idle_ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._factory = factory
        self._idle_ttl = idle_ttl
        self._clock = clock
        self._workspaces: dict[str, CatalogWorkspace] = {}
        self._last_access: dict[str, float] = {}

    def create(self) -> CatalogWorkspace:
        self.evict_idle()
        workspace = self._factory()
        self._workspaces[workspace.id] = workspace
        self._last_access[workspace.id] = self._clock()
        logger.info("workspace.created", workspace_id=workspace.id, open=len(self._workspaces))
        return workspace

    def get(self, workspace_id: str) -> CatalogWorkspace:
        try:
            workspace = self._workspaces[workspace_id]
        except KeyError:
            raise WorkspaceNotFoundError(workspace_id) from None
        self._last_access[workspace_id] = self._clock()
        return workspace

    def close(self, workspace_id: str) -> None:
        workspace = self._workspaces.pop(workspace_id, None)
        self._last_access.pop(workspace_id, None)
        if workspace is None:
            raise WorkspaceNotFoundError(workspace_id)
        workspace.close()

    def evict_idle(self) -> int:
        """Close every workspace idle past the TTL; returns how many."""
        if self._idle_ttl is None:
            return 0
        cutoff = self._clock() - self._idle_ttl
        stale = [wid for wid, seen in self._last_access.items() if seen < cutoff]
        for workspace_id in stale:
            self.close(workspace_id)
        if stale:
            logger.info("workspace.evicted", count=len(stale), open=len(self._workspaces))
        return len(stale)

    def close_all(self) -> None:
        for workspace in self._workspaces.values():
            workspace.close()
        self._workspaces.clear()
        self._last_access.clear()

    def __len__(self) -> int:
        return len(self._workspaces)
