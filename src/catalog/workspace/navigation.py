"""Explicit view routing for a catalog workspace.

The current view is plain state owned by the workspace. Moving between
views happens only through NavigationIntent events passed to navigate(),
so any holder of the workspace can see where the user is.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class View(str, Enum):
    CATALOG = "catalog"
    SETTINGS = "settings"


class NavigationIntent(str, Enum):
    OPEN_CATALOG = "open_catalog"
    OPEN_SETTINGS = "open_settings"


_TARGETS: dict[NavigationIntent, View] = {
    NavigationIntent.OPEN_CATALOG: View.CATALOG,
    NavigationIntent.OPEN_SETTINGS: View.SETTINGS,
}


@dataclass
class ViewState:
    """The view the workspace is currently showing."""

    current: View = View.CATALOG

    def navigate(self, intent: NavigationIntent) -> View:
        self.current = _TARGETS[NavigationIntent(intent)]
        return self.current
