"""Catalog workspaces -- selection, price editing and export per open page."""

from src.catalog.workspace.navigation import NavigationIntent, View, ViewState
from src.catalog.workspace.registry import WorkspaceNotFoundError, WorkspaceRegistry
from src.catalog.workspace.selection import PriceEntry, PriceLedger, SelectionSet
from src.catalog.workspace.session import CatalogWorkspace

__all__ = [
    "CatalogWorkspace",
    "NavigationIntent",
    "PriceEntry",
    "PriceLedger",
    "SelectionSet",
    "View",
    "ViewState",
    "WorkspaceNotFoundError",
    "WorkspaceRegistry",
]
