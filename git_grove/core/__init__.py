"""Workspace core: tree store, path resolution and recursive operations."""

from .tree_store import TreeStore
from .tree_loader import TreeLoader
from .layout import WorkspaceLayout
from .resolver import PathResolver
from .lazy_clone import LazyCloneCoordinator
from .engine import RecursiveOperationEngine

__all__ = [
    "TreeStore",
    "TreeLoader",
    "WorkspaceLayout",
    "PathResolver",
    "LazyCloneCoordinator",
    "RecursiveOperationEngine",
]
