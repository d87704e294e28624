"""
git-grove - Manage a tree of git repositories as one workspace
"""

from .__version__ import __version__
from .core.manager import WorkspaceManager
from .cli import main

__all__ = ["WorkspaceManager", "main", "__version__"]
