"""Collaborator services used by the workspace core."""

from .config_store import ConfigStore
from .filesystem_service import FileSystemService
from .git_service import GitService

__all__ = ["ConfigStore", "FileSystemService", "GitService"]
