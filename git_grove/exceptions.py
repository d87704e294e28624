"""Custom exceptions for git-grove"""

from typing import Optional


class GitGroveError(Exception):
    """Base exception for all git-grove errors."""
    pass


class ManagerNotInitializedError(GitGroveError):
    """Raised when the workspace manager is used before a workspace is loaded."""

    def __init__(self):
        super().__init__("manager not initialized")


class NodeNotFoundError(GitGroveError):
    """Raised when a path cannot be mapped to a node of the tree."""

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = path
        error_msg = f"Node not found: '{path}'"
        if message:
            error_msg += f" ({message})"
        super().__init__(error_msg)


class DuplicateNodeError(GitGroveError):
    """Raised when a sibling with the same name already exists."""

    def __init__(self, parent: str, name: str):
        self.parent = parent
        self.name = name
        super().__init__(f"Node '{name}' already exists under '{parent}'")


class ConfigError(GitGroveError):
    """Raised when a tree definition document cannot be read or is invalid."""

    def __init__(self, path: Optional[str], message: str):
        self.path = path
        self.message = message
        if path:
            super().__init__(f"Invalid configuration '{path}': {message}")
        else:
            super().__init__(f"Invalid configuration: {message}")


class PersistenceError(GitGroveError):
    """Raised when a tree definition document cannot be written."""

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"Failed to save '{path}': {message}")


class GitOperationError(GitGroveError):
    """Exception raised for errors in Git operations."""

    def __init__(self, operation: str, path: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.path = path
        self.message = message

        error_msg = f"Git operation '{operation}' failed"
        if path:
            error_msg += f" for '{path}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class CloneError(GitOperationError):
    """Exception raised when a repository cannot be cloned into its node directory."""

    def __init__(self, url: str, path: str, message: Optional[str] = None):
        self.url = url
        super().__init__("clone", path, message or f"cannot clone {url}")


class NotARepositoryError(GitGroveError):
    """Raised when a git operation targets a grouping or config-reference node."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Node '{path}' is not a repository (use --recursive to act on its children)")


class NodeNotClonedError(GitGroveError):
    """Raised when a single-node operation targets a repository that is not on disk."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Node '{path}' is not cloned yet (run 'git-grove clone {path}')")
