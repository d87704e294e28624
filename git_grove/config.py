"""Runtime configuration for git-grove"""

import os
from dataclasses import dataclass
from typing import Optional

from git_grove.constants import DEFAULT_REMOTE, DEFAULT_REPOS_DIR, WORKSPACE_ENV_VAR


@dataclass
class Config:
    """Runtime configuration for git-grove with validation."""

    # Workspace location (None = discover from the working directory)
    workspace: Optional[str] = None
    default_repos_dir: str = DEFAULT_REPOS_DIR

    # Git behaviour
    remote_name: str = DEFAULT_REMOTE
    clone_depth: Optional[int] = None
    include_lazy: bool = False

    # Execution modes
    force: bool = False
    assume_yes: bool = False
    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_workspace()
        self._validate_repos_dir()
        self._validate_remote_name()
        self._validate_clone_depth()

    def _validate_workspace(self):
        """Fall back to the environment when no workspace is given."""
        if self.workspace is None:
            self.workspace = os.environ.get(WORKSPACE_ENV_VAR) or None
        if self.workspace is not None and not self.workspace.strip():
            raise ValueError("workspace cannot be empty")

    def _validate_repos_dir(self):
        """Validate default_repos_dir is a single relative directory name."""
        value = (self.default_repos_dir or "").strip()
        if not value:
            raise ValueError("default_repos_dir cannot be empty")
        if "/" in value or "\\" in value or value in (".", ".."):
            raise ValueError(f"default_repos_dir must be a plain directory name, got '{value}'")
        self.default_repos_dir = value

    def _validate_remote_name(self):
        """Validate remote_name is not empty."""
        if not self.remote_name or not self.remote_name.strip():
            raise ValueError("remote_name cannot be empty")
        self.remote_name = self.remote_name.strip()

    def _validate_clone_depth(self):
        """Validate clone_depth is positive when set."""
        if self.clone_depth is not None and self.clone_depth <= 0:
            raise ValueError(f"clone_depth must be positive, got {self.clone_depth}")

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "workspace": self.workspace,
            "default_repos_dir": self.default_repos_dir,
            "remote_name": self.remote_name,
            "clone_depth": self.clone_depth,
            "include_lazy": self.include_lazy,
            "force": self.force,
            "assume_yes": self.assume_yes,
            "verbose": self.verbose,
            "debug": self.debug,
        }

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary, ignoring unknown keys."""
        known_fields = {
            "workspace",
            "default_repos_dir",
            "remote_name",
            "clone_depth",
            "include_lazy",
            "force",
            "assume_yes",
            "verbose",
            "debug",
        }

        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)
