"""Git status model and per-operation options"""
from dataclasses import dataclass, field
from typing import List, Optional

from git_grove.models.workspace import FetchMode


@dataclass
class GitFileStatus:
    """A changed file in a working tree."""
    path: str
    status: str  # untracked, modified, added, deleted, renamed, conflicted
    staged: bool = False


@dataclass
class GitStatus:
    """Working tree status of a repository."""
    branch: str = ""
    is_clean: bool = True
    has_untracked: bool = False
    has_staged: bool = False
    has_modified: bool = False
    files: List[GitFileStatus] = field(default_factory=list)
    ahead: int = 0
    behind: int = 0

    @property
    def untracked_count(self) -> int:
        return sum(1 for f in self.files if f.status == "untracked")

    @property
    def staged_count(self) -> int:
        return sum(1 for f in self.files if f.staged)

    @property
    def modified_count(self) -> int:
        return sum(1 for f in self.files if not f.staged and f.status != "untracked")


@dataclass
class CloneOptions:
    branch: Optional[str] = None
    depth: Optional[int] = None
    recursive: bool = False
    quiet: bool = True


@dataclass
class PullOptions:
    rebase: bool = False
    force: bool = False
    recursive: bool = False
    quiet: bool = True


@dataclass
class PushOptions:
    force: bool = False
    set_upstream: bool = False
    branch: Optional[str] = None
    remote: Optional[str] = None
    quiet: bool = True


@dataclass
class FetchOptions:
    all: bool = False
    prune: bool = False
    tags: bool = False
    quiet: bool = True


@dataclass
class CommitOptions:
    all: bool = True  # Stage everything before committing
    amend: bool = False
    no_verify: bool = False


@dataclass
class AddOptions:
    """Options for adding a repository node."""
    name: Optional[str] = None  # Derived from the URL when empty
    fetch: FetchMode = FetchMode.AUTO
    branch: Optional[str] = None
    parent: Optional[str] = None  # Tree path; defaults to the current node
