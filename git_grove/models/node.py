"""Tree node model"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional

from git_grove.constants import DEFAULT_REPOS_DIR, ROOT_PATH
from git_grove.models.workspace import FetchMode, NodeDefinition


class NodeKind(Enum):
    """What a node stands for on disk."""
    ROOT = "root"
    REPOSITORY = "repository"
    CONFIG = "config"
    GROUP = "group"


@dataclass
class Node:
    """One entry in the repository tree."""
    name: str
    path: str = ROOT_PATH
    repository: str = ""
    config_file: str = ""
    fetch: FetchMode = FetchMode.AUTO
    is_lazy: bool = False
    is_cloned: bool = False
    has_changes: bool = False  # Cached only; status output always asks git
    children: List["Node"] = field(default_factory=list)

    # Layout bookkeeping
    repos_dir: str = DEFAULT_REPOS_DIR  # Directory name holding this node's children
    definition_file: Optional[str] = None  # Document declaring this node
    child_document: Optional[str] = None  # Document declaring this node's children

    @property
    def kind(self) -> NodeKind:
        if self.path == ROOT_PATH:
            return NodeKind.ROOT
        if self.config_file:
            return NodeKind.CONFIG
        if self.repository:
            return NodeKind.REPOSITORY
        return NodeKind.GROUP

    @property
    def is_repository(self) -> bool:
        return bool(self.repository) and not self.config_file

    @property
    def is_config(self) -> bool:
        return bool(self.config_file)

    def child(self, name: str) -> Optional["Node"]:
        """Find a direct child by name."""
        for child in self.children:
            if child.name == name:
                return child
        return None

    def walk(self) -> Iterator["Node"]:
        """Yield this node and its descendants, parents before children."""
        yield self
        for child in self.children:
            yield from child.walk()

    def to_definition(self) -> NodeDefinition:
        """Convert back to a document entry."""
        return NodeDefinition(
            name=self.name,
            url="" if self.config_file else self.repository,
            file=self.config_file,
            fetch=self.fetch,
        )

    @classmethod
    def from_definition(cls, definition: NodeDefinition, parent_path: str,
                        repos_dir: str, source: Optional[str] = None) -> "Node":
        """Create a node for a document entry placed under parent_path."""
        path = f"{parent_path.rstrip('/')}/{definition.name}"
        return cls(
            name=definition.name,
            path=path,
            repository=definition.url,
            config_file=definition.file,
            fetch=definition.fetch,
            is_lazy=definition.is_lazy() if definition.url else False,
            repos_dir=repos_dir,
            definition_file=source,
        )
