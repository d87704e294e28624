"""Tree definition documents and their node entries"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from git_grove.constants import DEFAULT_REPOS_DIR, EAGER_NAME_SUFFIXES
from git_grove.exceptions import ConfigError


class FetchMode(Enum):
    """When a node's repository gets cloned."""
    EAGER = "eager"
    LAZY = "lazy"
    AUTO = "auto"

    @classmethod
    def parse(cls, value: Any, source: Optional[str] = None) -> "FetchMode":
        """Parse a fetch mode from a document value; empty means auto."""
        if isinstance(value, FetchMode):
            return value
        if value is None or value == "":
            return cls.AUTO
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = [mode.value for mode in cls]
            raise ConfigError(source, f"fetch must be one of {allowed}, got '{value}'")


def is_meta_repo(name: str) -> bool:
    """Check whether a repository name marks a meta-repository."""
    lowered = name.lower()
    return any(lowered.endswith(suffix) for suffix in EAGER_NAME_SUFFIXES)


@dataclass
class NodeDefinition:
    """One entry of a document's node list."""
    name: str
    url: str = ""
    file: str = ""
    fetch: FetchMode = FetchMode.AUTO

    def is_lazy(self) -> bool:
        """Resolve the fetch mode to a lazy flag."""
        if self.fetch == FetchMode.EAGER:
            return False
        if self.fetch == FetchMode.LAZY:
            return True
        return not is_meta_repo(self.name)

    def validate(self, source: Optional[str] = None) -> None:
        """Validate the entry.

        Raises:
            ConfigError: if the name is missing or url/file are not exclusive
        """
        if not self.name or not self.name.strip():
            raise ConfigError(source, "node name is required")
        if "/" in self.name or self.name in (".", ".."):
            raise ConfigError(source, f"node name '{self.name}' is not a valid path segment")
        if self.url and self.file:
            raise ConfigError(source, f"node '{self.name}' cannot have both url and file")
        if not self.url and not self.file:
            raise ConfigError(source, f"node '{self.name}' must have either url or file")

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name}
        if self.url:
            data["url"] = self.url
        if self.file:
            data["file"] = self.file
        if self.fetch != FetchMode.AUTO:
            data["fetch"] = self.fetch.value
        return data

    @classmethod
    def from_dict(cls, data: Any, source: Optional[str] = None) -> "NodeDefinition":
        if not isinstance(data, dict):
            raise ConfigError(source, f"node entries must be mappings, got {type(data).__name__}")
        fetch_value = data.get("fetch")
        # Older documents carry a boolean "lazy" flag instead of a fetch mode
        if fetch_value is None and "lazy" in data:
            fetch_value = FetchMode.LAZY if data["lazy"] else FetchMode.EAGER
        definition = cls(
            name=str(data.get("name") or "").strip(),
            url=str(data.get("url") or "").strip(),
            file=str(data.get("file") or "").strip(),
            fetch=FetchMode.parse(fetch_value, source),
        )
        definition.validate(source)
        return definition


@dataclass
class WorkspaceDocument:
    """A tree definition document: workspace metadata plus one level of nodes."""
    name: str
    repos_dir: str = DEFAULT_REPOS_DIR
    nodes: List[NodeDefinition] = field(default_factory=list)
    path: Optional[str] = None  # Where the document was loaded from, not serialized

    def validate(self) -> None:
        """Validate workspace metadata and the node list.

        Raises:
            ConfigError: on the first problem found
        """
        if not self.name or not self.name.strip():
            raise ConfigError(self.path, "workspace name is required")
        repos_dir = (self.repos_dir or "").strip()
        if not repos_dir or "/" in repos_dir or repos_dir in (".", ".."):
            raise ConfigError(self.path, f"repos_dir must be a plain directory name, got '{self.repos_dir}'")
        seen = set()
        for definition in self.nodes:
            definition.validate(self.path)
            if definition.name in seen:
                raise ConfigError(self.path, f"duplicate node name '{definition.name}'")
            seen.add(definition.name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "workspace": {
                "name": self.name,
                "repos_dir": self.repos_dir,
            },
            "nodes": [definition.to_dict() for definition in self.nodes],
        }

    @classmethod
    def from_dict(cls, data: Any, path: Optional[str] = None,
                  default_repos_dir: str = DEFAULT_REPOS_DIR) -> "WorkspaceDocument":
        """Build and validate a document from parsed YAML data."""
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(path, "document must be a mapping")
        workspace = data.get("workspace") or {}
        if not isinstance(workspace, dict):
            raise ConfigError(path, "'workspace' must be a mapping")
        raw_nodes = data.get("nodes") or []
        if not isinstance(raw_nodes, list):
            raise ConfigError(path, "'nodes' must be a list")

        document = cls(
            name=str(workspace.get("name") or "").strip(),
            repos_dir=str(workspace.get("repos_dir") or default_repos_dir).strip(),
            nodes=[NodeDefinition.from_dict(entry, path) for entry in raw_nodes],
            path=path,
        )
        document.validate()
        return document
