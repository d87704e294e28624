"""Resolving user input and directories to tree paths"""
import os
from pathlib import Path
from typing import Dict, Optional, Sequence, Union

from git_grove.constants import ROOT_PATH
from git_grove.core.tree_store import TreeStore
from git_grove.exceptions import ConfigError, NodeNotFoundError
from git_grove.logging_config import get_logger
from git_grove.models.node import Node
from git_grove.services.config_store import ConfigStore
from git_grove.utils import tree_path

logger = get_logger(__name__)

PathLike = Union[str, Path]


class PathResolver:
    """Turns "", ".", "..", logical paths and directories into canonical tree paths."""

    def __init__(self, workspace_root: PathLike, tree: TreeStore, config_store: ConfigStore):
        self.workspace_root = Path(workspace_root)
        self.tree = tree
        self.config_store = config_store

    def resolve(self, target: Optional[str], cwd: Optional[PathLike] = None) -> str:
        """Resolve target to the tree path of an existing node.

        Args:
            target: "" or "." for the working directory ("" is the root when
                the working directory is outside the workspace), ".." for its parent,
                "/" or "~" for the root, a logical path (absolute or relative
                to the current node), or a directory on disk
            cwd: Working directory used for "" and relative input

        Raises:
            NodeNotFoundError: if the input does not name a known node
        """
        target = (target or "").strip()
        cwd = Path(cwd) if cwd is not None else Path(os.getcwd())

        if target in ("", ".", ".."):
            current = self.tree_path_for(cwd)
            if current is None:
                if target == "":
                    # No explicit target from outside the workspace means the root
                    return ROOT_PATH
                raise NodeNotFoundError(str(cwd), "working directory is outside the workspace")
            resolved = tree_path.parent(current) if target == ".." else current
            return self._existing(resolved)

        if target in (ROOT_PATH, "~"):
            return ROOT_PATH

        if target.startswith(ROOT_PATH):
            logical = tree_path.normalize(target)
        else:
            base = self.tree_path_for(cwd) or self.tree.current_path or ROOT_PATH
            logical = tree_path.join(base, target)
        if self.tree.has_node(logical):
            return logical

        # Not a node name; try it as a directory
        candidate = Path(target).expanduser()
        if not candidate.is_absolute():
            candidate = cwd / candidate
        if candidate.is_dir():
            from_disk = self.tree_path_for(candidate)
            if from_disk is not None:
                return self._existing(from_disk)
        raise NodeNotFoundError(target)

    def _existing(self, path: str) -> str:
        if not self.tree.has_node(path):
            raise NodeNotFoundError(path)
        return tree_path.normalize(path)

    def tree_path_for(self, directory: PathLike) -> Optional[str]:
        """Map a directory on disk to the tree path of the node it belongs to.

        Symlinks are resolved first. Returns None for paths that do not exist
        or that lie outside the workspace.
        """
        try:
            target = Path(directory).resolve(strict=True)
            workspace = self.workspace_root.resolve(strict=True)
        except (FileNotFoundError, RuntimeError, OSError):
            return None
        if target != workspace and workspace not in target.parents:
            return None

        documents: Dict[Path, Optional[str]] = {}
        return self._resolve_from(target, target, workspace, documents)

    def _resolve_from(self, target: Path, start: Path, workspace: Path,
                      documents: Dict[Path, Optional[str]]) -> Optional[str]:
        """Walk upward from start looking for the level whose repository area holds target."""
        for directory in [start, *start.parents]:
            if directory != workspace and workspace not in directory.parents:
                return None
            repos_dir = self._repos_dir_of(directory, documents)
            if repos_dir is None:
                continue

            if directory == workspace:
                level_path = ROOT_PATH
            else:
                level_path = self._resolve_from(directory, directory.parent, workspace, documents)
                # Only a document sitting in a node's own directory starts a level
                if level_path is None or tree_path.basename(level_path) != directory.name:
                    continue

            if target == directory:
                return level_path
            area = directory / repos_dir
            if target == area:
                return level_path
            if area in target.parents:
                return self._descend(level_path, target.relative_to(area).parts)
            if directory == workspace:
                # Inside the workspace but outside its repository area
                return ROOT_PATH
        return None

    def _repos_dir_of(self, directory: Path, documents: Dict[Path, Optional[str]]) -> Optional[str]:
        """repos_dir declared by the document held in directory, None if there is none."""
        if directory in documents:
            return documents[directory]
        repos_dir = None
        document_path = self.config_store.find_document(directory)
        if document_path is not None:
            try:
                repos_dir = self.config_store.load(document_path).repos_dir
            except ConfigError as e:
                logger.debug(f"Ignoring unreadable document {document_path}: {e}")
        documents[directory] = repos_dir
        return repos_dir

    def _descend(self, level_path: str, parts: Sequence[str]) -> Optional[str]:
        """Follow directory segments below a level's repository area through the tree.

        The first segment names a child; each further child is expected
        behind its parent's repos_dir. Any other segment means the
        directory lies inside the working tree of the last matched node.
        """
        node: Optional[Node] = self.tree.find_node(level_path)
        if node is None or not parts:
            return None

        child = node.child(parts[0])
        if child is None:
            return None
        node = child
        index = 1
        while index < len(parts):
            if parts[index] != node.repos_dir or index + 1 >= len(parts):
                break
            next_child = node.child(parts[index + 1])
            if next_child is None:
                break
            node = next_child
            index += 2
        return node.path
