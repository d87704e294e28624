"""Mapping between tree paths and directories on disk"""
from pathlib import Path

from git_grove.core.tree_store import TreeStore
from git_grove.exceptions import NodeNotFoundError
from git_grove.utils import tree_path


class WorkspaceLayout:
    """Computes where each node lives on disk.

    The root lives in the workspace directory. A child lives in
    ``<parent directory>/<parent.repos_dir>/<child name>``, where the
    parent's ``repos_dir`` comes from whichever document declares the
    parent's children, so each level may use a different convention.
    """

    def __init__(self, workspace_root: Path, tree: TreeStore):
        self.workspace_root = Path(workspace_root)
        self.tree = tree

    def node_directory(self, path: str) -> Path:
        """Directory of the node at path.

        Raises:
            NodeNotFoundError: if a segment of path is not a known node
        """
        node = self.tree.root
        directory = self.workspace_root
        for name in tree_path.split(path):
            child = node.child(name)
            if child is None:
                raise NodeNotFoundError(tree_path.normalize(path))
            directory = directory / node.repos_dir / name
            node = child
        return directory
