"""In-memory tree of workspace nodes"""
from typing import Dict, Iterator, List, Optional

from git_grove.constants import ROOT_PATH
from git_grove.exceptions import DuplicateNodeError, NodeNotFoundError
from git_grove.logging_config import get_logger
from git_grove.models.node import Node
from git_grove.utils import tree_path

logger = get_logger(__name__)


class TreeStore:
    """Owns the nodes of one workspace, addressed by absolute tree path.

    Paths are derived from the structure: every structural change re-derives
    the paths of the affected subtree and refreshes the index.
    """

    def __init__(self, root: Node):
        root.path = ROOT_PATH
        self.root = root
        self.current_path = ROOT_PATH
        self._index: Dict[str, Node] = {}
        self._reindex(root, ROOT_PATH)

    def _reindex(self, node: Node, path: str) -> None:
        node.path = path
        self._index[path] = node
        for child in node.children:
            self._reindex(child, tree_path.join(path, child.name))

    def _unindex(self, node: Node) -> None:
        for descendant in node.walk():
            self._index.pop(descendant.path, None)

    def get_node(self, path: str) -> Node:
        """Return the node at path.

        Raises:
            NodeNotFoundError: if no node lives at path
        """
        node = self._index.get(tree_path.normalize(path))
        if node is None:
            raise NodeNotFoundError(tree_path.normalize(path))
        return node

    def find_node(self, path: str) -> Optional[Node]:
        return self._index.get(tree_path.normalize(path))

    def has_node(self, path: str) -> bool:
        return tree_path.normalize(path) in self._index

    def get_current(self) -> Node:
        """Node at the current path, falling back to the root if it vanished."""
        node = self.find_node(self.current_path)
        if node is None:
            logger.debug(f"Current path {self.current_path} no longer exists, using root")
            self.current_path = ROOT_PATH
            return self.root
        return node

    def set_current(self, path: str) -> Node:
        node = self.get_node(path)
        self.current_path = node.path
        return node

    def get_parent(self, path: str) -> Optional[Node]:
        path = tree_path.normalize(path)
        if path == ROOT_PATH:
            return None
        return self.get_node(tree_path.parent(path))

    def add_node(self, parent_path: str, node: Node) -> Node:
        """Attach node (and its children) under parent_path.

        Raises:
            NodeNotFoundError: if the parent does not exist
            DuplicateNodeError: if the parent already has a child with that name
        """
        parent = self.get_node(parent_path)
        if parent.child(node.name) is not None:
            raise DuplicateNodeError(parent.path, node.name)
        parent.children.append(node)
        self._reindex(node, tree_path.join(parent.path, node.name))
        logger.debug(f"Added node {node.path}")
        return node

    def remove_node(self, path: str) -> Node:
        """Detach the node at path together with its subtree and return it."""
        node = self.get_node(path)
        if node is self.root:
            raise ValueError("cannot remove the root node")
        parent = self.get_node(tree_path.parent(node.path))
        parent.children = [child for child in parent.children if child is not node]
        self._unindex(node)
        if tree_path.is_within(self.current_path, node.path):
            self.current_path = parent.path
        logger.debug(f"Removed node {node.path}")
        return node

    def update_node(self, path: str, node: Node) -> Node:
        """Replace the node stored at path, keeping its position among its siblings.

        A renamed node gets its subtree paths re-derived.
        """
        existing = self.get_node(path)
        if existing is self.root:
            node.children = node.children or existing.children
            self._unindex(existing)
            self.root = node
            self._reindex(node, ROOT_PATH)
            return node

        parent = self.get_node(tree_path.parent(existing.path))
        if node.name != existing.name and parent.child(node.name) is not None:
            raise DuplicateNodeError(parent.path, node.name)
        if node is not existing:
            parent.children = [node if child is existing else child for child in parent.children]
        self._unindex(existing)
        self._reindex(node, tree_path.join(parent.path, node.name))
        return node

    def list_children(self, path: str) -> List[Node]:
        return list(self.get_node(path).children)

    def walk(self, path: str = ROOT_PATH) -> Iterator[Node]:
        """Pre-order iteration over the subtree at path."""
        return self.get_node(path).walk()

    def __len__(self) -> int:
        return len(self._index)
