"""Building the node tree from tree definition documents"""
from pathlib import Path
from typing import FrozenSet, Optional

from git_grove.constants import ROOT_PATH
from git_grove.core.tree_store import TreeStore
from git_grove.exceptions import ConfigError
from git_grove.logging_config import get_logger
from git_grove.models.node import Node
from git_grove.models.workspace import WorkspaceDocument
from git_grove.services.config_store import ConfigStore
from git_grove.services.filesystem_service import FileSystemService
from git_grove.utils import tree_path

logger = get_logger(__name__)


class TreeLoader:
    """Loads the root document and everything reachable from it.

    Children come from three places: the root document, documents
    referenced by config-reference nodes, and documents found inside
    cloned repositories.
    """

    def __init__(self, config_store: ConfigStore, fs_service: FileSystemService):
        self.config_store = config_store
        self.fs = fs_service

    def load(self, workspace_root: Path) -> TreeStore:
        """Build the tree of the workspace rooted at workspace_root.

        Raises:
            ConfigError: if the root document is missing or invalid
        """
        workspace_root = Path(workspace_root)
        document_path = self.config_store.find_document(workspace_root)
        if document_path is None:
            raise ConfigError(str(workspace_root), "no tree definition document found")
        document = self.config_store.load(document_path)

        root = Node(
            name=document.name,
            path=ROOT_PATH,
            repos_dir=document.repos_dir,
            is_cloned=True,
            child_document=str(document_path),
        )
        store = TreeStore(root)
        visiting = frozenset({self._document_key(document_path)})
        self._attach_document(store, root, workspace_root, document, visiting)
        logger.info(f"Loaded workspace '{document.name}' with {len(store) - 1} nodes")
        return store

    def resolve_reference(self, node: Node, workspace_root: Optional[Path] = None) -> Path:
        """Location of the document a config-reference node points at.

        Relative references are taken from the directory of the document
        declaring the node.
        """
        reference = Path(node.config_file).expanduser()
        if reference.is_absolute():
            return reference
        if node.definition_file:
            base = Path(node.definition_file).parent
        else:
            base = Path(workspace_root or ".")
        return base / reference

    def expand(self, store: TreeStore, node: Node, directory: Path,
               visiting: Optional[FrozenSet[str]] = None, sync_state: bool = True) -> None:
        """Attach the children a node's own document declares.

        With sync_state the clone state is first read from the disk;
        callers that just cloned the node pass False to keep their result.
        """
        if visiting is None:
            visiting = self._ancestor_documents(store, node)

        if node.is_config:
            if sync_state:
                node.is_cloned = self.fs.exists(directory)
            reference = self.resolve_reference(node)
            self._attach_referenced(store, node, directory, reference, visiting)
            return

        if not node.repository:
            return
        if sync_state:
            node.is_cloned = self.fs.is_git_repo(directory)
        if not node.is_cloned or node.children:
            return
        document_path = self.config_store.find_document(directory)
        if document_path is None:
            return
        self._attach_referenced(store, node, directory, document_path, visiting)

    def _attach_referenced(self, store: TreeStore, node: Node, directory: Path,
                           document_path: Path, visiting: FrozenSet[str]) -> None:
        key = self._document_key(document_path)
        if key in visiting:
            logger.warning(f"Skipping {document_path} for {node.path}: document includes itself")
            return
        if node.children:
            return
        try:
            document = self.config_store.load(document_path)
        except ConfigError as e:
            logger.warning(f"Ignoring children of {node.path}: {e}")
            return
        node.child_document = str(document_path)
        node.repos_dir = document.repos_dir
        self._attach_document(store, node, directory, document, visiting | {key})

    def _attach_document(self, store: TreeStore, parent: Node, parent_dir: Path,
                         document: WorkspaceDocument, visiting: FrozenSet[str]) -> None:
        for definition in document.nodes:
            node = Node.from_definition(definition, parent.path, document.repos_dir, document.path)
            store.add_node(parent.path, node)
            self.expand(store, node, parent_dir / parent.repos_dir / node.name, visiting)

    def _ancestor_documents(self, store: TreeStore, node: Node) -> FrozenSet[str]:
        keys = set()
        path = node.path
        while True:
            current = store.find_node(path)
            if current is not None and current.child_document and current is not node:
                keys.add(self._document_key(Path(current.child_document)))
            if path == ROOT_PATH:
                break
            path = tree_path.parent(path)
        return frozenset(keys)

    @staticmethod
    def _document_key(path: Path) -> str:
        return str(Path(path).resolve())
