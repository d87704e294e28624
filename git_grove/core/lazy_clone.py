"""Clone-on-demand for lazy nodes"""
from typing import Callable, List, Optional

from git_grove.constants import DEFAULT_CONFIG_FILE
from git_grove.core.layout import WorkspaceLayout
from git_grove.core.tree_loader import TreeLoader
from git_grove.core.tree_store import TreeStore
from git_grove.exceptions import CloneError, GitGroveError
from git_grove.logging_config import get_logger
from git_grove.models.git_status import CloneOptions
from git_grove.models.node import Node
from git_grove.models.results import CloneOutcome
from git_grove.services.filesystem_service import FileSystemService
from git_grove.services.git_service import GitService

logger = get_logger(__name__)

# Saves the document declaring a node; returns a warning message on failure
PersistCallback = Callable[[Node], Optional[str]]


class LazyCloneCoordinator:
    """Makes sure a node's working copy exists before an operation uses it."""

    def __init__(self, tree: TreeStore, layout: WorkspaceLayout, git_service: GitService,
                 fs_service: FileSystemService, loader: TreeLoader,
                 persist: Optional[PersistCallback] = None,
                 clone_options: Optional[CloneOptions] = None):
        self.tree = tree
        self.layout = layout
        self.git = git_service
        self.fs = fs_service
        self.loader = loader
        self.persist = persist
        self.clone_options = clone_options or CloneOptions()

    def needs_clone(self, node: Node) -> bool:
        return (node.is_repository or node.is_config) and not node.is_cloned

    def ensure_cloned(self, node: Node, warnings: Optional[List[str]] = None,
                      options: Optional[CloneOptions] = None) -> CloneOutcome:
        """Materialize node on disk.

        A directory that already holds a ``.git`` is taken as the node's
        working copy: the clone state is synced and nothing is cloned.

        Args:
            node: Repository or config-reference node
            warnings: Collects persistence warnings
            options: Clone options overriding the coordinator defaults

        Returns:
            What was done

        Raises:
            CloneError: if the target directory is populated without a
                ``.git`` or git fails; the node stays uncloned
        """
        directory = self.layout.node_directory(node.path)

        if node.is_config:
            return self._materialize_config(node, directory)
        if not node.repository:
            raise GitGroveError(f"Node '{node.path}' has no repository to clone")

        if self.fs.is_git_repo(directory):
            logger.info(f"{node.path} already has a working copy at {directory}, marking it cloned")
            self._mark_cloned(node, directory, warnings)
            return CloneOutcome.ALREADY_PRESENT

        if self.fs.exists(directory) and not self.fs.is_empty_dir(directory):
            raise CloneError(node.repository, str(directory),
                             "target directory exists and is not an empty git working copy")

        try:
            self.fs.mkdir_all(directory.parent)
        except OSError as e:
            raise CloneError(node.repository, str(directory), f"cannot create parent directory: {e}")

        logger.info(f"Cloning {node.path} from {node.repository}")
        self.git.clone(node.repository, directory, options or self.clone_options)
        self._mark_cloned(node, directory, warnings)
        return CloneOutcome.CLONED

    def _mark_cloned(self, node: Node, directory, warnings: Optional[List[str]]) -> None:
        node.is_cloned = True
        self.tree.update_node(node.path, node)
        # A freshly cloned meta-repository may declare children of its own
        self.loader.expand(self.tree, node, directory, sync_state=False)
        self._persist(node, warnings)

    def _materialize_config(self, node: Node, directory) -> CloneOutcome:
        """Create a config-reference node's directory and link its document into it."""
        try:
            self.fs.mkdir_all(directory)
            reference = self.loader.resolve_reference(node, self.layout.workspace_root)
            linked = directory / DEFAULT_CONFIG_FILE
            if self.fs.exists(reference) and not self.fs.exists(linked):
                self.fs.link_or_copy(reference, linked)
        except OSError as e:
            raise CloneError(node.config_file, str(directory), f"cannot prepare directory: {e}")
        node.is_cloned = True
        return CloneOutcome.CREATED

    def _persist(self, node: Node, warnings: Optional[List[str]]) -> None:
        if self.persist is None:
            return
        warning = self.persist(node)
        if warning:
            logger.warning(warning)
            if warnings is not None:
                warnings.append(warning)
