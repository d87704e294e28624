"""Workspace manager: the operations exposed to the command line"""
import os
import threading
from pathlib import Path
from typing import List, Optional, Union

from git_grove.config import Config
from git_grove.constants import DEFAULT_CONFIG_FILE, ROOT_PATH
from git_grove.core.engine import NodeAction, RecursiveOperationEngine
from git_grove.core.layout import WorkspaceLayout
from git_grove.core.lazy_clone import LazyCloneCoordinator
from git_grove.core.resolver import PathResolver
from git_grove.core.tree_loader import TreeLoader
from git_grove.core.tree_store import TreeStore
from git_grove.exceptions import (
    ConfigError,
    GitGroveError,
    ManagerNotInitializedError,
    NodeNotClonedError,
    NodeNotFoundError,
    NotARepositoryError,
    PersistenceError,
)
from git_grove.logging_config import get_logger
from git_grove.models.git_status import (
    AddOptions,
    CloneOptions,
    CommitOptions,
    FetchOptions,
    PullOptions,
    PushOptions,
)
from git_grove.models.node import Node
from git_grove.models.results import CloneOutcome, OperationSummary
from git_grove.models.workspace import NodeDefinition, WorkspaceDocument
from git_grove.services.config_store import ConfigStore
from git_grove.services.filesystem_service import FileSystemService
from git_grove.services.git_service import GitService
from git_grove.utils import tree_path

logger = get_logger(__name__)

PathLike = Union[str, Path]


def extract_repo_name(url: str) -> str:
    """Derive a node name from a repository URL.

    Handles https, ssh, scp-like (``git@host:org/repo.git``) and local paths.
    """
    name = url.strip().rstrip("/")
    if name.endswith(".git"):
        name = name[:-4]
    name = name.rsplit("/", 1)[-1]
    if ":" in name:
        name = name.rsplit(":", 1)[-1]
    return name


class WorkspaceManager:
    """Entry point for all tree operations.

    Collaborators are injected so tests can substitute any of them; the
    manager must be initialized with a workspace before use.
    """

    def __init__(self, config: Optional[Config] = None,
                 git_service: Optional[GitService] = None,
                 fs_service: Optional[FileSystemService] = None,
                 config_store: Optional[ConfigStore] = None,
                 cancel_event: Optional[threading.Event] = None):
        self.config = config or Config()
        self.git = git_service or GitService(self.config)
        self.fs = fs_service or FileSystemService()
        self.config_store = config_store or ConfigStore(self.config.default_repos_dir)
        self.cancel_event = cancel_event
        self.loader = TreeLoader(self.config_store, self.fs)

        self.workspace_root: Optional[Path] = None
        self.tree: Optional[TreeStore] = None
        self.layout: Optional[WorkspaceLayout] = None
        self.resolver: Optional[PathResolver] = None
        self.coordinator: Optional[LazyCloneCoordinator] = None
        self.engine: Optional[RecursiveOperationEngine] = None
        self.cwd: Optional[Path] = None
        self.initialized = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, workspace_root: PathLike, cwd: Optional[PathLike] = None) -> "WorkspaceManager":
        """Load the workspace rooted at workspace_root.

        Args:
            workspace_root: Directory holding the root tree definition document
            cwd: Working directory used to resolve "" and relative paths

        Raises:
            ConfigError: if the root document is missing or invalid
        """
        workspace_root = Path(workspace_root).absolute()
        self.tree = self.loader.load(workspace_root)
        self.workspace_root = workspace_root
        self.layout = WorkspaceLayout(workspace_root, self.tree)
        self.resolver = PathResolver(workspace_root, self.tree, self.config_store)
        self.coordinator = LazyCloneCoordinator(
            self.tree,
            self.layout,
            self.git,
            self.fs,
            self.loader,
            persist=self._persist_node,
            clone_options=CloneOptions(depth=self.config.clone_depth),
        )
        self.engine = RecursiveOperationEngine(self.layout, self.coordinator, self.cancel_event)
        self.cwd = Path(cwd) if cwd is not None else None
        self.initialized = True

        current = self.resolver.tree_path_for(self._cwd())
        if current is not None:
            self.tree.current_path = current
        logger.debug(f"Workspace {workspace_root} initialized, current node {self.tree.current_path}")
        return self

    @classmethod
    def from_directory(cls, start: Optional[PathLike] = None, config: Optional[Config] = None,
                       **collaborators) -> "WorkspaceManager":
        """Create a manager for the workspace enclosing start (or config.workspace)."""
        manager = cls(config, **collaborators)
        start = Path(start) if start is not None else Path(os.getcwd())
        if manager.config.workspace:
            root = Path(manager.config.workspace).expanduser()
        else:
            root = manager.config_store.find_workspace_root(start)
            if root is None:
                raise ConfigError(str(start), f"not inside a git-grove workspace (no {DEFAULT_CONFIG_FILE} found)")
        return manager.initialize(root, cwd=start)

    def init_workspace(self, directory: PathLike, name: Optional[str] = None,
                       repos_dir: Optional[str] = None) -> Path:
        """Write an empty root document into directory and create its repository area."""
        directory = Path(directory).absolute()
        if self.config_store.find_document(directory) is not None:
            raise GitGroveError(f"{directory} already contains a workspace")
        document = WorkspaceDocument(
            name=name or directory.name,
            repos_dir=repos_dir or self.config.default_repos_dir,
        )
        document_path = directory / DEFAULT_CONFIG_FILE
        self.config_store.save(document_path, document)
        self.fs.mkdir_all(directory / document.repos_dir)
        logger.info(f"Initialized workspace '{document.name}' in {directory}")
        return document_path

    def _require_initialized(self) -> None:
        if not self.initialized:
            raise ManagerNotInitializedError()

    def _cwd(self) -> Path:
        return self.cwd if self.cwd is not None else Path(os.getcwd())

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def resolve_node(self, path: Optional[str] = "") -> Node:
        """Resolve user input to a node (see PathResolver.resolve)."""
        self._require_initialized()
        return self.tree.get_node(self.resolver.resolve(path, cwd=self._cwd()))

    def get_node(self, path: str) -> Node:
        self._require_initialized()
        return self.tree.get_node(path)

    def list_children(self, path: Optional[str] = "") -> List[Node]:
        return list(self.resolve_node(path).children)

    def tree_at(self, path: Optional[str] = "") -> Node:
        """Subtree to display, rooted at the resolved node."""
        return self.resolve_node(path)

    def get_tree_path(self, directory: PathLike) -> str:
        """Map a directory on disk to its tree path.

        Raises:
            NodeNotFoundError: if the directory belongs to no node
        """
        self._require_initialized()
        result = self.resolver.tree_path_for(directory)
        if result is None:
            raise NodeNotFoundError(str(directory), "not inside the workspace tree")
        return result

    def resolve_path(self, target: Optional[str] = "", ensure: bool = False) -> Path:
        """Directory of the resolved node, cloning it (and uncloned ancestors) when ensure is set."""
        node = self.resolve_node(target)
        if ensure and self.coordinator.needs_clone(node):
            self._ensure_ancestors(node, [])
            self.coordinator.ensure_cloned(node)
        return self.layout.node_directory(node.path)

    # ------------------------------------------------------------------
    # Recursive operations
    # ------------------------------------------------------------------

    def clone_repos(self, path: Optional[str] = "", recursive: bool = True,
                    include_lazy: bool = False) -> OperationSummary:
        """Clone uncloned repositories at and below path.

        Eager repositories are always cloned, lazy ones only with
        include_lazy. A node named explicitly is cloned even if lazy.
        Without recursive only the node and its direct children are visited.
        """
        node = self.resolve_node(path)
        include_lazy = include_lazy or self.config.include_lazy
        return self._run(node, "clone", None, recursive=True, include_lazy=include_lazy,
                         max_depth=None if recursive else 1, materialize_start=True)

    def status_node(self, path: Optional[str] = "", recursive: bool = False) -> OperationSummary:
        """Collect git status; statuses always come from git, never from cached flags."""
        node = self.resolve_node(path)
        statuses = {}

        def status_action(target: Node, directory: Path) -> None:
            status = self.git.status(directory)
            target.has_changes = not status.is_clean
            statuses[target.path] = status

        if recursive:
            summary = self._run(node, "status", status_action, recursive=True, include_lazy=False)
        else:
            summary = self._single(node, "status", status_action, include_lazy=False)
        summary.statuses = statuses
        return summary

    def pull_node(self, path: Optional[str] = "", recursive: bool = False,
                  force: bool = False) -> OperationSummary:
        return self.pull_node_with_options(path, recursive, force, include_lazy=self.config.include_lazy)

    def pull_node_with_options(self, path: Optional[str] = "", recursive: bool = False,
                               force: bool = False, include_lazy: bool = False) -> OperationSummary:
        """Pull at path; with include_lazy uncloned nodes are cloned first."""
        node = self.resolve_node(path)
        options = PullOptions(force=force or self.config.force)

        def pull_action(target: Node, directory: Path) -> None:
            self.git.pull(directory, options)

        if recursive:
            return self._run(node, "pull", pull_action, recursive=True, include_lazy=include_lazy)
        return self._single(node, "pull", pull_action, include_lazy=include_lazy)

    def push_node(self, path: Optional[str] = "", recursive: bool = False) -> OperationSummary:
        node = self.resolve_node(path)
        options = PushOptions(remote=self.config.remote_name)

        def push_action(target: Node, directory: Path) -> None:
            self.git.push(directory, options)

        if recursive:
            return self._run(node, "push", push_action, recursive=True, include_lazy=False)
        return self._single(node, "push", push_action, include_lazy=False)

    def commit_node(self, path: Optional[str] = "", message: str = "",
                    recursive: bool = False) -> OperationSummary:
        """Stage and commit all changes; repositories with nothing to commit still count as succeeded."""
        if not message or not message.strip():
            raise GitGroveError("commit message cannot be empty")
        node = self.resolve_node(path)
        options = CommitOptions(all=True)

        def commit_action(target: Node, directory: Path) -> None:
            if not self.git.commit(directory, message, options):
                logger.info(f"{target.path}: nothing to commit")

        if recursive:
            return self._run(node, "commit", commit_action, recursive=True, include_lazy=False)
        return self._single(node, "commit", commit_action, include_lazy=False)

    def fetch_node(self, path: Optional[str] = "", recursive: bool = False) -> OperationSummary:
        node = self.resolve_node(path)
        options = FetchOptions(prune=True)

        def fetch_action(target: Node, directory: Path) -> None:
            self.git.fetch(directory, options)

        if recursive:
            return self._run(node, "fetch", fetch_action, recursive=True, include_lazy=False)
        return self._single(node, "fetch", fetch_action, include_lazy=False)

    def _run(self, node: Node, operation: str, action: Optional[NodeAction], recursive: bool,
             include_lazy: bool, max_depth: Optional[int] = None,
             materialize_start: bool = False) -> OperationSummary:
        warnings: List[str] = []
        if include_lazy or materialize_start:
            try:
                self._ensure_ancestors(node, warnings)
            except (GitGroveError, OSError) as e:
                summary = OperationSummary(operation=operation, start_path=node.path)
                summary.record_failure(node.path, e)
                summary.warnings.extend(warnings)
                return summary
        summary = self.engine.run(node, operation, action, recursive=recursive,
                                  include_lazy=include_lazy, max_depth=max_depth,
                                  materialize_start=materialize_start)
        summary.warnings[:0] = warnings
        return summary

    def _single(self, node: Node, operation: str, action: NodeAction,
                include_lazy: bool) -> OperationSummary:
        """Run an operation on one node; errors propagate to the caller.

        A node without a repository of its own (the root, a config
        reference) stands for its direct children instead.
        """
        if not node.is_repository:
            if not node.children:
                raise NotARepositoryError(node.path)
            return self._run(node, operation, action, recursive=True,
                             include_lazy=include_lazy, max_depth=1)
        summary = OperationSummary(operation=operation, start_path=node.path)
        if not node.is_cloned:
            if not include_lazy:
                raise NodeNotClonedError(node.path)
            self._ensure_ancestors(node, summary.warnings)
            if self.coordinator.ensure_cloned(node, summary.warnings) == CloneOutcome.CLONED:
                summary.cloned.append(node.path)
        action(node, self.layout.node_directory(node.path))
        summary.record_success(node.path)
        return summary

    def _ensure_ancestors(self, node: Node, warnings: List[str]) -> None:
        """Clone uncloned ancestors of node, outermost first."""
        segments = tree_path.split(node.path)
        for depth in range(1, len(segments)):
            ancestor = self.tree.get_node("/" + "/".join(segments[:depth]))
            if self.coordinator.needs_clone(ancestor):
                self.coordinator.ensure_cloned(ancestor, warnings)

    # ------------------------------------------------------------------
    # Structural changes
    # ------------------------------------------------------------------

    def add(self, url: str, options: Optional[AddOptions] = None) -> Node:
        """Add a repository node under the current node (or options.parent).

        Non-lazy repositories are cloned right away; a failed clone leaves
        the node in the tree, uncloned, and is logged as a warning.

        Raises:
            ConfigError: if the name or url is invalid
            DuplicateNodeError: if the parent already has a node with that name
        """
        self._require_initialized()
        options = options or AddOptions()
        if options.parent:
            parent = self.resolve_node(options.parent)
        else:
            parent = self.tree.get_current()

        definition = NodeDefinition(
            name=options.name or extract_repo_name(url),
            url=url.strip(),
            fetch=options.fetch,
        )
        definition.validate()
        self._prepare_level(parent)

        node = Node.from_definition(definition, parent.path, parent.repos_dir, parent.child_document)
        self.tree.add_node(parent.path, node)
        directory = self.layout.node_directory(node.path)
        node.is_cloned = self.fs.is_git_repo(directory)
        logger.info(f"Added {node.path} ({url})")

        if not node.is_lazy and not node.is_cloned:
            warnings: List[str] = []
            try:
                self._ensure_ancestors(node, warnings)
                self.coordinator.ensure_cloned(node, warnings, CloneOptions(
                    branch=options.branch, depth=self.config.clone_depth))
                return node
            except (GitGroveError, OSError) as e:
                logger.warning(f"Added {node.path} but cloning failed: {e}")

        warning = self._persist_node(node)
        if warning:
            logger.warning(warning)
        return node

    def _prepare_level(self, parent: Node) -> None:
        """Give a cloned repository without its own document a new one to hold added children."""
        if parent.child_document:
            return
        if not parent.is_repository:
            raise GitGroveError(f"Cannot add nodes under '{parent.path}'")
        if not parent.is_cloned:
            raise NodeNotClonedError(parent.path)
        parent.repos_dir = self.config.default_repos_dir
        parent.child_document = str(self.layout.node_directory(parent.path) / DEFAULT_CONFIG_FILE)

    def remove(self, name: str) -> Node:
        """Remove a child of the current node (or the node at a tree path) with its subtree.

        The tree change is authoritative; deleting the directory and saving
        the document are best effort and only logged when they fail.
        """
        self._require_initialized()
        current = self.tree.get_current()
        child = current.child(name) if "/" not in name else None
        node = child if child is not None else self.resolve_node(name)
        if node.path == ROOT_PATH:
            raise GitGroveError("Cannot remove the workspace root")

        directory = self.layout.node_directory(node.path)
        parent = self.tree.get_parent(node.path)
        self.tree.remove_node(node.path)
        logger.info(f"Removed {node.path} from the tree")

        try:
            self.fs.remove_all(directory)
        except OSError as e:
            logger.warning(f"Could not delete {directory}: {e}")

        warning = self._save_level(parent)
        if warning:
            logger.warning(warning)
        return node

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _persist_node(self, node: Node) -> Optional[str]:
        """Save the document declaring node; returns a warning on failure."""
        parent = self.tree.get_parent(node.path) if self.tree.has_node(node.path) else None
        if parent is None:
            return None
        return self._save_level(parent)

    def _save_level(self, owner: Node) -> Optional[str]:
        """Rewrite the document declaring owner's children from the tree.

        A document whose entries already match the tree is left untouched,
        so clone-only changes never reformat files tracked by a repository.
        """
        document_path = owner.child_document
        if not document_path:
            return None
        try:
            name = owner.name
            nodes = [child.to_definition() for child in owner.children]
            if self.config_store.exists(document_path):
                current = self.config_store.load(document_path)
                if current.nodes == nodes and current.repos_dir == owner.repos_dir:
                    logger.debug(f"{document_path} is up to date")
                    return None
                name = current.name
            document = WorkspaceDocument(
                name=name,
                repos_dir=owner.repos_dir,
                nodes=nodes,
                path=document_path,
            )
            self.config_store.save(document_path, document)
        except (ConfigError, PersistenceError) as e:
            return f"Tree change kept in memory but not saved: {e}"
        return None
