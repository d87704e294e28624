"""Recursive git operations over a subtree"""
import threading
from typing import Any, Callable, Optional

from git_grove.core.layout import WorkspaceLayout
from git_grove.core.lazy_clone import LazyCloneCoordinator
from git_grove.exceptions import GitGroveError
from git_grove.logging_config import get_logger
from git_grove.models.node import Node
from git_grove.models.results import CloneOutcome, OperationSummary

logger = get_logger(__name__)

# Applies one git operation to a node's working copy
NodeAction = Callable[[Node, Any], Any]


class RecursiveOperationEngine:
    """Depth-first, parent-before-children traversal with per-node failure isolation.

    A failing node never stops the walk: its error is recorded in the
    summary and its siblings and their subtrees are still visited.
    """

    def __init__(self, layout: WorkspaceLayout, coordinator: LazyCloneCoordinator,
                 cancel_event: Optional[threading.Event] = None):
        self.layout = layout
        self.coordinator = coordinator
        self.cancel_event = cancel_event

    def run(self, start: Node, operation: str, action: Optional[NodeAction] = None,
            recursive: bool = True, include_lazy: bool = False,
            max_depth: Optional[int] = None, materialize_start: bool = False) -> OperationSummary:
        """Apply an operation to start and, when recursive, to its subtree.

        Args:
            start: Node the walk starts at
            operation: Operation name used in the summary and logs
            action: Called as ``action(node, directory)`` for every cloned
                repository node; None means cloning is the operation itself
            recursive: Visit descendants of start
            include_lazy: Clone uncloned nodes on the way instead of skipping them
            max_depth: Depth limit below start (0 = start only)
            materialize_start: Clone start itself even if it is lazy

        Returns:
            Summary of attempted, succeeded and failed nodes
        """
        summary = OperationSummary(operation=operation, start_path=start.path)
        if not recursive:
            max_depth = 0
        if not self._cancelled(summary) and \
                self._process(start, summary, action, include_lazy or materialize_start):
            if max_depth is None or max_depth > 0:
                for child in list(start.children):
                    self._visit(child, 1, summary, action, include_lazy, max_depth)
        logger.info(
            f"{operation} {start.path}: {summary.succeeded} succeeded, "
            f"{summary.failed} failed, {len(summary.skipped)} skipped"
        )
        return summary

    def _cancelled(self, summary: OperationSummary) -> bool:
        if self.cancel_event is not None and self.cancel_event.is_set():
            if not summary.cancelled:
                logger.warning(f"{summary.operation} cancelled, remaining nodes not visited")
            summary.cancelled = True
        return summary.cancelled

    def _visit(self, node: Node, depth: int, summary: OperationSummary,
               action: Optional[NodeAction], include_lazy: bool,
               max_depth: Optional[int]) -> None:
        if self._cancelled(summary):
            return

        if not self._process(node, summary, action, include_lazy):
            return

        if max_depth is not None and depth >= max_depth:
            return
        for child in list(node.children):
            self._visit(child, depth + 1, summary, action, include_lazy, max_depth)

    def _process(self, node: Node, summary: OperationSummary,
                 action: Optional[NodeAction], include_lazy: bool) -> bool:
        """Handle one node; returns whether its children should be visited."""
        if node.is_config:
            if not node.is_cloned and include_lazy:
                try:
                    self.coordinator.ensure_cloned(node, summary.warnings)
                except (GitGroveError, OSError) as e:
                    logger.warning(f"Cannot prepare {node.path}: {e}")
                    summary.record_failure(node.path, e)
                    return False
            return True

        if not node.is_repository:
            return True

        if not node.is_cloned:
            if not include_lazy and (node.is_lazy or action is not None):
                logger.debug(f"Skipping uncloned {node.path}")
                summary.record_skip(node.path)
                return False
            try:
                outcome = self.coordinator.ensure_cloned(node, summary.warnings)
            except (GitGroveError, OSError) as e:
                logger.warning(f"Clone of {node.path} failed: {e}")
                summary.record_failure(node.path, e)
                return False
            if outcome == CloneOutcome.CLONED:
                summary.cloned.append(node.path)
            if action is None:
                summary.record_success(node.path)
                return True

        if action is None:
            return True

        try:
            action(node, self.layout.node_directory(node.path))
        except (GitGroveError, OSError) as e:
            logger.warning(f"{summary.operation} failed for {node.path}: {e}")
            summary.record_failure(node.path, e)
            return True
        summary.record_success(node.path)
        return True
