"""Display of operation results and the workspace tree"""
from typing import List, Optional

from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from git_grove.constants import CLI_COLORS, SYMBOL_FAILED
from git_grove.formatters import (
    format_counts,
    format_file_status,
    format_node_label,
    format_status_line,
    format_sync,
    get_status_style,
)
from git_grove.logging_config import get_logger
from git_grove.models.node import Node
from git_grove.models.results import OperationSummary
from git_grove.utils import tree_path

logger = get_logger(__name__)


class DisplayService:
    def __init__(self, console: Optional[Console] = None, verbose: bool = False):
        self.console = console or Console()
        self.verbose = verbose

    def display_summary(self, summary: OperationSummary) -> None:
        """Print the result line, the failed nodes and any warnings."""
        for path in summary.cloned:
            self.console.print(f"[green]Cloned {path}[/green]")
        if self.verbose:
            for path in summary.skipped:
                self.console.print(f"[dim]Skipped {path} (not cloned)[/dim]")

        color = CLI_COLORS["failed"] if summary.failed else CLI_COLORS["clean"]
        self.console.print(
            f"\n[{color}]📊 Results: {summary.succeeded} succeeded, {summary.failed} failed[/]"
        )
        if summary.failures:
            self.console.print("\nFailed:")
            for path, error in summary.failures:
                self.console.print(f"  [red]{SYMBOL_FAILED} {path}[/red]: {error}")
            if summary.operation == "pull":
                self.console.print("\n💡 Tip: Use --force to override local changes")
        for warning in summary.warnings:
            self.console.print(f"[yellow]Warning: {warning}[/yellow]")
        if summary.cancelled:
            self.console.print("[yellow]Operation cancelled before all nodes were visited[/yellow]")

    def display_status(self, summary: OperationSummary, show_files: bool = False) -> None:
        """Print one status line per repository, with changed files when asked."""
        if len(summary.statuses) == 1 and not summary.failures:
            path, status = next(iter(summary.statuses.items()))
            name = tree_path.basename(path) or path
            self.console.print(format_status_line(name, status), style=get_status_style(status))
            for file_status in status.files:
                self.console.print(f"  {format_file_status(file_status)}")
            return

        table = Table()
        table.add_column("Node")
        table.add_column("Branch")
        table.add_column("Changes")
        table.add_column("Sync")
        for path, status in summary.statuses.items():
            table.add_row(
                path,
                status.branch or "?",
                format_counts(status),
                format_sync(status.ahead, status.behind),
                style=get_status_style(status),
            )
        self.console.print(table)

        if show_files:
            for path, status in summary.statuses.items():
                if status.is_clean:
                    continue
                self.console.print(f"\n[bold]{path}[/bold]")
                for file_status in status.files:
                    self.console.print(f"  {format_file_status(file_status)}")
        self.display_summary(summary)

    def display_tree(self, node: Node, max_depth: Optional[int] = None) -> None:
        """Render the subtree rooted at node, at most max_depth levels deep."""
        root_label = format_node_label(node) if node.path != "/" else f"[bold]{node.name}[/bold] (/)"
        tree = Tree(root_label)
        self._add_children(tree, node, 1, max_depth)
        self.console.print(tree)

    def _add_children(self, branch: Tree, node: Node, depth: int, max_depth: Optional[int]) -> None:
        if max_depth is not None and depth > max_depth:
            return
        for child in node.children:
            self._add_children(branch.add(format_node_label(child)), child, depth + 1, max_depth)

    def display_children(self, children: List[Node], recursive: bool = False) -> None:
        """List nodes with their clone state; recursive also lists descendants and totals."""
        if not children:
            self.console.print("[dim]No child nodes[/dim]")
            return
        listed: List[Node] = []
        for child in children:
            self._list_node(child, 0, recursive, listed)
        if recursive:
            cloned = sum(1 for node in listed if node.is_repository and node.is_cloned)
            lazy = sum(1 for node in listed if node.is_repository and not node.is_cloned and node.is_lazy)
            self.console.print(f"\n📊 Summary: {len(listed)} total • {cloned} cloned • {lazy} lazy")

    def _list_node(self, node: Node, depth: int, recursive: bool, listed: List[Node]) -> None:
        listed.append(node)
        self.console.print(f"{'  ' * depth}{format_node_label(node)}")
        if recursive:
            for child in node.children:
                self._list_node(child, depth + 1, recursive, listed)
