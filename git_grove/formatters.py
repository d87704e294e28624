"""Shared formatting utilities for git-grove."""

from git_grove.constants import (
    CLI_COLORS,
    FILE_STATUS_PREFIX,
    SYMBOL_CLONED,
    SYMBOL_CONFIG,
    SYMBOL_LAZY,
)
from git_grove.models.git_status import GitFileStatus, GitStatus
from git_grove.models.node import Node


def format_counts(status: GitStatus) -> str:
    """
    Summarize changed files of a status.

    Args:
        status: Working tree status

    Returns:
        "(clean)" or "(N untracked, M modified, K staged)"
    """
    if status.is_clean:
        return "(clean)"
    parts = []
    if status.untracked_count:
        parts.append(f"{status.untracked_count} untracked")
    if status.modified_count:
        parts.append(f"{status.modified_count} modified")
    if status.staged_count:
        parts.append(f"{status.staged_count} staged")
    return f"({', '.join(parts)})"


def format_status_line(name: str, status: GitStatus) -> str:
    """One-line status of a repository, e.g. ``api: branch=main (clean)``."""
    line = f"{name}: branch={status.branch or '?'} {format_counts(status)}"
    sync = format_sync(status.ahead, status.behind)
    if sync:
        line += f" {sync}"
    return line


def format_sync(ahead: int, behind: int) -> str:
    """Arrows for commits to push and to pull."""
    parts = []
    if ahead:
        parts.append(f"↑{ahead}")
    if behind:
        parts.append(f"↓{behind}")
    return " ".join(parts)


def format_file_status(file_status: GitFileStatus) -> str:
    """Changed file with its prefix: + staged, ? untracked, M modified, D deleted, A added."""
    if file_status.status == "untracked":
        prefix = FILE_STATUS_PREFIX["untracked"]
    elif file_status.staged:
        prefix = FILE_STATUS_PREFIX["added"] if file_status.status == "added" else FILE_STATUS_PREFIX["staged"]
    elif file_status.status == "deleted":
        prefix = FILE_STATUS_PREFIX["deleted"]
    else:
        prefix = FILE_STATUS_PREFIX["modified"]
    return f"{prefix} {file_status.path}"


def get_status_style(status: GitStatus) -> str:
    return CLI_COLORS["clean"] if status.is_clean else CLI_COLORS["dirty"]


def format_node_label(node: Node) -> str:
    """Tree label for a node, marking config references, clones and lazy nodes."""
    if node.is_config:
        return f"[{CLI_COLORS['config']}]{SYMBOL_CONFIG} {node.name}[/] [dim]({node.config_file})[/dim]"
    if not node.repository:
        return f"[bold]{node.name}[/bold]"
    if node.is_cloned:
        return f"{SYMBOL_CLONED} {node.name}"
    if node.is_lazy:
        return f"[{CLI_COLORS['lazy']}]{SYMBOL_LAZY} {node.name} (lazy)[/]"
    return f"[{CLI_COLORS['lazy']}]{node.name} (not cloned)[/]"
