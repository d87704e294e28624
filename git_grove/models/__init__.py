"""Data models for git-grove."""

from .node import Node, NodeKind
from .workspace import FetchMode, NodeDefinition, WorkspaceDocument, is_meta_repo
from .git_status import (
    GitStatus,
    GitFileStatus,
    CloneOptions,
    PullOptions,
    PushOptions,
    FetchOptions,
    CommitOptions,
    AddOptions,
)
from .results import OperationSummary, CloneOutcome

__all__ = [
    "Node",
    "NodeKind",
    "FetchMode",
    "NodeDefinition",
    "WorkspaceDocument",
    "is_meta_repo",
    "GitStatus",
    "GitFileStatus",
    "CloneOptions",
    "PullOptions",
    "PushOptions",
    "FetchOptions",
    "CommitOptions",
    "AddOptions",
    "OperationSummary",
    "CloneOutcome",
]
