"""Aggregated results of tree operations"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple

from git_grove.models.git_status import GitStatus


class CloneOutcome(Enum):
    """What ensuring a node's working copy did."""
    CLONED = "cloned"
    ALREADY_PRESENT = "already-present"
    CREATED = "created"  # Config-reference directory materialized


@dataclass
class OperationSummary:
    """Per-node outcome counts of one recursive operation."""
    operation: str
    start_path: str = "/"
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    failures: List[Tuple[str, str]] = field(default_factory=list)  # (node path, error)
    succeeded_paths: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    cloned: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    statuses: Dict[str, GitStatus] = field(default_factory=dict)
    cancelled: bool = False

    def record_success(self, path: str) -> None:
        self.attempted += 1
        self.succeeded += 1
        self.succeeded_paths.append(path)

    def record_failure(self, path: str, error: Exception) -> None:
        self.attempted += 1
        self.failed += 1
        self.failures.append((path, str(error)))

    def record_skip(self, path: str) -> None:
        self.skipped.append(path)

    @property
    def ok(self) -> bool:
        return self.failed == 0 and not self.cancelled
