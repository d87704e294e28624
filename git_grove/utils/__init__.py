"""Utility functions for git-grove."""

from .tree_path import normalize, join, parent, basename, split, is_within

__all__ = [
    "normalize",
    "join",
    "parent",
    "basename",
    "split",
    "is_within",
]
