"""Helpers for slash-delimited tree paths.

Tree paths are always absolute and use "/" regardless of the platform
separator: ``/``, ``/team``, ``/team/service``.
"""

from typing import List

from git_grove.constants import PATH_SEPARATOR, ROOT_PATH


def split(path: str) -> List[str]:
    """Split a tree path into its segments, resolving "." and ".." segments.

    ".." above the root stays at the root.
    """
    segments: List[str] = []
    for part in (path or "").replace("\\", PATH_SEPARATOR).split(PATH_SEPARATOR):
        if part in ("", "."):
            continue
        if part == "..":
            if segments:
                segments.pop()
            continue
        segments.append(part)
    return segments


def normalize(path: str) -> str:
    """Return the canonical absolute form of a tree path."""
    segments = split(path)
    if not segments:
        return ROOT_PATH
    return PATH_SEPARATOR + PATH_SEPARATOR.join(segments)


def join(base: str, *names: str) -> str:
    """Join names onto a base path; an absolute name restarts from the root."""
    result = normalize(base)
    for name in names:
        if not name:
            continue
        if name.startswith(PATH_SEPARATOR):
            result = normalize(name)
        else:
            result = normalize(result + PATH_SEPARATOR + name)
    return result


def parent(path: str) -> str:
    """Parent of a tree path; the root is its own parent."""
    segments = split(path)
    return normalize(PATH_SEPARATOR.join(segments[:-1]))


def basename(path: str) -> str:
    """Last segment of a tree path, empty for the root."""
    segments = split(path)
    return segments[-1] if segments else ""


def is_within(path: str, ancestor: str) -> bool:
    """True when path equals ancestor or lies below it."""
    path_segments = split(path)
    ancestor_segments = split(ancestor)
    return path_segments[:len(ancestor_segments)] == ancestor_segments
