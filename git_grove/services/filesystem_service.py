"""Filesystem access used by the workspace core"""
import os
import shutil
from pathlib import Path
from typing import Optional, Union

from git_grove.logging_config import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]


class FileSystemService:
    """Thin wrapper over directory operations so they can be substituted in tests."""

    def exists(self, path: PathLike) -> bool:
        return Path(path).exists()

    def mkdir_all(self, path: PathLike) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def remove_all(self, path: PathLike) -> None:
        """Remove a directory tree, a file, or a symlink; missing paths are ignored."""
        path = Path(path)
        if path.is_symlink() or path.is_file():
            path.unlink()
        elif path.is_dir():
            shutil.rmtree(path)
        else:
            logger.debug(f"Nothing to remove at {path}")

    def stat(self, path: PathLike) -> Optional[os.stat_result]:
        try:
            return Path(path).stat()
        except FileNotFoundError:
            return None

    def is_git_repo(self, path: PathLike) -> bool:
        """A working copy has a .git directory (or a .git file for worktrees/submodules)."""
        return (Path(path) / ".git").exists()

    def is_empty_dir(self, path: PathLike) -> bool:
        path = Path(path)
        return path.is_dir() and not any(path.iterdir())

    def link_or_copy(self, source: PathLike, target: PathLike) -> None:
        """Symlink target to source, copying the file when symlinks are unavailable."""
        source = Path(source)
        target = Path(target)
        if target.is_symlink() or target.exists():
            target.unlink()
        try:
            target.symlink_to(source.resolve())
        except OSError as e:
            logger.debug(f"Symlink {target} -> {source} failed ({e}), copying instead")
            shutil.copyfile(source, target)
