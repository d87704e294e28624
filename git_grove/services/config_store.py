"""Loading and saving tree definition documents"""
from pathlib import Path
from typing import List, Optional, Union

import yaml

from git_grove.constants import CONFIG_FILE_NAMES, DEFAULT_REPOS_DIR
from git_grove.exceptions import ConfigError, PersistenceError
from git_grove.logging_config import get_logger
from git_grove.models.workspace import WorkspaceDocument

logger = get_logger(__name__)

PathLike = Union[str, Path]


class ConfigStore:
    """YAML persistence for tree definition documents."""

    def __init__(self, default_repos_dir: str = DEFAULT_REPOS_DIR):
        self.default_repos_dir = default_repos_dir

    def exists(self, path: PathLike) -> bool:
        return Path(path).is_file()

    def load(self, path: PathLike) -> WorkspaceDocument:
        """Load and validate a document.

        Args:
            path: Document location (symlinks are followed)

        Returns:
            The validated document, with ``path`` set to the given location

        Raises:
            ConfigError: if the file is missing, unreadable, not YAML or invalid
        """
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            raise ConfigError(str(path), "file does not exist")
        except yaml.YAMLError as e:
            raise ConfigError(str(path), f"cannot parse YAML: {e}")
        except OSError as e:
            raise ConfigError(str(path), f"cannot read file: {e}")

        document = WorkspaceDocument.from_dict(data, str(path), self.default_repos_dir)
        logger.debug(f"Loaded {path} ({len(document.nodes)} nodes, repos_dir={document.repos_dir})")
        return document

    def save(self, path: PathLike, document: WorkspaceDocument) -> None:
        """Validate and atomically write a document.

        A symlinked document is written through to its target.

        Raises:
            ConfigError: if the document is invalid
            PersistenceError: if the file cannot be written
        """
        document.validate()
        target = Path(path).resolve()
        temp_file = target.with_name(target.name + '.tmp')
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_file, 'w', encoding='utf-8') as f:
                yaml.safe_dump(document.to_dict(), f, sort_keys=False, default_flow_style=False)
                f.flush()
            temp_file.replace(target)
            logger.debug(f"Saved {target} ({len(document.nodes)} nodes)")
        except OSError as e:
            raise PersistenceError(str(path), str(e))
        finally:
            if temp_file.exists():
                try:
                    temp_file.unlink()
                except OSError as e:
                    logger.debug(f"Could not remove {temp_file}: {e}")

    def find_document(self, directory: PathLike) -> Optional[Path]:
        """Return the definition document held directly in a directory, if any."""
        directory = Path(directory)
        for name in CONFIG_FILE_NAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate
        return None

    def find_workspace_root(self, start: PathLike) -> Optional[Path]:
        """Find the workspace root enclosing a directory.

        Walks upward collecting directories that hold a regular (not
        symlinked) document; the outermost one is the workspace root, since
        cloned repositories and config-reference directories may carry
        documents of their own.
        """
        current = Path(start).resolve()
        candidates: List[Path] = []
        for directory in [current, *current.parents]:
            for name in CONFIG_FILE_NAMES:
                candidate = directory / name
                if candidate.is_file() and not candidate.is_symlink():
                    candidates.append(directory)
                    break
        if not candidates:
            return None
        return candidates[-1]
