"""Git operations service"""
import git
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional, Tuple, Union, TYPE_CHECKING

from git_grove.constants import DEFAULT_REMOTE
from git_grove.exceptions import CloneError, GitOperationError
from git_grove.logging_config import get_logger
from git_grove.models.git_status import (
    CloneOptions,
    CommitOptions,
    FetchOptions,
    GitFileStatus,
    GitStatus,
    PullOptions,
    PushOptions,
)

if TYPE_CHECKING:
    from git_grove.config import Config

logger = get_logger(__name__)

PathLike = Union[str, Path]

# Porcelain v1 status letters
_STATUS_NAMES = {
    "M": "modified",
    "T": "modified",
    "A": "added",
    "D": "deleted",
    "R": "renamed",
    "C": "copied",
    "U": "conflicted",
}


def _error_text(error: Exception) -> str:
    if isinstance(error, git.exc.GitCommandError):
        text = (error.stderr or "").strip() or (error.stdout or "").strip()
        if text.startswith("stderr:"):
            text = text[len("stderr:"):].strip()
        return text.strip("'").strip() or str(error)
    return str(error)


def parse_branch_header(line: str) -> Tuple[str, int, int]:
    """Parse the ``## ...`` header of ``git status --porcelain --branch``.

    Returns:
        (branch, ahead, behind)
    """
    header = line[3:] if line.startswith("## ") else line
    for prefix in ("No commits yet on ", "Initial commit on "):
        if header.startswith(prefix):
            return header[len(prefix):].strip(), 0, 0
    if header.startswith("HEAD (no branch)"):
        return "HEAD", 0, 0

    tracking = ""
    if " [" in header and header.endswith("]"):
        header, tracking = header.split(" [", 1)
        tracking = tracking[:-1]
    branch = header.split("...", 1)[0].strip()

    ahead = behind = 0
    for part in tracking.split(","):
        words = part.strip().split()
        if len(words) == 2 and words[1].isdigit():
            if words[0] == "ahead":
                ahead = int(words[1])
            elif words[0] == "behind":
                behind = int(words[1])
    return branch, ahead, behind


def parse_porcelain_status(output: str) -> GitStatus:
    """Build a GitStatus from ``git status --porcelain=v1 --branch`` output."""
    status = GitStatus()
    for line in output.splitlines():
        if not line.strip():
            continue
        if line.startswith("## "):
            status.branch, status.ahead, status.behind = parse_branch_header(line)
            continue
        if len(line) < 4:
            continue
        index_state, tree_state, file_path = line[0], line[1], line[3:]
        if " -> " in file_path:
            file_path = file_path.split(" -> ", 1)[1]
        file_path = file_path.strip('"')

        if index_state == "?" and tree_state == "?":
            status.files.append(GitFileStatus(file_path, "untracked", staged=False))
            status.has_untracked = True
            continue
        if index_state == "!":
            continue
        if index_state not in (" ", "?"):
            status.files.append(GitFileStatus(file_path, _STATUS_NAMES.get(index_state, "modified"), staged=True))
            status.has_staged = True
        if tree_state not in (" ", "?"):
            status.files.append(GitFileStatus(file_path, _STATUS_NAMES.get(tree_state, "modified"), staged=False))
            status.has_modified = True

    status.is_clean = not status.files
    return status


class GitService:
    """Service for Git operations on working copies addressed by directory."""

    def __init__(self, config: Union['Config', dict, None] = None):
        """Initialize the service.

        Args:
            config: Configuration dictionary or Config object
        """
        config = config or {}
        self.config = config
        self.remote_name = config.get('remote_name', DEFAULT_REMOTE) or DEFAULT_REMOTE
        self.clone_depth = config.get('clone_depth', None)
        self.in_git_operation = False  # Track if operation is in progress
        logger.debug("Git service initialized")

    def _get_repo(self, path: PathLike) -> git.Repo:
        """Open the repository at path (GitPython does not cache or clone here)."""
        return git.Repo(str(path))

    @contextmanager
    def _git_operation(self, operation: str, path: PathLike):
        """Track an operation and translate GitPython errors."""
        self.in_git_operation = True
        logger.debug(f"git {operation} in {path}")
        try:
            yield
        except (git.exc.GitCommandError, git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            raise GitOperationError(operation, str(path), _error_text(e))
        finally:
            self.in_git_operation = False

    def clone(self, url: str, path: PathLike, options: Optional[CloneOptions] = None) -> None:
        """Clone url into path.

        Raises:
            CloneError: if git fails
        """
        options = options or CloneOptions()
        kwargs = {}
        if options.branch:
            kwargs['branch'] = options.branch
        depth = options.depth or self.clone_depth
        if depth:
            kwargs['depth'] = depth
        if options.recursive:
            kwargs['recursive'] = True
        if options.quiet:
            kwargs['quiet'] = True

        self.in_git_operation = True
        try:
            logger.info(f"Cloning {url} into {path}")
            git.Repo.clone_from(url, str(path), **kwargs).close()
        except git.exc.GitCommandError as e:
            raise CloneError(url, str(path), _error_text(e))
        finally:
            self.in_git_operation = False

    def pull(self, path: PathLike, options: Optional[PullOptions] = None) -> None:
        """Pull the current branch; force discards local commits and changes."""
        options = options or PullOptions()
        with self._git_operation("pull", path):
            repo = self._get_repo(path)
            try:
                if options.force:
                    repo.git.fetch(self.remote_name)
                    repo.git.reset('--hard', '@{upstream}')
                    return
                args: List[str] = []
                if options.rebase:
                    args.append('--rebase')
                if options.recursive:
                    args.append('--recurse-submodules')
                if options.quiet:
                    args.append('--quiet')
                repo.git.pull(*args)
            finally:
                repo.close()

    def push(self, path: PathLike, options: Optional[PushOptions] = None) -> None:
        options = options or PushOptions()
        with self._git_operation("push", path):
            repo = self._get_repo(path)
            try:
                args: List[str] = []
                if options.force:
                    args.append('--force')
                if options.quiet:
                    args.append('--quiet')
                remote = options.remote or self.remote_name
                if options.set_upstream:
                    branch = options.branch or repo.active_branch.name
                    args.extend(['--set-upstream', remote, branch])
                elif options.branch:
                    args.extend([remote, options.branch])
                repo.git.push(*args)
            finally:
                repo.close()

    def commit(self, path: PathLike, message: str, options: Optional[CommitOptions] = None) -> bool:
        """Commit staged changes (everything when options.all).

        Returns:
            True if a commit was created, False if there was nothing to commit
        """
        options = options or CommitOptions()
        if not message or not message.strip():
            raise GitOperationError("commit", str(path), "commit message cannot be empty")
        with self._git_operation("commit", path):
            repo = self._get_repo(path)
            try:
                if options.all:
                    repo.git.add('-A')
                staged = parse_porcelain_status(repo.git.status('--porcelain=v1', '--branch')).has_staged
                if not staged and not options.amend:
                    logger.info(f"Nothing to commit in {path}")
                    return False
                args = ['-m', message]
                if options.amend:
                    args.append('--amend')
                if options.no_verify:
                    args.append('--no-verify')
                repo.git.commit(*args)
                return True
            finally:
                repo.close()

    def status(self, path: PathLike) -> GitStatus:
        """Read the working tree status from git."""
        with self._git_operation("status", path):
            repo = self._get_repo(path)
            try:
                return parse_porcelain_status(repo.git.status('--porcelain=v1', '--branch'))
            finally:
                repo.close()

    def fetch(self, path: PathLike, options: Optional[FetchOptions] = None) -> None:
        options = options or FetchOptions()
        with self._git_operation("fetch", path):
            repo = self._get_repo(path)
            try:
                args: List[str] = ['--all'] if options.all else [self.remote_name]
                if options.prune:
                    args.append('--prune')
                if options.tags:
                    args.append('--tags')
                if options.quiet:
                    args.append('--quiet')
                repo.git.fetch(*args)
            finally:
                repo.close()

    def add(self, path: PathLike, files: Optional[List[str]] = None) -> None:
        """Stage files, or everything when no files are given."""
        with self._git_operation("add", path):
            repo = self._get_repo(path)
            try:
                if files:
                    repo.git.add('--', *files)
                else:
                    repo.git.add('-A')
            finally:
                repo.close()

    def checkout(self, path: PathLike, branch: str, create: bool = False) -> None:
        with self._git_operation("checkout", path):
            repo = self._get_repo(path)
            try:
                if create:
                    repo.git.checkout('-b', branch)
                else:
                    repo.git.checkout(branch)
            finally:
                repo.close()

    def get_remote_url(self, path: PathLike, remote: Optional[str] = None) -> str:
        remote = remote or self.remote_name
        with self._git_operation("get_remote_url", path):
            repo = self._get_repo(path)
            try:
                return repo.remote(remote).url
            except ValueError:
                raise GitOperationError("get_remote_url", str(path), f"remote '{remote}' does not exist")
            finally:
                repo.close()

    def current_branch(self, path: PathLike) -> str:
        """Current branch name, or "HEAD" when detached."""
        with self._git_operation("current_branch", path):
            repo = self._get_repo(path)
            try:
                return repo.active_branch.name
            except TypeError:
                return "HEAD"
            finally:
                repo.close()
