"""Pytest fixtures for git-grove tests"""
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

import git
import pytest
import yaml

from git_grove.config import Config
from git_grove.core.manager import WorkspaceManager
from git_grove.exceptions import CloneError, GitOperationError
from git_grove.models.git_status import GitStatus


class SpyGitService:
    """Records every call instead of running git.

    Clones create a ``.git`` directory so the filesystem looks cloned.
    Operations listed in ``failures`` as (operation, directory name) raise.
    """

    def __init__(self):
        self.calls: List[Tuple[str, str]] = []
        self.failures: Set[Tuple[str, str]] = set()
        self.statuses: Dict[str, GitStatus] = {}
        self.in_git_operation = False

    def _record(self, operation: str, path) -> None:
        path = Path(path)
        self.calls.append((operation, str(path)))
        if (operation, path.name) in self.failures:
            if operation == "clone":
                raise CloneError("url", str(path), "simulated failure")
            raise GitOperationError(operation, str(path), "simulated failure")

    def calls_for(self, operation: str) -> List[str]:
        return [path for op, path in self.calls if op == operation]

    def clone(self, url, path, options=None):
        self._record("clone", path)
        (Path(path) / ".git").mkdir(parents=True)

    def pull(self, path, options=None):
        self._record("pull", path)

    def push(self, path, options=None):
        self._record("push", path)

    def commit(self, path, message, options=None):
        self._record("commit", path)
        return True

    def status(self, path):
        self._record("status", path)
        return self.statuses.get(Path(path).name, GitStatus(branch="main"))

    def fetch(self, path, options=None):
        self._record("fetch", path)


def write_document(directory: Path, name: str, nodes: Optional[List[dict]] = None,
                   repos_dir: Optional[str] = None, filename: str = "grove.yaml") -> Path:
    """Write a tree definition document and return its path."""
    directory.mkdir(parents=True, exist_ok=True)
    workspace = {"name": name}
    if repos_dir:
        workspace["repos_dir"] = repos_dir
    path = directory / filename
    path.write_text(yaml.safe_dump({"workspace": workspace, "nodes": nodes or []}, sort_keys=False))
    return path


def make_cloned(directory: Path) -> Path:
    """Make a directory look like a git working copy."""
    (directory / ".git").mkdir(parents=True, exist_ok=True)
    return directory


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def spy_git():
    return SpyGitService()


@pytest.fixture
def scenario_workspace(temp_dir):
    """Workspace with / -> team (cloned) -> service1 (cloned), service2 (lazy, not cloned).

    team is a meta-repository whose own grove.yaml declares the services.
    """
    workspace = temp_dir / "workspace"
    write_document(workspace, "scenario", [
        {"name": "team", "url": "https://example.com/team.git", "fetch": "eager"},
    ], repos_dir="repos")
    team_dir = make_cloned(workspace / "repos" / "team")
    write_document(team_dir, "team", [
        {"name": "service1", "url": "https://example.com/service1.git", "fetch": "eager"},
        {"name": "service2", "url": "https://example.com/service2.git", "fetch": "lazy"},
    ], repos_dir="repos")
    make_cloned(team_dir / "repos" / "service1")
    return workspace


@pytest.fixture
def scenario_manager(scenario_workspace, spy_git):
    """Initialized manager over scenario_workspace using the spy git service."""
    manager = WorkspaceManager(Config(), git_service=spy_git)
    return manager.initialize(scenario_workspace, cwd=scenario_workspace)


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository for testing."""
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    test_file = repo_path / "README.md"
    test_file.write_text("# Test Repository\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")
    repo.git.branch('-M', 'main')

    yield repo

    repo.close()


@pytest.fixture
def bare_remote(git_repo, temp_dir):
    """A bare repository seeded from git_repo, usable as a clone URL."""
    remote_path = temp_dir / "remote.git"
    bare = git.Repo.clone_from(git_repo.working_dir, remote_path, bare=True)
    bare.close()
    return remote_path


def configure_identity(repo_path: Path) -> None:
    """Set a commit identity in a freshly cloned repository."""
    repo = git.Repo(repo_path)
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()
    repo.close()


@pytest.fixture(autouse=True)
def _no_workspace_env(monkeypatch):
    """Keep a workspace set in the caller's environment out of the tests."""
    monkeypatch.delenv("GIT_GROVE_WORKSPACE", raising=False)
