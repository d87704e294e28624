"""Tests for GitService"""
import pytest
import git

from git_grove.config import Config
from git_grove.exceptions import CloneError, GitOperationError
from git_grove.models.git_status import CloneOptions, PullOptions
from git_grove.services.git_service import (
    GitService,
    parse_branch_header,
    parse_porcelain_status,
)

from conftest import configure_identity


@pytest.fixture
def service():
    return GitService(Config())


@pytest.fixture
def working_copy(service, bare_remote, temp_dir):
    """A clone of bare_remote with a commit identity."""
    path = temp_dir / "work"
    service.clone(str(bare_remote), path)
    configure_identity(path)
    return path


class TestParsing:
    """Test porcelain output parsing."""

    @pytest.mark.parametrize("line,expected", [
        ("## main", ("main", 0, 0)),
        ("## main...origin/main", ("main", 0, 0)),
        ("## main...origin/main [ahead 2]", ("main", 2, 0)),
        ("## dev...origin/dev [ahead 1, behind 3]", ("dev", 1, 3)),
        ("## main...origin/main [gone]", ("main", 0, 0)),
        ("## No commits yet on main", ("main", 0, 0)),
        ("## HEAD (no branch)", ("HEAD", 0, 0)),
    ])
    def test_branch_header(self, line, expected):
        assert parse_branch_header(line) == expected

    def test_porcelain_status(self):
        """Index and worktree columns are reported separately."""
        output = "\n".join([
            "## main...origin/main [behind 1]",
            "M  staged.py",
            " M changed.py",
            "MM both.py",
            "?? new.txt",
            "R  old.py -> renamed.py",
            "!! ignored.log",
        ])
        status = parse_porcelain_status(output)

        assert status.branch == "main"
        assert status.behind == 1
        assert status.is_clean is False
        assert status.has_staged and status.has_modified and status.has_untracked
        assert status.untracked_count == 1
        assert status.staged_count == 3
        paths = {(f.path, f.staged) for f in status.files}
        assert ("renamed.py", True) in paths
        assert ("both.py", True) in paths and ("both.py", False) in paths
        assert all(f.path != "ignored.log" for f in status.files)

    def test_clean_status(self):
        status = parse_porcelain_status("## main\n")
        assert status.is_clean is True
        assert status.files == []


class TestGitServiceInit:
    """Test GitService initialization."""

    def test_defaults(self):
        service = GitService()
        assert service.remote_name == "origin"
        assert service.clone_depth is None
        assert service.in_git_operation is False

    def test_from_config(self):
        service = GitService(Config(remote_name="upstream", clone_depth=1))
        assert service.remote_name == "upstream"
        assert service.clone_depth == 1


class TestClone:
    """Test cloning."""

    def test_clone(self, service, bare_remote, temp_dir):
        """A clone produces a working copy tracking the remote."""
        path = temp_dir / "clone"
        service.clone(str(bare_remote), path)

        assert (path / ".git").is_dir()
        assert (path / "README.md").read_text() == "# Test Repository\n"
        assert service.get_remote_url(path) == str(bare_remote)
        assert service.current_branch(path) == "main"
        assert service.in_git_operation is False

    def test_clone_branch(self, service, git_repo, temp_dir):
        """A named branch is checked out."""
        git_repo.git.branch("release")
        path = temp_dir / "release"
        service.clone(git_repo.working_dir, path, CloneOptions(branch="release"))
        assert service.current_branch(path) == "release"

    def test_clone_failure(self, service, temp_dir):
        """An unreachable URL raises CloneError."""
        with pytest.raises(CloneError) as exc_info:
            service.clone(str(temp_dir / "missing.git"), temp_dir / "target")
        assert exc_info.value.url == str(temp_dir / "missing.git")
        assert isinstance(exc_info.value, GitOperationError)
        assert service.in_git_operation is False


class TestStatusAndCommit:
    """Test status, add and commit."""

    def test_status_clean(self, service, git_repo):
        status = service.status(git_repo.working_dir)
        assert status.is_clean is True
        assert status.branch == "main"

    def test_status_detects_changes(self, service, git_repo, temp_dir):
        """Untracked, staged and modified files are all reported."""
        work = temp_dir / "test_repo"
        (work / "untracked.txt").write_text("new\n")
        (work / "README.md").write_text("# Changed\n")
        (work / "staged.txt").write_text("staged\n")
        service.add(work, ["staged.txt"])

        status = service.status(work)
        assert status.is_clean is False
        assert status.has_untracked
        assert status.has_modified
        assert status.has_staged
        assert {f.path for f in status.files} == {"untracked.txt", "README.md", "staged.txt"}

    def test_commit(self, service, git_repo, temp_dir):
        """Commit stages everything and reports whether it committed."""
        work = temp_dir / "test_repo"
        (work / "feature.txt").write_text("feature\n")

        assert service.commit(work, "Add feature") is True
        assert git_repo.head.commit.message.strip() == "Add feature"
        assert service.status(work).is_clean is True

    def test_commit_nothing(self, service, git_repo):
        """A clean working tree is not an error."""
        head = git_repo.head.commit.hexsha
        assert service.commit(git_repo.working_dir, "Nothing") is False
        assert git_repo.head.commit.hexsha == head

    def test_commit_empty_message(self, service, git_repo):
        with pytest.raises(GitOperationError, match="empty"):
            service.commit(git_repo.working_dir, "  ")

    def test_checkout(self, service, git_repo):
        service.checkout(git_repo.working_dir, "topic", create=True)
        assert service.current_branch(git_repo.working_dir) == "topic"
        service.checkout(git_repo.working_dir, "main")
        assert service.current_branch(git_repo.working_dir) == "main"


class TestRemoteOperations:
    """Test push, pull and fetch against a bare remote."""

    def test_push_then_pull(self, service, bare_remote, working_copy, temp_dir):
        """A pushed commit arrives in another clone."""
        other = temp_dir / "other"
        service.clone(str(bare_remote), other)

        (working_copy / "shared.txt").write_text("shared\n")
        service.commit(working_copy, "Share file")
        service.push(working_copy)

        service.pull(other)
        assert (other / "shared.txt").read_text() == "shared\n"

    def test_fetch_reports_behind(self, service, bare_remote, working_copy, temp_dir):
        """After fetching, status shows commits to pull."""
        other = temp_dir / "other"
        service.clone(str(bare_remote), other)
        (working_copy / "a.txt").write_text("a\n")
        service.commit(working_copy, "Add a")
        service.push(working_copy)

        service.fetch(other)
        assert service.status(other).behind == 1

    def test_force_pull_discards_local_changes(self, service, bare_remote, working_copy, temp_dir):
        """Force pull resets to the upstream branch."""
        (working_copy / "README.md").write_text("# Local edit\n")
        service.commit(working_copy, "Local commit")

        service.pull(working_copy, PullOptions(force=True))
        assert (working_copy / "README.md").read_text() == "# Test Repository\n"
        assert service.status(working_copy).ahead == 0

    def test_pull_without_upstream_fails(self, service, git_repo):
        """A repository without a remote cannot be pulled."""
        with pytest.raises(GitOperationError) as exc_info:
            service.pull(git_repo.working_dir)
        assert exc_info.value.operation == "pull"
        assert service.in_git_operation is False

    def test_missing_remote(self, service, git_repo):
        with pytest.raises(GitOperationError, match="does not exist"):
            service.get_remote_url(git_repo.working_dir)

    def test_not_a_repository(self, service, temp_dir):
        """Operations on plain directories raise GitOperationError."""
        plain = temp_dir / "plain"
        plain.mkdir()
        with pytest.raises(GitOperationError):
            service.status(plain)
