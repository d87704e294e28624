"""Tests for tree definition documents and the YAML config store"""
import pytest
import yaml

from git_grove.exceptions import ConfigError, PersistenceError
from git_grove.models.workspace import FetchMode, NodeDefinition, WorkspaceDocument, is_meta_repo
from git_grove.services.config_store import ConfigStore

from conftest import write_document


class TestNodeDefinition:
    """Test node entry validation and fetch modes."""

    def test_url_xor_file(self):
        """A node needs exactly one of url and file."""
        with pytest.raises(ConfigError, match="both url and file"):
            NodeDefinition("a", url="https://x/a.git", file="a.yaml").validate()
        with pytest.raises(ConfigError, match="either url or file"):
            NodeDefinition("a").validate()

    def test_name_required(self):
        """An empty name is rejected."""
        with pytest.raises(ConfigError, match="name is required"):
            NodeDefinition("", url="https://x/a.git").validate()

    def test_name_must_be_single_segment(self):
        """Names cannot contain separators."""
        with pytest.raises(ConfigError):
            NodeDefinition("a/b", url="https://x/a.git").validate()

    def test_fetch_modes(self):
        """Eager and lazy are explicit; auto depends on the name."""
        assert NodeDefinition("svc", url="u", fetch=FetchMode.EAGER).is_lazy() is False
        assert NodeDefinition("svc", url="u", fetch=FetchMode.LAZY).is_lazy() is True
        assert NodeDefinition("svc", url="u").is_lazy() is True
        assert NodeDefinition("payments-platform", url="u").is_lazy() is False

    def test_meta_repo_suffixes(self):
        """Meta-repository names are recognized case-insensitively."""
        assert is_meta_repo("backend-monorepo")
        assert is_meta_repo("Team-Workspace")
        assert not is_meta_repo("platform-api")

    def test_invalid_fetch_mode(self):
        """Unknown fetch values are a config error."""
        with pytest.raises(ConfigError, match="fetch must be one of"):
            NodeDefinition.from_dict({"name": "a", "url": "u", "fetch": "sometimes"})

    def test_legacy_lazy_flag(self):
        """A boolean lazy flag maps onto fetch modes."""
        assert NodeDefinition.from_dict({"name": "a", "url": "u", "lazy": True}).fetch == FetchMode.LAZY
        assert NodeDefinition.from_dict({"name": "a", "url": "u", "lazy": False}).fetch == FetchMode.EAGER

    def test_to_dict_omits_defaults(self):
        """Auto fetch and empty fields are not written."""
        assert NodeDefinition("a", url="u").to_dict() == {"name": "a", "url": "u"}
        assert NodeDefinition("a", file="f.yaml", fetch=FetchMode.LAZY).to_dict() == {
            "name": "a", "file": "f.yaml", "fetch": "lazy"}


class TestWorkspaceDocument:
    """Test document validation."""

    def test_defaults(self):
        """repos_dir defaults to 'repos'."""
        document = WorkspaceDocument.from_dict({"workspace": {"name": "ws"}})
        assert document.repos_dir == "repos"
        assert document.nodes == []

    def test_workspace_name_required(self):
        """A document without a workspace name is invalid."""
        with pytest.raises(ConfigError, match="workspace name is required"):
            WorkspaceDocument.from_dict({"nodes": []})

    def test_duplicate_names(self):
        """Sibling names must be unique."""
        with pytest.raises(ConfigError, match="duplicate node name"):
            WorkspaceDocument.from_dict({
                "workspace": {"name": "ws"},
                "nodes": [{"name": "a", "url": "u1"}, {"name": "a", "url": "u2"}],
            })

    def test_nodes_must_be_list(self):
        """A mapping where the node list belongs is rejected."""
        with pytest.raises(ConfigError, match="must be a list"):
            WorkspaceDocument.from_dict({"workspace": {"name": "ws"}, "nodes": {"a": "u"}})

    def test_repos_dir_must_be_plain_name(self):
        """repos_dir is a single directory name."""
        with pytest.raises(ConfigError, match="repos_dir"):
            WorkspaceDocument.from_dict({"workspace": {"name": "ws", "repos_dir": "a/b"}})


class TestConfigStore:
    """Test YAML persistence."""

    def test_load(self, temp_dir):
        """Documents are loaded and validated."""
        path = write_document(temp_dir, "ws", [{"name": "api", "url": "https://x/api.git"}], repos_dir=".nodes")
        document = ConfigStore().load(path)
        assert document.name == "ws"
        assert document.repos_dir == ".nodes"
        assert document.nodes[0].name == "api"
        assert document.path == str(path)

    def test_load_missing(self, temp_dir):
        """A missing file is a config error."""
        with pytest.raises(ConfigError, match="does not exist"):
            ConfigStore().load(temp_dir / "grove.yaml")

    def test_load_invalid_yaml(self, temp_dir):
        """Unparseable YAML is a config error."""
        path = temp_dir / "grove.yaml"
        path.write_text("workspace: [unclosed\n")
        with pytest.raises(ConfigError, match="cannot parse YAML"):
            ConfigStore().load(path)

    def test_save_round_trip(self, temp_dir):
        """Saved documents load back unchanged."""
        store = ConfigStore()
        document = WorkspaceDocument("ws", "repos", [
            NodeDefinition("api", url="https://x/api.git", fetch=FetchMode.LAZY),
            NodeDefinition("shared", file="../shared/grove.yaml"),
        ])
        path = temp_dir / "grove.yaml"
        store.save(path, document)

        data = yaml.safe_load(path.read_text())
        assert list(data) == ["workspace", "nodes"]
        loaded = store.load(path)
        assert [n.name for n in loaded.nodes] == ["api", "shared"]
        assert loaded.nodes[0].fetch == FetchMode.LAZY
        assert loaded.nodes[1].file == "../shared/grove.yaml"
        assert not (temp_dir / "grove.yaml.tmp").exists()

    def test_save_through_symlink(self, temp_dir):
        """Saving a symlinked document updates its target and keeps the link."""
        target = write_document(temp_dir / "shared", "shared")
        link_dir = temp_dir / "node"
        link_dir.mkdir()
        link = link_dir / "grove.yaml"
        link.symlink_to(target)

        ConfigStore().save(link, WorkspaceDocument("shared", nodes=[NodeDefinition("a", url="u")]))
        assert link.is_symlink()
        assert ConfigStore().load(target).nodes[0].name == "a"

    def test_save_failure(self, temp_dir):
        """Write errors surface as PersistenceError."""
        blocker = temp_dir / "file"
        blocker.write_text("not a directory")
        with pytest.raises(PersistenceError):
            ConfigStore().save(blocker / "grove.yaml", WorkspaceDocument("ws"))

    def test_find_document_order(self, temp_dir):
        """grove.yaml is preferred over the alternative names."""
        write_document(temp_dir, "hidden", filename=".grove.yaml")
        assert ConfigStore().find_document(temp_dir).name == ".grove.yaml"
        write_document(temp_dir, "plain")
        assert ConfigStore().find_document(temp_dir).name == "grove.yaml"
        assert ConfigStore().find_document(temp_dir / "missing") is None

    def test_find_workspace_root_prefers_outermost(self, temp_dir):
        """Nested documents do not hide the enclosing workspace."""
        write_document(temp_dir / "ws", "ws")
        write_document(temp_dir / "ws" / "repos" / "team", "team")
        start = temp_dir / "ws" / "repos" / "team" / "src"
        start.mkdir(parents=True)
        assert ConfigStore().find_workspace_root(start) == temp_dir / "ws"

    def test_find_workspace_root_ignores_symlinks(self, temp_dir):
        """A symlinked document (config reference) never marks a workspace root."""
        target = write_document(temp_dir / "external", "external")
        node_dir = temp_dir / "elsewhere" / "node"
        node_dir.mkdir(parents=True)
        (node_dir / "grove.yaml").symlink_to(target)
        assert ConfigStore().find_workspace_root(node_dir) is None
