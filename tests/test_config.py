"""Tests for runtime configuration"""
import pytest

from git_grove.config import Config


class TestConfigValidation:
    """Test Config validation."""

    def test_defaults(self):
        config = Config()
        assert config.workspace is None
        assert config.default_repos_dir == "repos"
        assert config.remote_name == "origin"
        assert config.clone_depth is None

    def test_workspace_from_environment(self, monkeypatch):
        monkeypatch.setenv("GIT_GROVE_WORKSPACE", "/srv/ws")
        assert Config().workspace == "/srv/ws"
        assert Config(workspace="/other").workspace == "/other"

    def test_empty_workspace(self):
        with pytest.raises(ValueError, match="workspace cannot be empty"):
            Config(workspace="  ")

    @pytest.mark.parametrize("value", ["", "a/b", "..", "."])
    def test_invalid_repos_dir(self, value):
        with pytest.raises(ValueError):
            Config(default_repos_dir=value)

    def test_repos_dir_trimmed(self):
        assert Config(default_repos_dir=" .nodes ").default_repos_dir == ".nodes"

    def test_empty_remote(self):
        with pytest.raises(ValueError, match="remote_name"):
            Config(remote_name=" ")

    @pytest.mark.parametrize("depth", [0, -1])
    def test_invalid_clone_depth(self, depth):
        with pytest.raises(ValueError, match="clone_depth"):
            Config(clone_depth=depth)


class TestConfigConversion:
    """Test dictionary conversion."""

    def test_from_dict_ignores_unknown(self):
        config = Config.from_dict({"remote_name": "upstream", "colour": "blue"})
        assert config.remote_name == "upstream"

    def test_round_trip(self):
        config = Config(remote_name="upstream", clone_depth=5, force=True)
        assert Config.from_dict(config.to_dict()) == config

    def test_get(self):
        config = Config(verbose=True)
        assert config.get("verbose") is True
        assert config.get("missing", "fallback") == "fallback"
