"""Unit tests for configuration loading in src/gitable/config/loader.py."""

import pytest
from pathlib import Path

from gitable.config.loader import (
    ConfigLoadError,
    ConfigNotFoundError,
    DEFAULT_CONFIG_TEMPLATE,
    get_default_config,
    load_config,
    load_registry,
)
from gitable.parser import heuristic_parse
from gitable.providers import DEFAULT_PROVIDERS


class TestLoadConfig:
    """Tests for load_config function."""

    def test_loads_valid_yaml_config(self, tmp_path: Path) -> None:
        """Test loading a valid YAML configuration file."""
        config_file = tmp_path / "config.yml"
        config_file.write_text("""
include_defaults: false
providers:
  forge:
    predicate: 'host() == "git.example.com"'
    org_project: true
""")

        result = load_config(config_file)

        assert result["include_defaults"] is False
        assert "forge" in result["providers"]
        assert result["providers"]["forge"]["predicate"] == 'host() == "git.example.com"'
        assert result["providers"]["forge"]["org_project"] is True

    def test_raises_error_for_nonexistent_file(self, tmp_path: Path) -> None:
        """Test that ConfigNotFoundError is raised for missing file."""
        nonexistent = tmp_path / "nonexistent.yml"

        with pytest.raises(ConfigNotFoundError, match="not found"):
            load_config(nonexistent)

    def test_raises_error_for_invalid_yaml(self, tmp_path: Path) -> None:
        """Test that ConfigLoadError is raised for invalid YAML."""
        config_file = tmp_path / "config.yml"
        config_file.write_text("""
invalid: yaml: content:
  - missing
    indent
""")

        with pytest.raises(ConfigLoadError, match="Invalid YAML"):
            load_config(config_file)

    def test_returns_empty_dict_for_empty_file(self, tmp_path: Path) -> None:
        """Test that empty file returns empty dict."""
        config_file = tmp_path / "config.yml"
        config_file.write_text("")

        result = load_config(config_file)

        assert result == {}

    def test_returns_empty_dict_for_comments_only(self, tmp_path: Path) -> None:
        """Test that file with only comments returns empty dict."""
        config_file = tmp_path / "config.yml"
        config_file.write_text("# Just a comment\n# Another comment")

        result = load_config(config_file)

        assert result == {}

    def test_raises_error_for_non_mapping_content(self, tmp_path: Path) -> None:
        """Test that non-mapping content raises error."""
        config_file = tmp_path / "config.yml"
        config_file.write_text("- just\n- a\n- list")

        with pytest.raises(ConfigLoadError, match="must contain a mapping"):
            load_config(config_file)

    def test_uses_xdg_path_by_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that the default path is resolved through the config directory."""
        config_file = tmp_path / "gitable" / "config.yml"
        config_file.parent.mkdir()
        config_file.write_text("include_defaults: true\n")
        monkeypatch.setattr("gitable.config.loader.get_config_path", lambda: config_file)

        result = load_config()

        assert result == {"include_defaults": True}


class TestLoadRegistry:
    """Tests for load_registry function."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        """Test that no config file means built-in providers."""
        registry = load_registry(tmp_path / "missing.yml")

        assert registry.providers == DEFAULT_PROVIDERS

    def test_custom_provider_used_by_heuristic_parse(self, tmp_path: Path) -> None:
        """Test the full path from config file to parsing."""
        config_file = tmp_path / "config.yml"
        config_file.write_text("""
providers:
  forge:
    predicate: 'host() == "git.example.com"'
    web_scheme: https
""")

        registry = load_registry(config_file)
        result = heuristic_parse("http://git.example.com/team/repo", registry=registry)

        assert registry.names() == ["forge", "github", "gitlab", "bitbucket"]
        assert str(result) == "https://git.example.com/team/repo.git"

    def test_without_defaults(self, tmp_path: Path) -> None:
        """Test dropping the built-in providers."""
        config_file = tmp_path / "config.yml"
        config_file.write_text("include_defaults: false\n")

        registry = load_registry(config_file)

        assert len(registry) == 0


class TestGetDefaultConfig:
    """Tests for get_default_config function."""

    def test_includes_config_path(self) -> None:
        """Test that the config location is documented."""
        custom_path = Path("/custom/path/config.yml")

        result = get_default_config(custom_path)

        assert "/custom/path/config.yml" in result

    def test_documents_predicate_functions(self) -> None:
        """Test that template documents the predicate functions."""
        assert "host()" in DEFAULT_CONFIG_TEMPLATE
        assert "path(n)" in DEFAULT_CONFIG_TEMPLATE
        assert "is_scp()" in DEFAULT_CONFIG_TEMPLATE

    def test_loads_as_built_in_providers(self, tmp_path: Path) -> None:
        """Test that the default config describes the built-in providers."""
        config_file = tmp_path / "config.yml"
        config_file.write_text(get_default_config(config_file))

        registry = load_registry(config_file)

        assert registry.providers == DEFAULT_PROVIDERS
