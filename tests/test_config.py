"""Tests for configuration loading."""

import tempfile
from pathlib import Path

import pytest

from memolinks.config import load_config


def test_load_config_defaults():
    """Test loading config with defaults when no file exists."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config = load_config(root=Path(tmpdir))

        assert config.workspace.roots == [Path(tmpdir)]
        assert config.workspace.case_sensitive is None
        assert "node_modules" in config.workspace.exclude
        assert config.links.markdown_exts == (".md", ".markdown")
        assert config.links.rules == []
        assert config.render.max_depth == 10
        assert config.render.strip_frontmatter is True
        assert config.api.port == 8765


def test_load_config_from_file():
    """Test loading config from a file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "memo.toml"
        config_path.write_text("""
[workspace]
roots = ["notes", "archive"]
exclude = ["build"]
case_sensitive = false

[links]
markdown_exts = ["md", ".MDX"]
short_ref_folder = "inbox"
rules = [
    { rule = "^\\\\d{4}-\\\\d{2}-\\\\d{2}$", folder = "daily/%Y" },
]

[render]
max_depth = 3
strip_frontmatter = false

[api]
host = "0.0.0.0"
port = 9000
""")

        config = load_config(config_path=config_path)

        assert config.workspace.roots == [Path(tmpdir) / "notes", Path(tmpdir) / "archive"]
        assert config.workspace.exclude == ["build"]
        assert config.workspace.case_sensitive is False
        assert config.links.markdown_exts == (".md", ".mdx")
        assert config.links.short_ref_folder == "inbox"
        assert len(config.links.rules) == 1
        assert config.links.rules[0].rule.search("2024-01-05")
        assert config.links.rules[0].folder == "daily/%Y"
        assert config.render.max_depth == 3
        assert config.render.strip_frontmatter is False
        assert config.api.host == "0.0.0.0"
        assert config.api.port == 9000


def test_load_config_search_root():
    """Config in the workspace root is picked up; --root still wins for roots."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "memo.toml").write_text("[render]\nmax_depth = 4\n")

        config = load_config(root=root)

        assert config.render.max_depth == 4
        assert config.workspace.roots == [root]


def test_invalid_rule_regex():
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "memo.toml"
        config_path.write_text('[links]\nrules = [{ rule = "(", folder = "x" }]\n')

        with pytest.raises(ValueError, match="invalid regex"):
            load_config(config_path=config_path)


def test_rule_without_pattern():
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "memo.toml"
        config_path.write_text('[links]\nrules = [{ folder = "x" }]\n')

        with pytest.raises(ValueError, match="missing 'rule'"):
            load_config(config_path=config_path)
