"""Tests for the filesystem scanner, document provider and frontmatter codec."""

import tempfile
from pathlib import Path

from memolinks.adapters.fs_scanner import FsScanner
from memolinks.adapters.fs_storage import FsDocumentProvider
from memolinks.adapters.yaml_codec import YamlFrontmatter


def test_scanner_skips_hidden_temp_and_excluded():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        for rel in [
            "a.md",
            ".hidden.md",
            "d.md~",
            "c.xyz",
            "node_modules/x.md",
            "sub/node_modules/y.md",
            "sub/b.png",
            ".git/config.md",
            "drafts/tmp.md",
        ]:
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("x")

        scanner = FsScanner([root], exclude=["node_modules", "*/node_modules", "drafts"])
        found = [p.relative_to(root).as_posix() for p in scanner.scan()]

        assert found == ["a.md", "sub/b.png"]


def test_scanner_missing_root():
    assert list(FsScanner([Path("/nonexistent/memolinks/root")]).scan()) == []


def test_provider_reads_and_reports_missing():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "a.md"
        path.write_text("hello", encoding="utf-8")
        provider = FsDocumentProvider()

        assert provider.read(path) == "hello"
        assert provider.exists(path)
        assert provider.read(Path(tmpdir) / "gone.md") is None
        assert not provider.exists(Path(tmpdir))


def test_frontmatter_decode():
    meta, body = YamlFrontmatter().decode("---\ntitle: Test\ntags: [a, b]\n---\nBody\n")
    assert meta == {"title": "Test", "tags": ["a", "b"]}
    assert body == "Body\n"


def test_frontmatter_absent():
    assert YamlFrontmatter().decode("# Title\n") == ({}, "# Title\n")


def test_frontmatter_invalid_yaml_is_dropped():
    meta, body = YamlFrontmatter().decode("---\nkey: [unclosed\n---\nBody")
    assert meta == {}
    assert body == "Body"


def test_frontmatter_not_a_mapping():
    assert YamlFrontmatter().decode("---\n- a\n- b\n---\nx") == ({}, "x")

