"""Tests for static export of a rendered workspace."""

import json
import tempfile
from pathlib import Path

import pytest

from memolinks.export.site import SiteExporter
from memolinks.runtime import build_runtime


def _workspace(root: Path) -> None:
    (root / "sub").mkdir()
    (root / "img").mkdir()
    (root / "a.md").write_text("""---
title: A
---

# A

See [[b#Details]].

![[sub/c]]
""")
    (root / "b.md").write_text("# B\n\n## Details\n\nb details\n")
    (root / "sub" / "c.md").write_text("Embedded c with [[a]] and ![[pic.png]]\n")
    (root / "img" / "pic.png").write_bytes(b"\x89PNG")


def test_export_markdown():
    with tempfile.TemporaryDirectory() as tmpdir, tempfile.TemporaryDirectory() as outdir:
        root = Path(tmpdir)
        _workspace(root)
        rt = build_runtime(root=root)
        out = Path(outdir)

        counts = SiteExporter(rt, out).export_all()

        assert counts == {"documents": 3, "assets": 1, "failed": 0}
        exported = (out / "a.md").read_text()
        assert "title: A" not in exported
        assert "[b#Details](b.md#details)" in exported
        # Embedded content is inlined, links inside it are relative to a.md
        assert "Embedded c with [a](a.md) and ![pic.png](img/pic.png)" in exported

        c = (out / "sub" / "c.md").read_text()
        assert "[a](../a.md)" in c
        assert (out / "img" / "pic.png").read_bytes() == b"\x89PNG"


def test_export_html():
    with tempfile.TemporaryDirectory() as tmpdir, tempfile.TemporaryDirectory() as outdir:
        root = Path(tmpdir)
        _workspace(root)
        rt = build_runtime(root=root)
        out = Path(outdir)

        counts = SiteExporter(rt, out, fmt="html", copy_assets=False).export_all()

        assert counts["documents"] == 3
        assert counts["assets"] == 0
        page = (out / "a.html").read_text()
        assert "<title>a</title>" in page
        assert 'href="b.html#details"' in page
        assert 'class="memo-markdown-embed"' in page
        assert not (out / "img" / "pic.png").exists()


def test_export_graph():
    with tempfile.TemporaryDirectory() as tmpdir, tempfile.TemporaryDirectory() as outdir:
        root = Path(tmpdir)
        _workspace(root)
        rt = build_runtime(root=root)

        SiteExporter(rt, Path(outdir)).export_all()
        graph = json.loads((Path(outdir) / "graph.json").read_text())

        assert {n["id"] for n in graph["nodes"]} == {"a.md", "b.md", "sub/c.md"}
        edges = {(e["source"], e["target"], e["embed"]) for e in graph["edges"]}
        assert ("a.md", "b.md", False) in edges
        assert ("a.md", "sub/c.md", True) in edges
        assert ("sub/c.md", "img/pic.png", True) in edges


def test_unknown_format():
    with tempfile.TemporaryDirectory() as tmpdir:
        rt = build_runtime(root=Path(tmpdir))
        with pytest.raises(ValueError):
            SiteExporter(rt, Path(tmpdir) / "out", fmt="pdf")
