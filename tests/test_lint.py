"""Tests for reference linting."""

from pathlib import Path

from memolinks.adapters.fs_storage import MemoryDocumentProvider
from memolinks.core.index import WorkspaceIndex
from memolinks.lint import DeadLinksRule, lint_text

ROOT = Path("/workspace")


def _workspace():
    docs = {ROOT / "note.md": "# Note\n## Part\n", ROOT / "pic.png": ""}
    index = WorkspaceIndex([ROOT], case_sensitive=True)
    index.rebuild(docs)
    return index, MemoryDocumentProvider(docs)


def test_clean_text_has_no_findings():
    index, provider = _workspace()
    assert lint_text("[[note]] [[note#Part]] ![[pic.png]]", index, provider) == []


def test_findings_in_document_order():
    index, provider = _workspace()
    text = "[[note]] [[missing]]\n[[note#Nope]] [[#bad]] [[f.xyz]]"

    findings = lint_text(text, index, provider)

    assert [f.severity for f in findings] == ["error", "warn", "error", "warn"]
    assert "missing" in findings[0].message
    assert findings[0].line == 1
    assert "Nope" in findings[1].message
    assert findings[1].line == 2
    assert "Malformed" in findings[2].message
    assert ".xyz" in findings[3].message


def test_embed_of_note_as_image_is_dead():
    index, provider = _workspace()
    findings = lint_text("![[note.png]]", index, provider, rules=[DeadLinksRule()])
    assert len(findings) == 1
    assert findings[0].severity == "error"
