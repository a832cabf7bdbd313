"""Tests for extension classification."""

import pytest

from memolinks.core.exts import extension_of, kind_of, supported_exts_hint


def test_extension_of():
    assert extension_of("a.MD") == ".md"
    assert extension_of("folder.v2/note") == ""
    assert extension_of("C:\\notes\\pic.PNG") == ".png"


def test_extension_of_ignores_titles_with_dots():
    assert extension_of("Mr. Smith") == ""
    assert extension_of("v1.2 draft") == ""


@pytest.mark.parametrize(
    "ref,kind",
    [
        ("note.md", "markdown"),
        ("note.markdown", "markdown"),
        ("pic.jpeg", "image"),
        ("report.pdf", "other"),
        ("archive.zip", "unknown"),
        ("no-extension", "unknown"),
    ],
)
def test_kind_of(ref, kind):
    assert kind_of(ref) == kind


def test_kind_of_custom_markdown_exts():
    assert kind_of("page.mdx", (".md", ".mdx")) == "markdown"
    assert kind_of("page.md", (".mdx",)) == "unknown"


def test_supported_exts_hint():
    hint = supported_exts_hint((".md",))
    assert hint.startswith(".md,.png,")
    assert hint.endswith(",.msg")
    assert ".markdown" not in hint