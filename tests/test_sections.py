"""Tests for section bounds and anchor ids."""

from memolinks.core.sections import (
    assign_heading_ids,
    bound_section,
    find_heading,
    parse_headings,
    section_anchor,
    section_content,
)

DOC = "# A\nfoo\n## B\nbar\n# C\nbaz"

NOTES = """# Notes

first

## Notes

second

### Notes

third
"""


def test_parse_headings():
    headings = parse_headings(DOC)
    assert [(h.level, h.title, h.line) for h in headings] == [
        (1, "A", 0),
        (2, "B", 2),
        (1, "C", 4),
    ]


def test_parse_headings_requires_space_and_max_six():
    text = "#NoSpace\n####### Seven\n###### Six  \n"
    headings = parse_headings(text)
    assert [h.title for h in headings] == ["Six"]


def test_bound_section_includes_subsections():
    """Section ends at the next heading of the same or higher level."""
    bounds = bound_section(DOC, "A")
    assert (bounds.start_line, bounds.end_line) == (0, 4)
    assert bounds.extract(DOC) == "# A\nfoo\n## B\nbar"


def test_bound_section_nested():
    assert section_content(DOC, "B") == "## B\nbar"


def test_bound_section_runs_to_end():
    bounds = bound_section(DOC, "C")
    assert (bounds.start_line, bounds.end_line) == (4, 6)
    assert section_content(DOC, "C") == "# C\nbaz"


def test_bound_section_missing():
    assert bound_section(DOC, "Nope") is None
    assert section_content(DOC, "Nope") is None


def test_bound_section_matches_by_slug():
    text = "# Intro\n\n## 1. Getting Started!\nbody\n"
    assert find_heading(text, "getting started").line == 2
    assert find_heading(text, "Getting-Started").line == 2
    assert bound_section(text, "getting started").start_line == 2


def test_bound_section_first_match_wins():
    bounds = bound_section(NOTES, "Notes")
    assert bounds.start_line == 0
    assert bounds.end_line == len(NOTES.split("\n"))


def test_section_anchor_occurrences():
    assert section_anchor(NOTES, "Notes", 1) == "notes"
    assert section_anchor(NOTES, "Notes", 2) == "notes-1"
    assert section_anchor(NOTES, "Notes", 3) == "notes-2"
    # More occurrences than headings: bare slug
    assert section_anchor(NOTES, "Notes", 4) == "notes"


def test_section_anchor_default_points_past_first_duplicate():
    assert section_anchor(NOTES, "Notes") == "notes-1"
    assert section_anchor(DOC, "B") == "b"


def test_section_anchor_without_heading():
    assert section_anchor("no headings here", "Some Section") == "some-section"


def test_assign_heading_ids():
    assert assign_heading_ids(["Notes", "Notes", "Other", "Notes"]) == [
        "notes",
        "notes-1",
        "other",
        "notes-2",
    ]


def test_section_anchor_is_idempotent():
    assert section_anchor(NOTES, "Notes", 2) == section_anchor(NOTES, "Notes", 2)
