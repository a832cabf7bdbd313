"""Section locator: heading scan, section bounds and anchor ids."""

import re
from collections import Counter
from typing import Iterable

from .model import Heading, SectionBounds
from .utils import slugify

HEADING_RE = re.compile(r"^(#{1,6})\s+(.+?)\s*$")


def parse_headings(text: str) -> list[Heading]:
    """Collect ATX headings in document order. Lines are split on ``\\n`` only."""
    headings = []
    for i, line in enumerate(text.split("\n")):
        m = HEADING_RE.match(line.rstrip("\r"))
        if m:
            headings.append(Heading(level=len(m.group(1)), title=m.group(2), line=i))
    return headings


def find_heading(text: str, section: str) -> Heading | None:
    """First heading whose slug equals the slug of *section*."""
    target = slugify(section)
    for heading in parse_headings(text):
        if slugify(heading.title) == target:
            return heading
    return None


def bound_section(text: str, section: str) -> SectionBounds | None:
    """
    Get the line range of a section.

    The range starts at the first heading matching *section* and ends before
    the next heading of the same or a higher level (or at end of document),
    so nested subsections are included. Duplicates are not disambiguated:
    the first match always wins.

    Returns None when no heading matches.
    """
    match = find_heading(text, section)
    if match is None:
        return None

    end = len(text.split("\n"))
    for heading in parse_headings(text):
        if heading.line > match.line and heading.level <= match.level:
            end = heading.line
            break
    return SectionBounds(start_line=match.line, end_line=end)


def section_content(text: str, section: str) -> str | None:
    bounds = bound_section(text, section)
    if bounds is None:
        return None
    return bounds.extract(text)


def section_anchor(text: str, section: str, occurrence: int | None = None) -> str:
    """
    Anchor id for a heading titled like *section*.

    Ids follow assign_heading_ids: the first occurrence keeps the bare slug,
    the second gets ``-1``, the third ``-2`` and so on.

    With *occurrence* (1-based) the id of that duplicate is returned, or the
    bare slug when the document has fewer matching headings. Without it a
    section title shared by several headings points at the second one
    (``-1``); a unique or missing heading gives the bare slug.
    """
    target = slugify(section)
    count = sum(1 for h in parse_headings(text) if slugify(h.title) == target)
    if occurrence is None:
        return f"{target}-1" if count > 1 else target
    if 1 < occurrence <= count:
        return f"{target}-{occurrence - 1}"
    return target


def heading_id(title: str) -> str:
    """Id for a single heading, without duplicate suffixing."""
    return slugify(title)


def assign_heading_ids(titles: Iterable[str]) -> list[str]:
    """Ids for every heading of one document, in emission order, duplicates suffixed."""
    counts: Counter[str] = Counter()
    ids = []
    for title in titles:
        slug = heading_id(title)
        n = counts[slug]
        ids.append(slug if n == 0 else f"{slug}-{n}")
        counts[slug] += 1
    return ids
