"""Reference parsing and scanning for ``[[ref]]``, ``[[ref#section|label]]`` and ``![[embed]]``."""

import re

from .model import Reference, ReferenceMatch

REF_RE = re.compile(r"(!?)\[\[([^\[\]]+?)\]\]")
EMBED_RE = re.compile(r"!\[\[([^\[\]]+?)\]\]")

SECTION_DIVIDER = "#"
LABEL_DIVIDER = "|"
ESCAPED_LABEL_DIVIDER = "\\|"


class MalformedReferenceError(ValueError):
    """Raised when a reference has no identifier, e.g. ``[[#section]]``."""

    def __init__(self, raw: str):
        super().__init__(f"Malformed reference {raw!r}: empty identifier")
        self.raw = raw


def _label_divider(text: str) -> tuple[int, int]:
    # Inside markdown tables the divider has to be escaped as "\|".
    pos = text.find(LABEL_DIVIDER)
    if pos > 0 and text[pos - 1] == "\\":
        return pos - 1, len(ESCAPED_LABEL_DIVIDER)
    return pos, len(LABEL_DIVIDER)



def _clean(part: str | None) -> str | None:
    if part is None:
        return None
    part = part.strip()
    return part or None


def parse_reference(raw: str) -> Reference:
    """
    Split a raw reference into identifier, optional section and optional label.

    The identifier ends at the first ``#`` or ``|``. When ``#`` comes first the
    section runs up to the next ``|`` and the rest is the label; when ``|``
    comes first everything after it is the label.

    Examples:
        >>> parse_reference("a#b|c")
        Reference(raw='a#b|c', identifier='a', label='c', section='b')
        >>> parse_reference("notes|My Notes").label
        'My Notes'

    Raises:
        MalformedReferenceError: if the identifier is empty after trimming
    """
    text = raw.strip()
    div_pos, div_len = _label_divider(text)
    sec_pos = text.find(SECTION_DIVIDER)

    section = None
    label = None
    if sec_pos != -1 and (div_pos == -1 or sec_pos < div_pos):
        identifier = text[:sec_pos]
        if div_pos != -1:
            section = text[sec_pos + 1 : div_pos]
            label = text[div_pos + div_len :]
        else:
            section = text[sec_pos + 1 :]
    elif div_pos != -1:
        identifier = text[:div_pos]
        label = text[div_pos + div_len :]
    else:
        identifier = text

    identifier = identifier.strip()
    if not identifier:
        raise MalformedReferenceError(raw)

    return Reference(
        raw=raw,
        identifier=identifier,
        label=_clean(label),
        section=_clean(section),
    )


def unwrap_token(token: str) -> tuple[str, bool | None]:
    """
    Strip ``[[ ]]`` / ``![[ ]]`` from a token.

    Returns the inner text and whether it was an embed, or ``None`` for the
    embed flag when the input carried no brackets.
    """
    stripped = token.strip()
    if stripped.startswith("![[") and stripped.endswith("]]"):
        return stripped[3:-2], True
    if stripped.startswith("[[") and stripped.endswith("]]"):
        return stripped[2:-2], False
    return token, None


def find_references(text: str) -> list[ReferenceMatch]:
    """Find every reference token in *text*, in document order."""
    matches: list[ReferenceMatch] = []
    line = 0
    line_start = 0
    cursor = 0
    for m in REF_RE.finditer(text):
        # Advance line bookkeeping incrementally instead of recounting.
        newlines = text.count("\n", cursor, m.start())
        if newlines:
            line += newlines
            line_start = text.rfind("\n", cursor, m.start()) + 1
        cursor = m.start()
        matches.append(
            ReferenceMatch(
                raw=m.group(2),
                embed=bool(m.group(1)),
                start=m.start(),
                end=m.end(),
                line=line,
                column=m.start() - line_start,
            )
        )
    return matches


def extract_embed_identifiers(text: str) -> list[str]:
    """Lower-cased identifiers of every embed in *text*; malformed embeds are skipped."""
    identifiers = []
    for m in EMBED_RE.finditer(text):
        try:
            ref = parse_reference(m.group(1))
        except MalformedReferenceError:
            continue
        identifiers.append(ref.identifier.lower())
    return identifiers


def reference_at(text: str, offset: int) -> ReferenceMatch | None:
    """Return the reference token covering character *offset*, if any."""
    for match in find_references(text):
        if match.start <= offset < match.end:
            return match
        if match.start > offset:
            break
    return None
