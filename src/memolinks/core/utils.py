"""Utility functions for memolinks."""

import re

_ORDINAL_PREFIX = re.compile(r"^\d+\.\s*")
_NON_SLUG_CHARS = re.compile(r"[^\w\s-]")
_WHITESPACE = re.compile(r"\s+")


def slugify(text: str) -> str:
    """
    Convert a heading title or section name to its anchor slug.

    - Lowercase
    - Strip a leading ordinal such as ``"1. "``
    - Remove every character that is not a word character, space or hyphen
    - Convert each run of whitespace to a single `-`

    Every heading lookup, anchor and rendered heading id goes through this
    function, so links and rendered anchors always agree.

    Examples:
        >>> slugify("Parallel transport")
        'parallel-transport'
        >>> slugify("1. Getting Started!")
        'getting-started'
    """
    text = text.strip().lower()
    text = _ORDINAL_PREFIX.sub("", text)
    text = _NON_SLUG_CHARS.sub("", text)
    text = _WHITESPACE.sub("-", text)
    return text
