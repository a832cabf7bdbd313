"""Known file extension groups and classification helpers."""

import posixpath
import re

MARKDOWN_EXTS: tuple[str, ...] = (".md", ".markdown")

IMAGE_EXTS: tuple[str, ...] = (".png", ".jpg", ".jpeg", ".svg", ".gif", ".webp")

OTHER_EXTS: tuple[str, ...] = (
    ".doc", ".docx", ".rtf", ".txt", ".odt", ".xls", ".xlsx", ".ppt", ".pptm",
    ".pptx", ".pdf", ".pages", ".mp4", ".mov", ".wmv", ".flv", ".avi", ".mkv",
    ".mp3", ".webm", ".wav", ".m4a", ".ogg", ".3gp", ".flac", ".msg",
)

# A trailing ".word" only counts as an extension when it has no spaces or
# punctuation, so titles like "Mr. Smith" stay extension-less.
_EXT_RE = re.compile(r"^\.[A-Za-z0-9]+$")


def extension_of(ref: str) -> str:
    """Return the lower-cased extension of a path or reference, or ``""``."""
    name = posixpath.basename(ref.replace("\\", "/"))
    ext = posixpath.splitext(name)[1]
    if not _EXT_RE.match(ext):
        return ""
    return ext.lower()


def is_image(ref: str) -> bool:
    return extension_of(ref) in IMAGE_EXTS


def is_other_known(ref: str) -> bool:
    return extension_of(ref) in OTHER_EXTS


def kind_of(ref: str, markdown_exts: tuple[str, ...] = MARKDOWN_EXTS) -> str:
    """Classify a path as ``markdown``, ``image``, ``other`` or ``unknown``."""
    ext = extension_of(ref)
    if ext in markdown_exts:
        return "markdown"
    if ext in IMAGE_EXTS:
        return "image"
    if ext in OTHER_EXTS:
        return "other"
    return "unknown"


def supported_exts_hint(markdown_exts: tuple[str, ...] = MARKDOWN_EXTS) -> str:
    """Comma separated list of every supported extension, for placeholders."""
    return ",".join(markdown_exts + IMAGE_EXTS + OTHER_EXTS)
