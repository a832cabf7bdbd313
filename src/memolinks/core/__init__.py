"""Pure reference, section, index and render logic."""

from .index import IndexSnapshot, WorkspaceIndex
from .model import (
    CyclicStub,
    EmbeddedBlock,
    Fragment,
    Identity,
    ImageEmbed,
    InvalidPlaceholder,
    Link,
    Reference,
    RenderedDocument,
    Resolution,
    UnknownExtensionPlaceholder,
    UnsupportedPreviewPlaceholder,
)
from .refs import MalformedReferenceError, find_references, parse_reference
from .render import EmbedRenderer, RenderStack
from .sections import bound_section, section_anchor
from .utils import slugify

__all__ = [
    "CyclicStub",
    "EmbeddedBlock",
    "EmbedRenderer",
    "Fragment",
    "Identity",
    "ImageEmbed",
    "IndexSnapshot",
    "InvalidPlaceholder",
    "Link",
    "MalformedReferenceError",
    "Reference",
    "RenderStack",
    "RenderedDocument",
    "Resolution",
    "UnknownExtensionPlaceholder",
    "UnsupportedPreviewPlaceholder",
    "WorkspaceIndex",
    "bound_section",
    "find_references",
    "parse_reference",
    "section_anchor",
    "slugify",
]
