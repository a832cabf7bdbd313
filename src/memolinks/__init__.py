"""memolinks - wiki-style references, sections and embeds for markdown workspaces."""

__version__ = "0.1.0"

from .core.index import WorkspaceIndex
from .core.refs import MalformedReferenceError, parse_reference
from .core.render import EmbedRenderer

__all__ = [
    "__version__",
    "WorkspaceIndex",
    "EmbedRenderer",
    "MalformedReferenceError",
    "parse_reference",
]
