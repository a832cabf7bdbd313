from pathlib import Path
from typing import Any, Iterable, Protocol

from .model import Fragment, RenderedDocument


class DocumentProvider(Protocol):
    """
    The only thing the renderer needs from the outside world.
    Read failures are reported as None, never raised.
    """

    def read(self, path: Path) -> str | None:
        pass

    def exists(self, path: Path) -> bool:
        pass


class WorkspaceScanner(Protocol):
    """
    Lists indexable files under the workspace roots; feeds WorkspaceIndex.rebuild.
    """

    def scan(self) -> Iterable[Path]:
        pass


class FragmentRenderer(Protocol):
    """
    Presentation adapter over rendered fragments (HTML, markdown, ...).
    """

    def render(self, doc: RenderedDocument) -> str:
        pass

    def render_fragment(self, fragment: Fragment) -> str:
        pass


class FrontmatterCodec(Protocol):
    """
    Split optional frontmatter from a document without enforcing any schema.
    """

    def decode(self, text: str) -> tuple[dict[str, Any], str]:
        pass
