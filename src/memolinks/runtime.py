"""Runtime wiring helper for CLI applications."""

import logging
from dataclasses import dataclass
from pathlib import Path

from .adapters.fs_scanner import FsScanner
from .adapters.fs_storage import FsDocumentProvider
from .adapters.yaml_codec import YamlFrontmatter
from .config import MemoConfig, load_config
from .core.index import WorkspaceIndex
from .core.ports import DocumentProvider
from .core.render import EmbedRenderer

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    """Container for all wired components."""
    index: WorkspaceIndex
    scanner: FsScanner
    provider: DocumentProvider
    renderer: EmbedRenderer
    config: MemoConfig

    def rescan(self) -> int:
        """Rebuild the index from disk and swap it in."""
        return self.index.rebuild(self.scanner.scan())


def build_runtime(
    root: Path | None = None,
    config_path: Path | None = None,
    scan: bool = True,
) -> Runtime:
    """Build and wire all components for a workspace."""
    config = load_config(config_path=config_path, root=root)

    index = WorkspaceIndex(
        config.workspace.roots,
        markdown_exts=config.links.markdown_exts,
        case_sensitive=config.workspace.case_sensitive,
    )
    scanner = FsScanner(
        config.workspace.roots,
        exclude=config.workspace.exclude,
        markdown_exts=config.links.markdown_exts,
    )
    provider = FsDocumentProvider()
    renderer = EmbedRenderer(
        index,
        provider,
        codec=YamlFrontmatter(),
        max_depth=config.render.max_depth,
        strip_frontmatter=config.render.strip_frontmatter,
    )

    rt = Runtime(
        index=index,
        scanner=scanner,
        provider=provider,
        renderer=renderer,
        config=config,
    )
    if scan:
        count = rt.rescan()
        logger.info("Workspace index ready: %d files", count)
    return rt
