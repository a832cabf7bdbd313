import html
import json
import logging
import posixpath
import shutil
from pathlib import Path
from typing import Any
from urllib.parse import quote

from ..adapters.html_renderer import HtmlRenderer
from ..adapters.md_renderer import MarkdownRenderer
from ..core.model import CyclicStub, EmbeddedBlock, Identity, ImageEmbed, Link

logger = logging.getLogger(__name__)

FORMATS = ("md", "html")

PAGE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
</head>
<body>
{body}
</body>
</html>
"""


class SiteExporter:
    """Render every markdown document of the workspace into `out`, plus graph.json."""

    def __init__(self, rt: Any, out: Path, fmt: str = "md", copy_assets: bool = True):
        if fmt not in FORMATS:
            raise ValueError(f"Unknown export format {fmt!r}, expected one of {FORMATS}")
        self.rt = rt
        self.out = out
        self.fmt = fmt
        self.copy_assets = copy_assets

    def _output_relative(self, identity: Identity) -> str:
        if self.fmt == "html" and identity.kind == "markdown":
            return posixpath.splitext(identity.relative)[0] + ".html"
        return identity.relative

    def _href_from(self, source: Identity):
        source_dir = posixpath.dirname(self._output_relative(source)) or "."

        def href_for(target: Identity) -> str:
            return quote(posixpath.relpath(self._output_relative(target), source_dir))

        return href_for

    def export_all(self, out_dir: str | None = None) -> dict[str, int]:
        out = self.out if out_dir is None else Path(out_dir)
        out.mkdir(parents=True, exist_ok=True)
        snapshot = self.rt.index.snapshot

        counts = {"documents": 0, "assets": 0, "failed": 0}
        graph: dict[str, list[dict[str, Any]]] = {"nodes": [], "edges": []}
        for identity in snapshot.markdown:
            try:
                doc = self.rt.renderer.render_document(identity.path)
            except FileNotFoundError:
                logger.warning("Skipping unreadable document %s", identity.path)
                counts["failed"] += 1
                continue

            href_for = self._href_from(identity)
            if self.fmt == "html":
                body = HtmlRenderer(href_for=href_for).render(doc)
                text = PAGE.format(title=html.escape(identity.stem), body=body)
            else:
                text = MarkdownRenderer(href_for=href_for).render(doc)

            dest = out / self._output_relative(identity)
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_text(text, encoding="utf-8")
            counts["documents"] += 1

            graph["nodes"].append({"id": identity.relative, "title": identity.stem})
            for fragment in doc.fragments():
                if isinstance(fragment, (Link, EmbeddedBlock, ImageEmbed)):
                    target = fragment.target
                elif isinstance(fragment, CyclicStub) and fragment.target is not None:
                    target = fragment.target
                else:
                    continue
                graph["edges"].append(
                    {"source": identity.relative, "target": target.relative, "embed": fragment.embed}
                )

        (out / "graph.json").write_text(json.dumps(graph, indent=2), encoding="utf-8")

        # Copy images and other linked files as-is
        if self.copy_assets:
            for identity in snapshot.all:
                if identity.kind == "markdown":
                    continue
                dest = out / identity.relative
                dest.parent.mkdir(parents=True, exist_ok=True)
                try:
                    shutil.copy2(identity.path, dest)
                except OSError as e:
                    logger.warning("Cannot copy %s: %s", identity.path, e)
                    counts["failed"] += 1
                    continue
                counts["assets"] += 1

        return counts
