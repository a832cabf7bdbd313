"""HTML adapter: markdown-it-py for text, classic preview markup for fragments."""

import html
import re
from pathlib import Path
from typing import Callable

from markdown_it import MarkdownIt

from ..core.model import (
    CyclicStub,
    EmbeddedBlock,
    Fragment,
    Identity,
    ImageEmbed,
    InvalidPlaceholder,
    Link,
    RenderedDocument,
    UnknownExtensionPlaceholder,
    UnsupportedPreviewPlaceholder,
)
from ..core.ports import FragmentRenderer
from ..core.sections import assign_heading_ids

# Plain word characters survive markdown rendering untouched.
_PLACEHOLDER = "MEMOLINKSFRAGMENT{}X"
_PLACEHOLDER_RE = re.compile(r"MEMOLINKSFRAGMENT(\d+)X")

INVALID_TITLE = (
    "Link does not exist yet. Please use cmd / ctrl + click in text editor to create a new one."
)


def _source_token(fragment: Fragment) -> str:
    """The reference as it was written in the source text."""
    return f"{'!' if fragment.embed else ''}[[{fragment.reference.raw}]]"


def heading_ids_plugin(md: MarkdownIt) -> None:
    """Give every heading an id, suffixing duplicates within one render call."""

    def _assign(state) -> None:
        fragments = state.env.get("fragments", []) if isinstance(state.env, dict) else []

        def _restore(m: re.Match[str]) -> str:
            n = int(m.group(1))
            return _source_token(fragments[n]) if n < len(fragments) else m.group(0)

        tokens = state.tokens
        positions = [i for i, tok in enumerate(tokens) if tok.type == "heading_open"]
        titles = []
        for i in positions:
            inline = tokens[i + 1] if i + 1 < len(tokens) else None
            title = inline.content if inline is not None and inline.type == "inline" else ""
            # Ids come from the heading as written, references included.
            titles.append(_PLACEHOLDER_RE.sub(_restore, title))
        for i, heading_id in zip(positions, assign_heading_ids(titles)):
            tokens[i].attrSet("id", heading_id)

    md.core.ruler.push("heading_ids", _assign)



def file_uri(identity: Identity) -> str:
    return Path(identity.path).as_uri()


class HtmlRenderer(FragmentRenderer):
    def __init__(self, href_for: Callable[[Identity], str] = file_uri):
        self.href_for = href_for
        self.md = MarkdownIt("commonmark", {"html": True}).use(heading_ids_plugin)

    def render(self, doc: RenderedDocument) -> str:
        source = []
        fragments: list[Fragment] = []
        for part in doc.parts:
            if isinstance(part, Fragment):
                source.append(_PLACEHOLDER.format(len(fragments)))
                fragments.append(part)
            else:
                source.append(part)
        out = self.md.render("".join(source), {"fragments": fragments})

        def _fill(m: re.Match[str]) -> str:
            n = int(m.group(1))
            return self.render_fragment(fragments[n]) if n < len(fragments) else m.group(0)

        return _PLACEHOLDER_RE.sub(_fill, out)

    def render_fragment(self, fragment: Fragment) -> str:
        if isinstance(fragment, Link):
            return self._link(fragment)
        if isinstance(fragment, EmbeddedBlock):
            return self._embed_frame(
                fragment.title, fragment.target, self.render(fragment.content)
            )
        if isinstance(fragment, ImageEmbed):
            src = html.escape(self.href_for(fragment.target))
            alt = html.escape(fragment.alt)
            return f'<div><img src="{src}" data-src="{src}" alt="{alt}" /></div>'
        if isinstance(fragment, CyclicStub):
            warning = '<div class="memo-cyclic-link-warning">Cyclic linking detected 💥.</div>'
            if fragment.target is None:
                return warning
            return self._embed_frame(fragment.target.stem, fragment.target, warning)
        if isinstance(fragment, UnsupportedPreviewPlaceholder):
            href = html.escape(self.href_for(fragment.target))
            title = html.escape(
                f'Preview is not supported for "{fragment.extension}" file type. '
                "Click to open in the default app."
            )
            return (
                f'<a class="memo-unsupported-preview" title="{title}" href="{href}" '
                f'data-href="{href}">{html.escape(fragment.text)}</a>'
            )
        if isinstance(fragment, UnknownExtensionPlaceholder):
            title = html.escape(
                f"Link contains unknown extension: {fragment.extension}. Please use common "
                f"file extensions {fragment.hint} to enable full support."
            )
            return self._invalid(fragment.text, title)
        if isinstance(fragment, InvalidPlaceholder):
            return self._invalid(fragment.text, INVALID_TITLE)
        raise TypeError(f"Unsupported fragment kind: {fragment.kind}")

    def _href(self, identity: Identity, anchor: str | None = None) -> str:
        href = self.href_for(identity)
        return f"{href}#{anchor}" if anchor else href

    def _link(self, link: Link) -> str:
        href = html.escape(self._href(link.target, link.anchor))
        return f'<a title="{href}" href="{href}" data-href="{href}">{html.escape(link.text)}</a>'

    def _invalid(self, text: str, title: str) -> str:
        return (
            f'<a class="memo-invalid-link" title="{html.escape(title)}" '
            f'href="javascript:void(0)">{html.escape(text)}</a>'
        )

    def _embed_frame(self, title: str, target: Identity, content: str) -> str:
        href = html.escape(self._href(target))
        return (
            '<div class="memo-markdown-embed">'
            f'<div class="memo-markdown-embed-title">{html.escape(title)}</div>'
            '<div class="memo-markdown-embed-link">'
            f'<a title="{href}" href="{href}" data-href="{href}"><i class="icon-link"></i></a>'
            "</div>"
            f'<div class="memo-markdown-embed-content">{content}</div>'
            "</div>"
        )
