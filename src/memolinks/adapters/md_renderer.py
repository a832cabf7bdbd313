"""Markdown adapter: embeds inlined, links rewritten to relative markdown links."""

from typing import Callable
from urllib.parse import quote

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


def relative_href(identity: Identity) -> str:
    return quote(identity.relative)


class MarkdownRenderer(FragmentRenderer):
    def __init__(self, href_for: Callable[[Identity], str] = relative_href):
        self.href_for = href_for

    def render(self, doc: RenderedDocument) -> str:
        out = []
        for part in doc.parts:
            out.append(self.render_fragment(part) if isinstance(part, Fragment) else part)
        return "".join(out)

    def render_fragment(self, fragment: Fragment) -> str:
        if isinstance(fragment, Link):
            href = self.href_for(fragment.target)
            if fragment.anchor:
                href = f"{href}#{fragment.anchor}"
            return f"[{fragment.text}]({href})"
        if isinstance(fragment, EmbeddedBlock):
            return self.render(fragment.content)
        if isinstance(fragment, ImageEmbed):
            return f"![{fragment.alt}]({self.href_for(fragment.target)})"
        if isinstance(fragment, UnsupportedPreviewPlaceholder):
            return f"[{fragment.text}]({self.href_for(fragment.target)})"
        if isinstance(fragment, CyclicStub):
            if fragment.reason == "depth":
                return f"> **Memo:** embed depth limit reached at `{fragment.identifier}`\n"
            return f"> **Memo:** cyclic embed of `{fragment.identifier}`\n"
        if isinstance(fragment, UnknownExtensionPlaceholder):
            if not fragment.embed:
                return fragment.text
            return (
                f"> **Memo:** unknown extension `{fragment.extension}` "
                f"in `{fragment.reference.identifier}`\n"
            )
        if isinstance(fragment, InvalidPlaceholder):
            if not fragment.embed:
                return fragment.text
            return f"> **Memo:** missing document `{fragment.reference.identifier}`\n"
        raise TypeError(f"Unsupported fragment kind: {fragment.kind}")
