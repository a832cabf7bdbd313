"""Embed renderer: turns references into fragments, recursing into embedded documents."""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .exts import supported_exts_hint
from .index import WorkspaceIndex
from .model import (
    CyclicStub,
    EmbeddedBlock,
    Fragment,
    ImageEmbed,
    InvalidPlaceholder,
    Link,
    Reference,
    RenderedDocument,
    UnknownExtensionPlaceholder,
    UnsupportedPreviewPlaceholder,
)
from .ports import DocumentProvider, FrontmatterCodec
from .refs import (
    MalformedReferenceError,
    extract_embed_identifiers,
    find_references,
    parse_reference,
    unwrap_token,
)
from .sections import section_anchor, section_content

logger = logging.getLogger(__name__)


class RenderStack:
    """
    Lower-cased identifiers of the embeds currently open in one top-level
    render call. Create one per call; never share it between renders.
    """

    def __init__(self) -> None:
        self._open: list[str] = []

    def push(self, identifier: str) -> None:
        self._open.append(identifier.lower())

    def pop(self) -> str:
        return self._open.pop()

    @contextmanager
    def opened(self, identifier: str) -> Iterator["RenderStack"]:
        self.push(identifier)
        try:
            yield self
        finally:
            self.pop()

    def __contains__(self, identifier: object) -> bool:
        return isinstance(identifier, str) and identifier.lower() in self._open

    def __len__(self) -> int:
        return len(self._open)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._open))


class EmbedRenderer:
    def __init__(
        self,
        index: WorkspaceIndex,
        provider: DocumentProvider,
        *,
        codec: FrontmatterCodec | None = None,
        max_depth: int = 10,
        strip_frontmatter: bool = True,
    ):
        self.index = index
        self.provider = provider
        self.codec = codec
        self.max_depth = max_depth
        self.strip_frontmatter = strip_frontmatter

    # Public API

    def render_reference(
        self, raw: str, embed: bool = False, stack: RenderStack | None = None
    ) -> Fragment:
        """
        Render one reference.

        *raw* is either the text between the brackets or a whole ``[[...]]`` /
        ``![[...]]`` token, in which case the token decides *embed*.

        Raises:
            MalformedReferenceError: if the reference has no identifier
        """
        inner, wrapped_embed = unwrap_token(raw)
        if wrapped_embed is not None:
            embed = wrapped_embed
        ref = parse_reference(inner)
        return self._render(ref, embed, stack if stack is not None else RenderStack())

    def render_text(self, text: str, stack: RenderStack | None = None) -> RenderedDocument:
        """Render every reference in *text*; plain text is kept as-is between fragments."""
        if stack is None:
            stack = RenderStack()
        doc = RenderedDocument()
        cursor = 0
        for match in find_references(text):
            try:
                ref = parse_reference(match.raw)
            except MalformedReferenceError as e:
                logger.warning("Line %d: %s", match.line + 1, e)
                continue
            if match.start > cursor:
                doc.parts.append(text[cursor : match.start])
            doc.parts.append(self._render(ref, match.embed, stack))
            cursor = match.end
        if cursor < len(text):
            doc.parts.append(text[cursor:])
        return doc

    def render_document(self, path: Path | str) -> RenderedDocument:
        """
        Render a whole file with a fresh render stack.

        Raises:
            FileNotFoundError: if the document cannot be read
        """
        text = self.provider.read(Path(path))
        if text is None:
            raise FileNotFoundError(str(path))
        return self.render_text(self._strip(text), RenderStack())

    # Internals

    def _render(self, ref: Reference, embed: bool, stack: RenderStack) -> Fragment:
        if embed:
            return self._render_embed(ref, stack)
        return self._render_link(ref)

    def _unresolved(
        self, ref: Reference, kind: str, extension: str | None, embed: bool = False
    ) -> Fragment:
        text = ref.label or ref.identifier
        if kind == "unknown_extension" and extension:
            return UnknownExtensionPlaceholder(
                reference=ref,
                text=text,
                extension=extension,
                hint=supported_exts_hint(self.index.markdown_exts),
                embed=embed,
            )
        return InvalidPlaceholder(reference=ref, text=text, embed=embed)

    def _render_link(self, ref: Reference) -> Fragment:
        res = self.index.lookup(ref.identifier, "all")
        if res.identity is None:
            return self._unresolved(ref, res.kind, res.extension)

        anchor = None
        if ref.section and res.identity.kind == "markdown":
            content = self.provider.read(res.identity.path)
            if content is None:
                logger.warning("Indexed file is unreadable: %s", res.identity.path)
                return InvalidPlaceholder(reference=ref, text=ref.label or ref.identifier)
            anchor = section_anchor(content, ref.section)
        return Link(reference=ref, target=res.identity, text=ref.display_text, anchor=anchor)

    def _render_embed(self, ref: Reference, stack: RenderStack) -> Fragment:
        res = self.index.lookup(ref.identifier, self.index.scope_for(ref.identifier))
        if res.identity is None:
            return self._unresolved(ref, res.kind, res.extension, embed=True)

        identity = res.identity
        text = ref.label or ref.identifier
        if identity.kind == "image":
            return ImageEmbed(reference=ref, target=identity, alt=text, embed=True)
        if identity.kind != "markdown":
            return UnsupportedPreviewPlaceholder(
                reference=ref, target=identity, text=text, extension=identity.ext, embed=True
            )

        content = self.provider.read(identity.path)
        if content is None:
            logger.warning("Indexed file is unreadable: %s", identity.path)
            return InvalidPlaceholder(reference=ref, text=text, embed=True)

        current = ref.identifier.lower()
        embedded = extract_embed_identifiers(content)
        if current in embedded or current in stack or any(i in stack for i in embedded):
            logger.debug("Cyclic embed of %r (open: %s)", ref.identifier, list(stack))
            return CyclicStub(
                reference=ref, identifier=ref.identifier, target=identity, embed=True
            )
        if len(stack) >= self.max_depth:
            logger.warning("Embed depth limit %d reached at %r", self.max_depth, ref.identifier)
            return CyclicStub(
                reference=ref,
                identifier=ref.identifier,
                reason="depth",
                target=identity,
                embed=True,
            )

        with stack.opened(current):
            rendered = self.render_text(self._embed_body(content, ref.section), stack)
        return EmbeddedBlock(
            reference=ref,
            target=identity,
            title=identity.stem,
            content=rendered,
            section=ref.section,
            embed=True,
        )

    def _embed_body(self, content: str, section: str | None) -> str:
        if section:
            narrowed = section_content(content, section)
            if narrowed is not None:
                return narrowed
            logger.debug("Section %r not found, embedding whole document", section)
        return self._strip(content)

    def _strip(self, content: str) -> str:
        if self.strip_frontmatter and self.codec is not None:
            return self.codec.decode(content)[1]
        return content
