from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar, Iterator


@dataclass(frozen=True)
class Reference:
    raw: str  # text between the brackets, untouched
    identifier: str  # never empty
    label: str | None = None  # "[[id|Label]]"
    section: str | None = None  # "[[id#Section]]", free text heading name

    @property
    def display_text(self) -> str:
        if self.label:
            return self.label
        if self.section:
            return f"{self.identifier}#{self.section}"
        return self.identifier


@dataclass(frozen=True)
class ReferenceMatch:
    """One ``[[...]]`` or ``![[...]]`` token found in a text."""

    raw: str  # inner text
    embed: bool
    start: int  # char offsets of the whole token, brackets included
    end: int
    line: int  # 0-based
    column: int  # 0-based

    @property
    def token(self) -> str:
        return f"{'!' if self.embed else ''}[[{self.raw}]]"


@dataclass(frozen=True)
class Heading:
    level: int  # 1-6
    title: str
    line: int  # 0-based line index


@dataclass(frozen=True)
class SectionBounds:
    start_line: int  # heading line, inclusive
    end_line: int  # next heading of same/higher level, exclusive

    def extract(self, text: str) -> str:
        lines = text.split("\n")
        return "\n".join(lines[self.start_line : self.end_line])


@dataclass(frozen=True)
class Identity:
    """A file known to the workspace index."""

    path: Path  # absolute, normalized
    root: Path  # workspace root the file was indexed under
    relative: str  # posix path relative to root
    kind: str  # "markdown" | "image" | "other"

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def stem(self) -> str:
        return self.path.stem

    @property
    def ext(self) -> str:
        return self.path.suffix.lower()


@dataclass(frozen=True)
class Resolution:
    kind: str  # "found" | "not_found" | "unknown_extension"
    identity: Identity | None = None
    extension: str | None = None

    @property
    def found(self) -> bool:
        return self.kind == "found"


# Rendered fragments. The core never produces markup; adapters turn these
# into HTML, markdown or JSON.


@dataclass
class Fragment:
    kind: ClassVar[str] = "fragment"
    reference: Reference
    embed: bool = field(default=False, kw_only=True)  # came from "![[...]]"

    def payload(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "kind": self.kind,
            "embed": self.embed,
            "reference": {
                "raw": self.reference.raw,
                "identifier": self.reference.identifier,
                "label": self.reference.label,
                "section": self.reference.section,
            },
        }
        data.update(self.payload())
        return data


@dataclass
class Link(Fragment):
    kind: ClassVar[str] = "link"
    target: Identity
    text: str
    anchor: str | None = None

    def payload(self) -> dict[str, Any]:
        return {"path": str(self.target.path), "text": self.text, "anchor": self.anchor}


@dataclass
class EmbeddedBlock(Fragment):
    kind: ClassVar[str] = "embed"
    target: Identity
    title: str
    content: RenderedDocument
    section: str | None = None

    def payload(self) -> dict[str, Any]:
        return {
            "path": str(self.target.path),
            "title": self.title,
            "section": self.section,
            "content": self.content.to_dict(),
        }


@dataclass
class ImageEmbed(Fragment):
    kind: ClassVar[str] = "image"
    target: Identity
    alt: str

    def payload(self) -> dict[str, Any]:
        return {"path": str(self.target.path), "alt": self.alt}


@dataclass
class InvalidPlaceholder(Fragment):
    kind: ClassVar[str] = "invalid"
    text: str

    def payload(self) -> dict[str, Any]:
        return {"text": self.text}


@dataclass
class UnknownExtensionPlaceholder(Fragment):
    kind: ClassVar[str] = "unknown_extension"
    text: str
    extension: str
    hint: str

    def payload(self) -> dict[str, Any]:
        return {"text": self.text, "extension": self.extension, "hint": self.hint}


@dataclass
class UnsupportedPreviewPlaceholder(Fragment):
    kind: ClassVar[str] = "unsupported_preview"
    target: Identity
    text: str
    extension: str

    def payload(self) -> dict[str, Any]:
        return {"path": str(self.target.path), "text": self.text, "extension": self.extension}


@dataclass
class CyclicStub(Fragment):
    kind: ClassVar[str] = "cyclic"
    identifier: str
    reason: str = "cycle"  # "cycle" | "depth"
    target: Identity | None = None

    def payload(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "reason": self.reason,
            "path": str(self.target.path) if self.target else None,
        }


@dataclass
class RenderedDocument:
    """Source text segments interleaved with fragments, in document order."""

    parts: list[str | Fragment] = field(default_factory=list)

    def fragments(self) -> Iterator[Fragment]:
        for part in self.parts:
            if isinstance(part, Fragment):
                yield part

    def walk(self) -> Iterator[Fragment]:
        """Yield every fragment, descending into embedded blocks."""
        for fragment in self.fragments():
            yield fragment
            if isinstance(fragment, EmbeddedBlock):
                yield from fragment.content.walk()

    def to_dict(self) -> list[dict[str, Any]]:
        out: list[dict[str, Any]] = []
        for part in self.parts:
            if isinstance(part, Fragment):
                out.append(part.to_dict())
            else:
                out.append({"kind": "text", "text": part})
        return out
