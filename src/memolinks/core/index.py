"""Workspace reference index: maps short, extension-less or long references to files."""

import logging
import os
import sys
import threading
from pathlib import Path
from typing import Callable, Iterable, Sequence

from .exts import MARKDOWN_EXTS, extension_of, is_image, is_other_known, kind_of
from .model import Identity, Resolution

logger = logging.getLogger(__name__)

SCOPES = ("all", "markdown", "image")


def default_case_sensitive() -> bool:
    """Windows and macOS filesystems are case-insensitive by default."""
    return not (sys.platform.startswith("win") or sys.platform == "darwin")


def normalize_ref(identifier: str) -> str:
    ref = identifier.strip().replace("\\", "/")
    while ref.startswith("./"):
        ref = ref[2:]
    return ref.lstrip("/")


def _suffix_match(candidate: str, ref: str) -> bool:
    return candidate == ref or candidate.endswith("/" + ref)


class IndexSnapshot:
    """
    Immutable view of every indexed file. Never modified after construction;
    WorkspaceIndex swaps in a new snapshot on every update.
    """

    def __init__(self, entries: Iterable[Identity], order: Callable[[Identity], tuple]):
        self.all: tuple[Identity, ...] = tuple(sorted(entries, key=order))
        self.markdown = tuple(e for e in self.all if e.kind == "markdown")
        self.image = tuple(e for e in self.all if e.kind == "image")

    def scope(self, name: str) -> tuple[Identity, ...]:
        if name == "all":
            return self.all
        if name == "markdown":
            return self.markdown
        if name == "image":
            return self.image
        raise ValueError(f"Unknown scope {name!r}, expected one of {SCOPES}")

    def __len__(self) -> int:
        return len(self.all)

    def __iter__(self):
        return iter(self.all)


class WorkspaceIndex:
    """
    Cache of known files under one or more workspace roots.

    Readers only ever see a complete snapshot: rebuild/add/remove/rename
    build a new IndexSnapshot and replace the old one in a single assignment.
    """

    def __init__(
        self,
        roots: Sequence[Path],
        markdown_exts: Sequence[str] = MARKDOWN_EXTS,
        case_sensitive: bool | None = None,
    ):
        if not roots:
            raise ValueError("WorkspaceIndex needs at least one root")
        self.roots = [Path(os.path.abspath(r)) for r in roots]
        self.markdown_exts = tuple(e.lower() for e in markdown_exts)
        self.case_sensitive = (
            default_case_sensitive() if case_sensitive is None else case_sensitive
        )
        self._snapshot = IndexSnapshot((), self._order)
        self._write_lock = threading.Lock()

    @property
    def snapshot(self) -> IndexSnapshot:
        return self._snapshot

    # Building

    def _order(self, entry: Identity) -> tuple:
        # Shallow paths first, then alphabetical, then by root position.
        try:
            root_pos = self.roots.index(entry.root)
        except ValueError:
            root_pos = len(self.roots)
        return (entry.relative.count("/"), entry.relative.lower(), root_pos)

    def _key(self, path: Path | str) -> str:
        key = os.path.normpath(str(path))
        return key if self.case_sensitive else key.casefold()

    def identity_for(self, path: Path | str) -> Identity | None:
        """Build the index entry for *path*; None for unsupported file types."""
        abs_path = Path(os.path.abspath(path))
        kind = kind_of(abs_path.name, self.markdown_exts)
        if kind == "unknown":
            return None
        for root in self.roots:
            try:
                relative = abs_path.relative_to(root).as_posix()
            except ValueError:
                continue
            return Identity(path=abs_path, root=root, relative=relative, kind=kind)
        # Outside every root: keep it reachable by basename.
        return Identity(path=abs_path, root=abs_path.parent, relative=abs_path.name, kind=kind)

    def _swap(self, entries: dict[str, Identity]) -> None:
        self._snapshot = IndexSnapshot(entries.values(), self._order)

    def _entries(self) -> dict[str, Identity]:
        return {self._key(e.path): e for e in self._snapshot.all}

    def rebuild(self, paths: Iterable[Path | str]) -> int:
        """Replace the whole index with *paths*. Returns the number of entries."""
        entries: dict[str, Identity] = {}
        for p in paths:
            identity = self.identity_for(p)
            if identity is not None:
                entries.setdefault(self._key(identity.path), identity)
        with self._write_lock:
            self._swap(entries)
        logger.debug("Indexed %d files under %s", len(entries), self.roots)
        return len(entries)

    def add(self, path: Path | str) -> Identity | None:
        identity = self.identity_for(path)
        if identity is None:
            return None
        with self._write_lock:
            entries = self._entries()
            entries[self._key(identity.path)] = identity
            self._swap(entries)
        return identity

    def remove(self, path: Path | str) -> bool:
        key = self._key(os.path.abspath(path))
        with self._write_lock:
            entries = self._entries()
            if entries.pop(key, None) is None:
                return False
            self._swap(entries)
        return True

    def rename(self, old: Path | str, new: Path | str) -> Identity | None:
        identity = self.identity_for(new)
        with self._write_lock:
            entries = self._entries()
            entries.pop(self._key(os.path.abspath(old)), None)
            if identity is not None:
                entries[self._key(identity.path)] = identity
            self._swap(entries)
        return identity

    # Lookup

    def scope_for(self, identifier: str) -> str:
        """Scope an embed of *identifier* should search."""
        if is_image(identifier):
            return "image"
        if is_other_known(identifier):
            return "all"
        return "markdown"

    def lookup(self, identifier: str, scope: str = "all") -> Resolution:
        """
        Resolve *identifier* against the current snapshot.

        Order: exact absolute/relative path, then basename or path-suffix
        match for identifiers with a known extension, then stem match over
        markdown extensions in priority order. An identifier with an unknown
        extension that matches nothing resolves to ``unknown_extension``.
        """
        entries = self._snapshot.scope(scope)
        ref = normalize_ref(identifier)
        if not ref:
            return Resolution(kind="not_found")

        exact = self._find_exact(entries, identifier, ref)
        if exact is not None:
            return Resolution(kind="found", identity=exact)

        lowered = ref.lower()
        long_ref = "/" in lowered
        ext = extension_of(ref)
        kind = kind_of(ref, self.markdown_exts) if ext else ""

        if ext and kind != "unknown":
            for entry in entries:
                if long_ref:
                    hit = _suffix_match(entry.relative.lower(), lowered)
                else:
                    hit = entry.name.lower() == lowered
                if hit:
                    return Resolution(kind="found", identity=entry)
            logger.debug("No %s entry for %r", scope, identifier)
            return Resolution(kind="not_found")

        # No extension, or one we do not know: "v1.2" may still be "v1.2.md".
        entry = self._find_markdown(entries, lowered, long_ref)
        if entry is not None:
            return Resolution(kind="found", identity=entry)
        if ext:
            return Resolution(kind="unknown_extension", extension=ext)
        logger.debug("No %s entry for %r", scope, identifier)
        return Resolution(kind="not_found")

    def _find_exact(
        self, entries: Sequence[Identity], identifier: str, ref: str
    ) -> Identity | None:
        if os.path.isabs(identifier.strip()):
            key = self._key(os.path.abspath(identifier.strip()))
            for entry in entries:
                if self._key(entry.path) == key:
                    return entry
            return None
        wanted = ref if self.case_sensitive else ref.casefold()
        for entry in entries:
            rel = entry.relative if self.case_sensitive else entry.relative.casefold()
            if rel == wanted:
                return entry
        return None

    def _find_markdown(
        self, entries: Sequence[Identity], lowered: str, long_ref: bool
    ) -> Identity | None:
        for md_ext in self.markdown_exts:
            for entry in entries:
                if entry.ext != md_ext:
                    continue
                if long_ref:
                    base = entry.relative[: -len(entry.ext)].lower()
                    if _suffix_match(base, lowered):
                        return entry
                elif entry.stem.lower() == lowered:
                    return entry
        return None
