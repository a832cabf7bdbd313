"""Filesystem scan feeding WorkspaceIndex.rebuild."""

import fnmatch
import os
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from ..core.exts import MARKDOWN_EXTS, kind_of
from ..core.ports import WorkspaceScanner

DEFAULT_EXCLUDE = ("node_modules", "*/node_modules")


class FsScanner(WorkspaceScanner):
    def __init__(
        self,
        roots: Sequence[Path],
        exclude: Iterable[str] = DEFAULT_EXCLUDE,
        markdown_exts: Sequence[str] = MARKDOWN_EXTS,
    ):
        self.roots = [Path(r) for r in roots]
        self.exclude = list(exclude)
        self.markdown_exts = tuple(markdown_exts)

    def _should_skip(self, relative: str) -> bool:
        """Check if a root-relative posix path should be skipped."""
        name = relative.rsplit("/", 1)[-1]

        # Skip hidden files and folders
        if name.startswith("."):
            return True

        # Skip temp/swap files
        if name.endswith("~") or name.endswith(".swp"):
            return True

        return any(fnmatch.fnmatch(relative, pattern) for pattern in self.exclude)

    def scan(self) -> Iterator[Path]:
        for root in self.roots:
            if not root.is_dir():
                continue
            for dirpath, dirnames, filenames in os.walk(root):
                rel_dir = Path(dirpath).relative_to(root).as_posix()
                prefix = "" if rel_dir == "." else rel_dir + "/"
                # Prune in place so os.walk skips excluded folders.
                dirnames[:] = sorted(
                    d for d in dirnames if not self._should_skip(prefix + d)
                )
                for name in sorted(filenames):
                    if self._should_skip(prefix + name):
                        continue
                    if kind_of(name, self.markdown_exts) == "unknown":
                        continue
                    yield Path(dirpath) / name
