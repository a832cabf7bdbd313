import logging
from pathlib import Path

from ..core.ports import DocumentProvider

logger = logging.getLogger(__name__)


class FsDocumentProvider(DocumentProvider):
    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def read(self, path: Path) -> str | None:
        try:
            return Path(path).read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            # Deleted or unreadable since it was indexed: treat as missing.
            logger.debug("Cannot read %s: %s", path, e)
            return None

    def exists(self, path: Path) -> bool:
        return Path(path).is_file()


class MemoryDocumentProvider(DocumentProvider):
    """Documents held in a dict keyed by path; used by tests and the API."""

    def __init__(self, docs: dict[Path, str] | None = None):
        self.docs = {Path(p): text for p, text in (docs or {}).items()}

    def read(self, path: Path) -> str | None:
        return self.docs.get(Path(path))

    def exists(self, path: Path) -> bool:
        return Path(path) in self.docs
