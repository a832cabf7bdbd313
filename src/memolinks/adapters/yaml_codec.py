import io
import logging
import re
from typing import Any

import yaml

from ..core.ports import FrontmatterCodec

logger = logging.getLogger(__name__)

_FM = re.compile(r"^\s*---\s*\n(.*?)\n---\s*(?:\n|$)", re.DOTALL)


class YamlFrontmatter(FrontmatterCodec):
    def decode(self, text: str) -> tuple[dict[str, Any], str]:
        m = _FM.match(text)
        if not m:
            return {}, text
        body = text[m.end() :]
        try:
            fm = yaml.safe_load(io.StringIO(m.group(1))) or {}
        except yaml.YAMLError as e:
            # The delimiters are unambiguous, so the block is still dropped.
            logger.warning("Invalid YAML frontmatter: %s", e)
            return {}, body
        if not isinstance(fm, dict):
            return {}, body
        return fm, body
