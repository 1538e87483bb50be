"""Read plain-text rule sources."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator

from singbox_rules.constants import COMMENT_PREFIXES
from singbox_rules.utils import read_text

logger = logging.getLogger(__name__)


def is_comment(line: str) -> bool:
    return line.startswith(COMMENT_PREFIXES)


def iter_rule_lines(lines: Iterable[str]) -> Iterator[str]:
    """Yield trimmed candidate rules, skipping blanks and comments, in order."""
    for raw in lines:
        line = raw.strip()
        if not line or is_comment(line):
            continue
        yield line


def parse_text_file(path: Path) -> list[str]:
    if not path.exists():
        logger.warning("Source file not found: %s", path)
        return []
    return list(iter_rule_lines(read_text(path).split("\n")))
