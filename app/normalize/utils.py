from __future__ import annotations

import re

_BULLET_CHARS = "•◦▪▫●○■□◆◇▶►-–—*·"
_BULLET_PATTERN = re.compile(rf"^\s*(?:[{re.escape(_BULLET_CHARS)}]|(?:\d+[\.\)]))\s+")
_HEADING_TRAILER_RE = re.compile(r"[\s:;.\-–—|]+$")


def enumerate_lines(text: str) -> list[tuple[int, str]]:
    return [(index + 1, line) for index, line in enumerate(text.splitlines())]


def normalize_line(line: str) -> str:
    return re.sub(r"\s+", " ", line).strip()


def is_bullet_like(line: str) -> bool:
    return bool(_BULLET_PATTERN.match(line))


def heading_key(line: str) -> str:
    """Lowercased line with trailing heading punctuation removed."""
    stripped = normalize_line(line).lower()
    return _HEADING_TRAILER_RE.sub("", stripped)
