"""Turn the raw visible-text dump of a results page into clean lines."""
from typing import Sequence


def clean_line(line: str) -> str:
    """Drop non-ASCII and non-printable characters, then trim surrounding whitespace."""
    kept = ''.join(ch for ch in line if ch.isascii() and (ch.isprintable() or ch == '\t'))
    return kept.strip()


def normalize_text(raw: str | Sequence[str] | None) -> list[str]:
    """Split into lines and clean each one.

    Blank lines are kept (as empty strings) so positions still line up with the raw dump.
    Empty input gives an empty list.
    """
    if not raw:
        return []
    lines = raw.splitlines() if isinstance(raw, str) else [part for chunk in raw for part in chunk.splitlines() or ['']]
    return [clean_line(line) for line in lines]


def content_line_count(lines: Sequence[str]) -> int:
    return sum(1 for line in lines if line)
