"""Record boundary detection.

Results pages do not label their fields, so itineraries are recovered from a recurring
structural cue: every itinerary starts with a departure clock time followed by an arrival
clock time. A boundary strategy decides which lines open a new itinerary; field extraction
never needs to know how that decision was made.
"""
import re
from typing import Protocol, Sequence

_AMPM_SUFFIX_RE = re.compile(r'[AaPp][Mm]$')
_DAY_OFFSET_SUFFIX_RE = re.compile(r'\+\d$')


def is_time_marker(line: str) -> bool:
    """A line that looks like a clock time: "9:00AM", "5:00 pm", "10:15 AM+1", "23:40+1"."""
    if len(line) <= 2 or ':' not in line:
        return False
    return bool(_AMPM_SUFFIX_RE.search(line) or _DAY_OFFSET_SUFFIX_RE.search(line))


def marker_indices(lines: Sequence[str]) -> list[int]:
    return [i for i, line in enumerate(lines) if is_time_marker(line)]


class BoundaryStrategy(Protocol):
    def boundaries(self, lines: Sequence[str]) -> list[int]:
        """Indices of the lines that open a candidate itinerary, ascending."""
        ...


class AlternatingMarkers:
    """Departure and arrival markers strictly interleave: keep markers 0, 2, 4, ...

    If a page breaks the alternation (extra times for overnight connections, for example)
    the resulting groups are misaligned and fail field extraction on their own; they are
    dropped instead of corrupting their neighbours.
    """

    def boundaries(self, lines: Sequence[str]) -> list[int]:
        return marker_indices(lines)[::2]


def split_groups(
        lines: Sequence[str],
        starts: Sequence[int],
        include_tail: bool = False,
) -> list[tuple[int, int]]:
    """Line ranges [start, end) between consecutive boundaries.

    The trailing range (last boundary to end of input) has no closing boundary; it is only
    returned when include_tail is set.
    """
    spans = [(start, end) for start, end in zip(starts, starts[1:])]
    if include_tail and starts and starts[-1] < len(lines):
        spans.append((starts[-1], len(lines)))
    return spans
