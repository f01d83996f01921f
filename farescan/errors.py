"""Error taxonomy for query construction, page loading, parsing and aggregation."""
from dataclasses import dataclass, field


class FareScanError(Exception):
    """Base error for farescan failures."""


class InvalidTopology(FareScanError, ValueError):
    """Raised when query arguments violate the rules of the requested trip type."""

    def __init__(self, rule: str, detail: str = ""):
        self.rule = rule
        self.detail = detail
        message = f"{rule}: {detail}" if detail else rule
        super().__init__(message)


class PageLoadInsufficient(FareScanError):
    """Raised when a rendered page does not reach the minimum content threshold."""

    def __init__(self, url: str | None, line_count: int, threshold: int):
        self.url = url
        self.line_count = line_count
        self.threshold = threshold
        where = f" for {url}" if url else ""
        super().__init__(
            f"Page did not load sufficient content{where} ({line_count} lines, need more than {threshold})"
        )


class AggregationInputEmpty(UserWarning):
    """Emitted when every record was filtered out before aggregation."""


@dataclass(frozen=True, slots=True)
class RecordParseSkip:
    """A candidate field group that could not be turned into a flight record.

    Never raised: the parser returns it in place of a record and counts it.
    """
    group_index: int
    reason: str
    lines: tuple[str, ...] = field(default=(), repr=False)
