"""Flatten fetched queries into one table.

Rows keep the order in which queries were given and, within a query, the order of its
segments and of the records on each page. Nothing is deduplicated: the same flight found
by two queries appears twice, tagged with each query's provenance.
"""
import logging
from dataclasses import asdict, dataclass, field, fields
from typing import Iterable, Sequence

import pandas as pd

from ..models import FlightRecord, Query
from .aggregate import filter_placeholder_rows

RECORD_COLUMNS = [f.name for f in fields(FlightRecord)]
PROVENANCE_COLUMNS = [
    'entity',
    'query_index',
    'segment_index',
    'segment_origin',
    'segment_destination',
    'segment_date',
    'comment',
]
COLUMNS = PROVENANCE_COLUMNS + RECORD_COLUMNS + ['departure_date']


def records_frame(records: Sequence[FlightRecord], **provenance) -> pd.DataFrame:
    """One row per record; every keyword becomes a constant column in front of the record fields."""
    rows = [{**provenance, **asdict(record)} for record in records]
    df = pd.DataFrame(rows, columns=list(provenance) + RECORD_COLUMNS)
    df['departure_date'] = pd.to_datetime(df['departure_time']).dt.date
    return df


def query_frame(query: Query, query_index: int = 0) -> pd.DataFrame:
    frames = []
    for segment_index, result in enumerate(query.results or []):
        frames.append(records_frame(
            result.records,
            entity=query.entity,
            query_index=query_index,
            segment_index=segment_index,
            segment_origin=result.segment.origin,
            segment_destination=result.segment.destination,
            segment_date=result.segment.date,
            comment=query.comment,
        ))
    frames = [frame for frame in frames if not frame.empty]
    if not frames:
        return pd.DataFrame(columns=COLUMNS)
    return pd.concat(frames, ignore_index=True)[COLUMNS]


@dataclass(slots=True)
class FlightResults:
    """Merged outcome of a batch: the flat table, the queries it came from and the skipped-group total."""
    data: pd.DataFrame
    queries: list[Query] = field(default_factory=list)
    skipped_count: int = 0

    @property
    def failed_segments(self) -> int:
        return sum(1 for query in self.queries for result in query.results or [] if result.error)

    def __str__(self) -> str:
        return (f"FlightResults({len(self.data)} flights from {len(self.queries)} queries, "
                f"{self.skipped_count} groups skipped, {self.failed_segments} segments failed)")


def merge_queries(queries: Iterable[Query]) -> FlightResults:
    """Append the records of every fetched query, in order. Unfetched queries contribute no rows.

    Rows with a placeholder airline label such as "Price graph", and rows without a price,
    are dropped from the merged table.
    """
    queries = list(queries)
    frames = [query_frame(query, index) for index, query in enumerate(queries)]
    frames = [frame for frame in frames if not frame.empty]
    data = pd.concat(frames, ignore_index=True) if frames else pd.DataFrame(columns=COLUMNS)
    parsed = len(data)
    data = filter_placeholder_rows(data)
    if len(data) < parsed:
        logging.debug('Dropped %d placeholder rows', parsed - len(data))
    skipped = sum(result.skipped_count for query in queries for result in query.results or [])
    logging.info('Merged %d flights from %d queries (%d groups skipped)', len(data), len(queries), skipped)
    return FlightResults(data=data, queries=queries, skipped_count=skipped)
