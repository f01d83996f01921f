"""Drive a renderer over every segment of a batch of queries.

Segments are fetched one at a time. A segment that fails for any reason (a thin page or a
browser crash alike) is logged and recorded on its SegmentResult; the rest of the batch still runs.
"""
import logging
import time
from datetime import datetime
from typing import Callable, Iterable, Protocol

from playwright.sync_api import Error as PlaywrightError
from tqdm import tqdm

from ..config import settings
from ..errors import PageLoadInsufficient
from ..models import Query, SegmentResult
from ..parsing.records import parse_page
from ..processing.merge import FlightResults, merge_queries
from ..query import segment_url


class Renderer(Protocol):
    def render(self, url: str) -> str:
        """Visible text of the fully loaded page at url."""
        ...


def fetch_query(
        query: Query,
        renderer: Renderer,
        pause: float = 0.0,
        clock: Callable[[], datetime] = datetime.now,
        min_lines: int | None = None,
        include_tail: bool = False,
        base_url: str | None = None,
        progress: tqdm | None = None,
) -> Query:
    """Fetch and parse every segment of one query and attach the results (replacing earlier ones)."""
    threshold = settings.min_content_lines if min_lines is None else min_lines
    results = []
    for index, segment in enumerate(query.segments):
        if index and pause:
            time.sleep(pause)
        url = segment_url(segment, base_url)
        logging.info("Fetching %s", segment)
        try:
            raw = renderer.render(url)
            parsed = parse_page(raw, segment, clock(), min_lines=threshold, url=url, include_tail=include_tail)
        except (PageLoadInsufficient, PlaywrightError) as e:
            logging.warning("Segment %s failed: %s", segment, e)
            results.append(SegmentResult(segment, url, error=str(e)))
        except Exception as e:  # noqa: BLE001
            logging.exception("Segment %s failed", segment)
            results.append(SegmentResult(segment, url, error=f"{type(e).__name__}: {e}"))
        else:
            results.append(SegmentResult(segment, url, parse=parsed))
        if progress is not None:
            progress.update(1)
    query.attach_results(results)
    return query


def fetch_flights(
        queries: Query | Iterable[Query],
        renderer: Renderer,
        pause: float = 0.0,
        clock: Callable[[], datetime] = datetime.now,
        min_lines: int | None = None,
        include_tail: bool = False,
        base_url: str | None = None,
) -> FlightResults:
    """Fetch every query in order through one renderer and merge the records into one table."""
    queries = [queries] if isinstance(queries, Query) else list(queries)
    total = sum(len(query.segments) for query in queries)
    with tqdm(total=total, desc="Fetching segments", unit="segment") as progress:
        for i, query in enumerate(queries):
            if i and pause:
                time.sleep(pause)
            fetch_query(query, renderer, pause=pause, clock=clock, min_lines=min_lines,
                        include_tail=include_tail, base_url=base_url, progress=progress)
    return merge_queries(queries)
