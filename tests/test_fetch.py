"""Tests for driving a renderer over a batch of queries."""

from datetime import datetime

import pytest

from farescan.errors import PageLoadInsufficient
from farescan.query import define_query, segment_url
from farescan.scraping import fetch
from farescan.scraping.fetch import fetch_flights, fetch_query

BASE_URL = "https://example.test/flights"


class FakeRenderer:
    """Serves canned page text per URL; unknown URLs fail like a page that never loaded."""

    def __init__(self, pages: dict[str, str]):
        self.pages = pages
        self.calls: list[str] = []

    def render(self, url: str) -> str:
        self.calls.append(url)
        if url not in self.pages:
            raise PageLoadInsufficient(url, 3, 10)
        return self.pages[url]


@pytest.fixture
def full_page(five_group_page: str) -> str:
    return five_group_page + "\n" + "\n".join(f"Footer link {i}" for i in range(120))


class TestFetchFlights:
    """Segment-by-segment fetch with fault isolation."""

    def test_records_from_every_segment(self, full_page: str) -> None:
        query = define_query("JFK", "IST", "2026-12-01", "JFK", "IST", "2026-12-02", label="New York")
        renderer = FakeRenderer({segment_url(s, BASE_URL): full_page for s in query.segments})

        results = fetch_flights([query], renderer, base_url=BASE_URL, clock=lambda: datetime(2026, 10, 1))

        assert len(results.data) == 6
        assert results.skipped_count == 2
        assert set(results.data["entity"]) == {"New York"}
        assert list(results.data["segment_index"]) == [0, 0, 0, 1, 1, 1]
        assert query.fetched
        assert "{6} RESULTS FOR:" in str(query)

    def test_failed_segment_does_not_stop_batch(self, full_page: str) -> None:
        first = define_query("JFK", "IST", "2026-12-01")
        second = define_query("BOS", "IST", "2026-12-01")
        renderer = FakeRenderer({segment_url(second.segments[0], BASE_URL): full_page})

        results = fetch_flights([first, second], renderer, base_url=BASE_URL)

        assert len(renderer.calls) == 2
        assert first.results[0].error is not None
        assert first.results[0].records == []
        assert list(results.data["entity"].unique()) == ["Boston"]
        assert results.failed_segments == 1

    def test_thin_page_recorded_as_error(self, five_group_page: str) -> None:
        query = define_query("JFK", "IST", "2026-12-01")
        renderer = FakeRenderer({segment_url(query.segments[0], BASE_URL): five_group_page})

        fetch_query(query, renderer, base_url=BASE_URL, min_lines=100)

        assert "did not load sufficient content" in query.results[0].error

    def test_refetch_replaces_results(self, full_page: str) -> None:
        query = define_query("JFK", "IST", "2026-12-01")
        renderer = FakeRenderer({segment_url(query.segments[0], BASE_URL): full_page})

        fetch_query(query, renderer, base_url=BASE_URL)
        fetch_query(query, renderer, base_url=BASE_URL)

        assert len(query.results) == 1
        assert len(query.records()) == 3

    def test_pause_between_segments(self, full_page: str, monkeypatch: pytest.MonkeyPatch) -> None:
        sleeps: list[float] = []
        monkeypatch.setattr(fetch.time, "sleep", sleeps.append)
        query = define_query("JFK", "IST", "2026-12-01", "JFK", "IST", "2026-12-02", "JFK", "IST", "2026-12-03")
        renderer = FakeRenderer({segment_url(s, BASE_URL): full_page for s in query.segments})

        fetch_flights(query, renderer, pause=1.5, base_url=BASE_URL)

        assert sleeps == [1.5, 1.5]

    def test_clock_is_called_per_segment(self, full_page: str) -> None:
        stamps = iter([datetime(2026, 10, 1, 9), datetime(2026, 10, 1, 10)])
        query = define_query("JFK", "IST", "2026-12-01", "JFK", "IST", "2026-12-02")
        renderer = FakeRenderer({segment_url(s, BASE_URL): full_page for s in query.segments})

        results = fetch_flights(query, renderer, base_url=BASE_URL, clock=lambda: next(stamps))

        assert sorted(set(results.data["retrieved_at"].tolist())) == [
            datetime(2026, 10, 1, 9), datetime(2026, 10, 1, 10)
        ]

    def test_unexpected_renderer_error_is_isolated(self, full_page: str) -> None:
        class TimingOutRenderer(FakeRenderer):
            def render(self, url: str) -> str:
                if url == segment_url(first.segments[0], BASE_URL):
                    self.calls.append(url)
                    raise TimeoutError("navigation timed out")
                return super().render(url)

        first = define_query("JFK", "IST", "2026-12-01", label="New York")
        second = define_query("BOS", "IST", "2026-12-01", label="Boston")
        renderer = TimingOutRenderer({segment_url(second.segments[0], BASE_URL): full_page})

        results = fetch_flights([first, second], renderer, base_url=BASE_URL)

        assert len(results.data) == 3
        assert set(results.data["entity"]) == {"Boston"}
        assert first.results[0].error == "TimeoutError: navigation timed out"
        assert results.failed_segments == 1
