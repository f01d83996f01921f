from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from .errors import RecordParseSkip
from .locations import airport_to_city


class TripType(str, Enum):
    ONE_WAY = "one-way"
    ROUND_TRIP = "round-trip"
    CHAIN_TRIP = "chain-trip"
    PERFECT_CHAIN = "perfect-chain"


@dataclass(frozen=True, slots=True)
class Segment:
    """Single origin -> destination leg flown on a given date (IATA codes, upper case)."""
    origin: str
    destination: str
    date: date

    def __str__(self) -> str:
        return f"{self.date.isoformat()}: {self.origin} --> {self.destination}"


@dataclass(frozen=True, slots=True)
class FlightRecord:
    """Domain model for one itinerary offer recovered from a results page.

    travel_time keeps the raw "8 hr 30 min" text; travel_time_minutes is the parsed value.
    emission_diff_pct is signed: negative values mean below-typical emissions.
    """
    departure_time: datetime
    arrival_time: datetime | None
    origin: str
    destination: str
    airline: str | None
    travel_time: str | None
    travel_time_minutes: int | None
    price: float
    num_stops: int | None
    layover: str | None
    co2_emission_kg: int | None
    emission_diff_pct: int | None
    retrieved_at: datetime

    @property
    def departure_date(self) -> date:
        return self.departure_time.date()


@dataclass(slots=True)
class ParseResult:
    records: list[FlightRecord] = field(default_factory=list)
    skipped: list[RecordParseSkip] = field(default_factory=list)
    warning: str | None = None

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


@dataclass(slots=True)
class SegmentResult:
    """Outcome of fetching and parsing one segment; error is set when the page could not be used."""
    segment: Segment
    url: str
    parse: ParseResult | None = None
    error: str | None = None

    @property
    def records(self) -> list[FlightRecord]:
        return self.parse.records if self.parse else []

    @property
    def skipped_count(self) -> int:
        return self.parse.skipped_count if self.parse else 0


@dataclass(slots=True)
class Query:
    """Validated travel query. Segments never change; results are replaced on every fetch."""
    trip_type: TripType
    segments: tuple[Segment, ...]
    label: str | None = None
    comment: str | None = None
    results: list[SegmentResult] | None = None

    @property
    def entity(self) -> str:
        """The label, else the city of the first origin (its code when the city is unknown)."""
        origin = self.segments[0].origin
        return self.label or airport_to_city(origin, fallback=origin)

    @property
    def fetched(self) -> bool:
        return self.results is not None

    def attach_results(self, results: list[SegmentResult]) -> None:
        self.results = list(results)

    def records(self) -> list[FlightRecord]:
        if not self.results:
            return []
        return [record for result in self.results for record in result.records]

    def __str__(self) -> str:
        if self.results is None:
            header = "{Not Yet Fetched}"
        else:
            header = f"{{{len(self.records())}}} RESULTS FOR:"
        legs = "\n".join(str(segment) for segment in self.segments)
        return f"Flight Query( {header}\n{legs}\n)"


@dataclass(frozen=True, slots=True)
class RouteDescriptor:
    """Batch input row: an entity label (city) searched from `airport` to `dest`."""
    city: str
    airport: str
    dest: str
    comment: str | None = None
