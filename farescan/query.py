"""Query construction: topology validation and results-page URLs.

Flat argument layouts accepted by build_query:

    one-way        origin, dest, date
    round-trip     origin, dest, date_leave, date_return
    chain-trip     org1, dest1, date1, org2, dest2, date2, ...
    perfect-chain  org1, date1, org2, date2, ..., final_dest   (final_dest closes the cycle at org1)

Dates are ``datetime.date`` objects or ``YYYY-MM-DD`` strings.
"""
import logging
import re
from datetime import date, datetime, timedelta
from typing import Iterable, Sequence
from urllib.parse import quote, urlencode

from .config import settings
from .errors import InvalidTopology
from .locations import normalize_location_codes
from .models import Query, RouteDescriptor, Segment, TripType

_CODE_RE = re.compile(r'^[A-Za-z]{3}$')
_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')

DateLike = date | str


# ---------------- argument parsing -----------------
def parse_code(value: object, position: int) -> str:
    if not isinstance(value, str) or not _CODE_RE.match(value.strip()):
        raise InvalidTopology("airport code must be 3 letters", f"argument {position} is {value!r}")
    return value.strip().upper()


def parse_date(value: object, position: int) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and _DATE_RE.match(value.strip()):
        try:
            return datetime.strptime(value.strip(), "%Y-%m-%d").date()
        except ValueError:
            pass
    raise InvalidTopology("date must be a valid YYYY-MM-DD calendar date", f"argument {position} is {value!r}")


def _is_date_arg(value: object) -> bool:
    return isinstance(value, date) or (isinstance(value, str) and bool(_DATE_RE.match(value.strip())))


def _make_segment(origin: str, destination: str, when: date, index: int) -> Segment:
    if origin == destination:
        raise InvalidTopology("origin must differ from destination", f"segment {index + 1} is {origin} -> {destination}")
    return Segment(origin, destination, when)


# ---------------- invariants -----------------
def _check_dates_non_decreasing(segments: Sequence[Segment]) -> None:
    for i, (prev, curr) in enumerate(zip(segments, segments[1:]), start=2):
        if curr.date < prev.date:
            raise InvalidTopology(
                "dates must be non-decreasing",
                f"segment {i} on {curr.date.isoformat()} is before segment {i - 1} on {prev.date.isoformat()}",
            )


def _check_continuity(segments: Sequence[Segment]) -> None:
    for i, (prev, curr) in enumerate(zip(segments, segments[1:]), start=2):
        if curr.origin != prev.destination:
            raise InvalidTopology(
                "each segment must depart from the previous destination",
                f"segment {i} departs {curr.origin}, previous segment arrives {prev.destination}",
            )
    if segments[-1].destination != segments[0].origin:
        raise InvalidTopology(
            "perfect chain must return to its first origin",
            f"ends at {segments[-1].destination}, started at {segments[0].origin}",
        )


def validate_segments(trip_type: TripType, segments: Sequence[Segment]) -> None:
    """Check the topology invariants of already-built segments."""
    if not segments:
        raise InvalidTopology("query needs at least one segment")
    if trip_type is TripType.ONE_WAY and len(segments) != 1:
        raise InvalidTopology("one-way query has exactly one segment", f"got {len(segments)}")
    if trip_type is TripType.ROUND_TRIP:
        if len(segments) != 2:
            raise InvalidTopology("round-trip query has exactly two segments", f"got {len(segments)}")
        out, back = segments
        if (back.origin, back.destination) != (out.destination, out.origin):
            raise InvalidTopology("round-trip return must reverse the outbound segment")
    if trip_type in (TripType.CHAIN_TRIP, TripType.PERFECT_CHAIN) and len(segments) < 2:
        raise InvalidTopology(f"{trip_type.value} query has at least two segments", f"got {len(segments)}")
    _check_dates_non_decreasing(segments)
    if trip_type is TripType.PERFECT_CHAIN:
        _check_continuity(segments)


# ---------------- per-topology builders -----------------
def _one_way(args: Sequence[object]) -> list[Segment]:
    if len(args) != 3:
        raise InvalidTopology("one-way takes origin, dest, date", f"got {len(args)} arguments")
    return [_make_segment(parse_code(args[0], 1), parse_code(args[1], 2), parse_date(args[2], 3), 0)]


def _round_trip(args: Sequence[object]) -> list[Segment]:
    if len(args) != 4:
        raise InvalidTopology("round-trip takes origin, dest, date_leave, date_return", f"got {len(args)} arguments")
    origin, dest = parse_code(args[0], 1), parse_code(args[1], 2)
    leave, back = parse_date(args[2], 3), parse_date(args[3], 4)
    return [_make_segment(origin, dest, leave, 0), _make_segment(dest, origin, back, 1)]


def _chain_trip(args: Sequence[object]) -> list[Segment]:
    if len(args) < 6 or len(args) % 3:
        raise InvalidTopology(
            "chain-trip takes (origin, dest, date) groups, at least two",
            f"got {len(args)} arguments",
        )
    segments = []
    for i in range(0, len(args), 3):
        segments.append(_make_segment(
            parse_code(args[i], i + 1), parse_code(args[i + 1], i + 2), parse_date(args[i + 2], i + 3), i // 3
        ))
    return segments


def _perfect_chain(args: Sequence[object]) -> list[Segment]:
    if len(args) < 5 or len(args) % 2 == 0:
        raise InvalidTopology(
            "perfect-chain takes (airport, date) pairs followed by the final destination, at least two pairs",
            f"got {len(args)} arguments",
        )
    stops = [parse_code(args[i], i + 1) for i in range(0, len(args) - 1, 2)]
    dates = [parse_date(args[i], i + 1) for i in range(1, len(args) - 1, 2)]
    stops.append(parse_code(args[-1], len(args)))
    return [_make_segment(stops[i], stops[i + 1], dates[i], i) for i in range(len(dates))]


_BUILDERS = {
    TripType.ONE_WAY: _one_way,
    TripType.ROUND_TRIP: _round_trip,
    TripType.CHAIN_TRIP: _chain_trip,
    TripType.PERFECT_CHAIN: _perfect_chain,
}


def _trip_type(tag: TripType | str) -> TripType:
    try:
        return TripType(tag)
    except ValueError:
        valid = ", ".join(t.value for t in TripType)
        raise InvalidTopology("unknown trip type", f"{tag!r} is not one of {valid}") from None


# ---------------- public API -----------------
def build_query(
        trip_type: TripType | str,
        args: Sequence[object],
        label: str | None = None,
        comment: str | None = None,
) -> Query:
    trip_type = _trip_type(trip_type)
    segments = _BUILDERS[trip_type](list(args))
    validate_segments(trip_type, segments)
    return Query(trip_type, tuple(segments), label=label, comment=comment)


def infer_trip_type(args: Sequence[object]) -> TripType:
    n = len(args)
    if n == 3:
        return TripType.ONE_WAY
    if n == 4:
        return TripType.ROUND_TRIP
    if n >= 6 and n % 3 == 0 and _is_date_arg(args[-1]):
        return TripType.CHAIN_TRIP
    if n >= 5 and n % 2 == 1 and not _is_date_arg(args[-1]):
        return TripType.PERFECT_CHAIN
    raise InvalidTopology("arguments match no trip type", f"got {n} arguments")


def _resolve_location(value: object) -> object:
    """City names become a code (metro area first); codes, dates and anything else pass through."""
    if not isinstance(value, str) or _is_date_arg(value) or len(value.strip()) == 3:
        return value
    codes = normalize_location_codes(value)
    if len(codes) > 1:
        logging.info("%s has %d airports, using %s", value.strip(), len(codes), codes[0])
    return codes[0]


def define_query(*args: object, label: str | None = None, comment: str | None = None) -> Query:
    """Build a query, picking the trip type from the shape of the positional arguments.

    Locations may be airport codes, metropolitan area codes or city names ('New York' -> NYC).
    """
    args = tuple(_resolve_location(arg) for arg in args)
    return build_query(infer_trip_type(args), args, label=label, comment=comment)


def date_range(date_min: DateLike, date_max: DateLike) -> list[date]:
    start, end = parse_date(date_min, 1), parse_date(date_max, 2)
    if start > end:
        raise InvalidTopology("date range must not end before it starts", f"{start} > {end}")
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def _dated_legs(origin: str, dest: str, dates: Iterable[date]) -> Query:
    legs = sorted(set(dates))
    if not legs:
        raise InvalidTopology("query needs at least one segment", "no dates given")
    args: list[object] = []
    for day in legs:
        args.extend([origin, dest, day])
    trip_type = TripType.ONE_WAY if len(legs) == 1 else TripType.CHAIN_TRIP
    return build_query(trip_type, args)


def define_query_range(
        origins: str | Sequence[str], dest: str, date_min: DateLike, date_max: DateLike
) -> list[Query]:
    """One query per origin airport covering every day of the inclusive range, labelled with its code.

    City names among the origins expand to every airport of the city; a city name as ``dest``
    resolves to its first airport.
    """
    if isinstance(origins, str):
        origins = [origins]
    if not origins:
        raise InvalidTopology("at least one origin is required")
    days = date_range(date_min, date_max)
    dest = normalize_location_codes(dest, expand_cities=True)[0]
    queries = []
    for origin in normalize_location_codes(origins, expand_cities=True):
        query = _dated_legs(origin, dest, days)
        query.label = origin
        queries.append(query)
    logging.info("Defined %d queries over %d dates", len(queries), len(days))
    return queries


def build_batch_queries(routes: Iterable[RouteDescriptor], dates: Iterable[DateLike]) -> list[Query]:
    """Cross route descriptors with dates: one multi-segment query (one render session) per route."""
    days = [parse_date(d, i + 1) for i, d in enumerate(dates)]
    queries = []
    for route in routes:
        query = _dated_legs(route.airport, route.dest, days)
        query.label = route.city
        query.comment = route.comment
        queries.append(query)
    return queries


def segment_url(segment: Segment, base_url: str | None = None) -> str:
    """Results page URL for one segment. Pure: identical input gives a byte-identical URL."""
    params = {
        "hl": "en",
        "q": f"Flights to {segment.destination} from {segment.origin} on {segment.date.isoformat()} oneway",
    }
    return f"{base_url or settings.base_url}?{urlencode(params, quote_via=quote)}"


def query_urls(query: Query, base_url: str | None = None) -> list[str]:
    return [segment_url(segment, base_url) for segment in query.segments]
