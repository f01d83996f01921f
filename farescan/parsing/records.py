"""Slice normalized page lines into itinerary groups and build flight records from them.

parse_group is side-effect free and returns either a FlightRecord or a RecordParseSkip;
parse_lines folds the groups of one segment and keeps going past malformed ones.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from typing import Sequence

from ..errors import PageLoadInsufficient, RecordParseSkip
from ..models import FlightRecord, ParseResult, Segment
from . import fields
from .markers import AlternatingMarkers, BoundaryStrategy, is_time_marker, split_groups
from .normalize import content_line_count, normalize_text


@dataclass(slots=True)
class _GroupFields:
    times: list[tuple[time, int]] = field(default_factory=list)
    travel_time: str | None = None
    travel_time_minutes: int | None = None
    num_stops: int | None = None
    layover: str | None = None
    co2: int | None = None
    emission_diff: int | None = None
    price: float | None = None
    route: tuple[str, str] | None = None
    free_text: list[str] = field(default_factory=list)
    text_after_stops: str | None = None


def _classify(line: str, found: _GroupFields) -> str:
    """Feed one line into the first extractor that accepts it and report which one did."""
    if is_time_marker(line):
        for clock in fields.parse_clock_times(line):
            if len(found.times) < 2:
                found.times.append(clock)
        return 'time'
    if fields.is_layover(line):
        found.layover = found.layover or line
        return 'layover'
    if (minutes := fields.parse_duration_minutes(line)) is not None:
        if found.travel_time is None:
            found.travel_time, found.travel_time_minutes = line, minutes
        return 'duration'
    if (stops := fields.parse_stops(line)) is not None:
        if found.num_stops is None:
            found.num_stops = stops
        return 'stops'
    if (co2 := fields.parse_co2_kg(line)) is not None:
        found.co2 = co2 if found.co2 is None else found.co2
        return 'co2'
    if (diff := fields.parse_emission_diff(line)) is not None:
        found.emission_diff = diff if found.emission_diff is None else found.emission_diff
        return 'emissions'
    if (price := fields.parse_price(line)) is not None:
        # a bare number only counts as the fare once the duration has been seen
        if found.price is None and (fields.has_currency_marker(line) or found.travel_time is not None):
            found.price = price
        return 'price'
    if (route := fields.parse_route(line)) is not None:
        found.route = found.route or route
        return 'route'
    if fields.is_noise(line):
        return 'noise'
    found.free_text.append(line)
    return 'text'


def collect_fields(lines: Sequence[str]) -> _GroupFields:
    found = _GroupFields()
    previous = None
    for line in lines:
        if not line:
            continue
        kind = _classify(line, found)
        if kind == 'text' and previous == 'stops' and found.text_after_stops is None:
            found.text_after_stops = line
        previous = kind
    return found


def _split_layover_and_airline(found: _GroupFields) -> tuple[str | None, str | None]:
    layover = found.layover
    free_text = list(found.free_text)
    if found.num_stops and layover is None and found.text_after_stops is not None:
        # free text right after a "1 stop" line describes the connection, not the carrier
        layover = found.text_after_stops
        free_text.remove(layover)
    if not found.num_stops:
        layover = None
    # the carrier line comes first; later free text is operator or booking detail
    airline = fields.clean_airline(free_text[0]) if free_text else None
    return layover, airline or None


def _at(segment: Segment, clock: tuple[time, int]) -> datetime:
    moment, offset = clock
    return datetime.combine(segment.date, moment) + timedelta(days=offset)


def parse_group(
        lines: Sequence[str],
        segment: Segment,
        retrieved_at: datetime,
        group_index: int = 0,
) -> FlightRecord | RecordParseSkip:
    """Build one record from the lines of one itinerary; departure time and price are mandatory."""
    found = collect_fields(lines)
    if not found.times:
        return RecordParseSkip(group_index, "no departure time", tuple(lines))
    if found.price is None:
        return RecordParseSkip(group_index, "no price", tuple(lines))

    origin, destination = found.route or (segment.origin, segment.destination)
    layover, airline = _split_layover_and_airline(found)
    departure = _at(segment, found.times[0])
    arrival = _at(segment, found.times[1]) if len(found.times) > 1 else None
    if arrival is not None and arrival < departure:
        # arrival shown without "+1" but earlier on the clock: next day
        arrival += timedelta(days=1)
    return FlightRecord(
        departure_time=departure,
        arrival_time=arrival,
        origin=origin,
        destination=destination,
        airline=airline,
        travel_time=found.travel_time,
        travel_time_minutes=found.travel_time_minutes,
        price=found.price,
        num_stops=found.num_stops,
        layover=layover,
        co2_emission_kg=found.co2,
        emission_diff_pct=found.emission_diff,
        retrieved_at=retrieved_at,
    )


def parse_lines(
        lines: Sequence[str],
        segment: Segment,
        retrieved_at: datetime,
        strategy: BoundaryStrategy | None = None,
        include_tail: bool = False,
) -> ParseResult:
    """Recover every itinerary of one segment from normalized lines."""
    starts = (strategy or AlternatingMarkers()).boundaries(lines)
    if not starts:
        logging.warning("No flight time markers found for %s", segment)
        return ParseResult(warning="no time markers found")
    spans = split_groups(lines, starts, include_tail=include_tail)
    if not spans:
        logging.warning("Not enough flight time markers to delimit an itinerary for %s", segment)
        return ParseResult(warning="not enough time markers to pair")

    result = ParseResult()
    for index, (start, end) in enumerate(spans):
        outcome = parse_group(lines[start:end], segment, retrieved_at, group_index=index)
        if isinstance(outcome, RecordParseSkip):
            logging.debug("Skipped group %d (lines %d-%d) for %s: %s", index, start, end, segment, outcome.reason)
            result.skipped.append(outcome)
        else:
            result.records.append(outcome)
    logging.info("Parsed %d flights for %s (%d groups skipped)", len(result.records), segment, result.skipped_count)
    return result


def parse_page(
        raw_text: str | Sequence[str] | None,
        segment: Segment,
        retrieved_at: datetime,
        min_lines: int = 100,
        url: str | None = None,
        strategy: BoundaryStrategy | None = None,
        include_tail: bool = False,
) -> ParseResult:
    """Normalize a rendered page and parse it; pages at or below min_lines content lines are refused."""
    lines = normalize_text(raw_text)
    line_count = content_line_count(lines)
    if line_count <= min_lines:
        raise PageLoadInsufficient(url, line_count, min_lines)
    return parse_lines(lines, segment, retrieved_at, strategy=strategy, include_tail=include_tail)
