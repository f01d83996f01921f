"""Independent extractors for the fields of one itinerary.

Every extractor takes a single normalized line and returns the parsed value or None; none of
them depends on another. Deciding which line feeds which field is done in records.py.
"""
import re
from datetime import time

_CURRENCY = r'(?:[A-Z]{0,3}[$€£¥₹]|[A-Z]{3})'
_PRICE_RE = re.compile(
    rf'^(?P<pre>{_CURRENCY}?)\s*(?P<amount>\d[\d,]*(?:\.\d+)?)\s*(?P<post>{_CURRENCY}?)$'
)
_NO_STOPS_RE = re.compile(r'^(?:non-?stop|direct)(?: flight)?$', re.IGNORECASE)
_STOPS_RE = re.compile(r'^(\d+)\s+stops?\b', re.IGNORECASE)
_DURATION_RE = re.compile(r'^(?:(\d+)\s*hrs?)?\s*(?:(\d+)\s*mins?)?$', re.IGNORECASE)
_CO2_RE = re.compile(r'^(\d[\d,]*)\s*kg\s+CO2e?$', re.IGNORECASE)
_EMISSION_RE = re.compile(r'^([+-]?\d+)\s*%(?:\s+emissions)?$', re.IGNORECASE)
_AVG_EMISSION_RE = re.compile(r'^avg\.? emissions$', re.IGNORECASE)
_ROUTE_RE = re.compile(r'^([A-Z]{3})[^A-Za-z0-9]?([A-Z]{3})$')
_TIMED_LAYOVER_RE = re.compile(r'^\d+\s*(?:hr|min)\b.*\b[A-Z]{3}$')
_CODE_LIST_RE = re.compile(r'^[A-Z]{3}(?:,\s*[A-Z]{3})+$')
_CLOCK_RE = re.compile(r'(\d{1,2}):(\d{2})\s*([AaPp][Mm])?(?:\s*\+(\d))?')

NOISE_PHRASES = (
    'separate tickets booked together',
    'change of airport',
    'other flights',
    'avoids',
    'tree absorbs',
    'trees absorb',
    'co2',
)


def parse_price(text: str) -> float | None:
    """'$1,250' -> 1250.0, 'USD 99.50' -> 99.5, '450' -> 450.0; anything else -> None."""
    if (match := _PRICE_RE.match(text.strip())) is None:
        return None
    return float(match.group('amount').replace(',', ''))


def has_currency_marker(text: str) -> bool:
    match = _PRICE_RE.match(text.strip())
    return bool(match and (match.group('pre') or match.group('post')))


def parse_stops(text: str) -> int | None:
    """'Nonstop' -> 0, '1 stop' -> 1, '2 stops' -> 2."""
    text = text.strip()
    if _NO_STOPS_RE.match(text):
        return 0
    return int(match.group(1)) if (match := _STOPS_RE.match(text)) else None


def parse_duration_minutes(text: str) -> int | None:
    """'3 hr 45 min' -> 225, '8 hr' -> 480, '50 min' -> 50. A missing component counts as 0."""
    match = _DURATION_RE.match(text.strip())
    if match is None or (match.group(1) is None and match.group(2) is None):
        return None
    hours, minutes = (int(value) if value else 0 for value in match.groups())
    return hours * 60 + minutes


def parse_co2_kg(text: str) -> int | None:
    """'593 kg CO2e' -> 593."""
    match = _CO2_RE.match(text.strip())
    return int(match.group(1).replace(',', '')) if match else None


def parse_emission_diff(text: str) -> int | None:
    """'-12% emissions' -> -12, '18% emissions' -> 18, 'Avg emissions' -> 0."""
    text = text.strip()
    if _AVG_EMISSION_RE.match(text):
        return 0
    return int(match.group(1)) if (match := _EMISSION_RE.match(text)) else None


def parse_route(text: str) -> tuple[str, str] | None:
    """'JFKIST' -> ('JFK', 'IST')."""
    match = _ROUTE_RE.match(text.strip())
    return (match.group(1), match.group(2)) if match else None


def is_layover(text: str) -> bool:
    """'1 hr 20 min IST' or 'IST, FRA'."""
    text = text.strip()
    return bool(_TIMED_LAYOVER_RE.match(text) or _CODE_LIST_RE.match(text))


def is_noise(text: str) -> bool:
    lowered = text.lower()
    return any(phrase in lowered for phrase in NOISE_PHRASES)


def parse_clock_times(text: str) -> list[tuple[time, int]]:
    """All clock times on a line with their day offsets: '10:15 AM+1' -> [(10:15, 1)].

    Twelve-hour times need an AM/PM suffix; times without one are read as 24-hour clock.
    Out-of-range values are skipped.
    """
    found = []
    for hour_s, minute_s, meridiem, offset in _CLOCK_RE.findall(text):
        hour, minute = int(hour_s), int(minute_s)
        if meridiem:
            if not 1 <= hour <= 12:
                continue
            hour = hour % 12 + (12 if meridiem.upper() == 'PM' else 0)
        if hour > 23 or minute > 59:
            continue
        found.append((time(hour, minute), int(offset) if offset else 0))
    return found


def clean_airline(text: str) -> str:
    """Trim 'Operated by ...' trailers from every carrier in a comma separated label."""
    carriers = [part.split('Operated')[0].strip() for part in text.split(',')]
    return ', '.join(carrier for carrier in carriers if carrier)
