"""City names and airport codes.

Queries accept either 3-letter codes (airport or metropolitan area, used as given) or full
city names. City names are looked up in the ``airportsdata`` IATA table; a handful of large
cities map to their metropolitan area code instead, which the results page understands as
"any airport of that city".
"""
import logging
from functools import lru_cache
from typing import Iterable

import airportsdata

from .errors import InvalidTopology

# codes in the airport table that the results page does not serve (seaplane terminals etc.)
EXCLUDED_AIRPORTS = frozenset({'CXH'})

# airports listed under a neighbouring city that travellers book as part of a metro area
CITY_ALIASES = {'EWR': 'New York'}

METRO_CODES = {
    # North America
    'new york': 'NYC',
    'washington': 'WAS',
    'chicago': 'CHI',
    'los angeles': 'LAX',
    'san francisco': 'SFO',
    'miami': 'MIA',
    'houston': 'HOU',
    'dallas': 'DFW',
    'atlanta': 'ATL',
    'boston': 'BOS',
    'seattle': 'SEA',
    'detroit': 'DTT',
    'philadelphia': 'PHL',
    'toronto': 'YTO',
    'montreal': 'YMQ',
    # Europe
    'london': 'LON',
    'paris': 'PAR',
    'berlin': 'BER',
    'rome': 'ROM',
    'milan': 'MIL',
    'madrid': 'MAD',
    'barcelona': 'BCN',
    'moscow': 'MOW',
    'stockholm': 'STO',
    'oslo': 'OSL',
    'amsterdam': 'AMS',
    'brussels': 'BRU',
    'dublin': 'DUB',
    'copenhagen': 'CPH',
    'vienna': 'VIE',
    'athens': 'ATH',
    'lisbon': 'LIS',
    'istanbul': 'IST',
    'budapest': 'BUD',
    'prague': 'PRG',
    'warsaw': 'WAW',
    # Asia
    'tokyo': 'TYO',
    'beijing': 'BJS',
    'shanghai': 'SHA',
    'hong kong': 'HKG',
    'singapore': 'SIN',
    'seoul': 'SEL',
    'bangkok': 'BKK',
    'jakarta': 'JKT',
    'manila': 'MNL',
    'taipei': 'TPE',
    'osaka': 'OSA',
    'delhi': 'DEL',
    'mumbai': 'BOM',
    'dubai': 'DXB',
    'tel aviv': 'TLV',
    'doha': 'DOH',
    'kuala lumpur': 'KUL',
    # South America
    'buenos aires': 'BUE',
    'rio de janeiro': 'RIO',
    'sao paulo': 'SAO',
    'santiago': 'SCL',
    'lima': 'LIM',
    'bogota': 'BOG',
    # Africa & Middle East
    'cairo': 'CAI',
    'johannesburg': 'JNB',
    'cape town': 'CPT',
    'casablanca': 'CAS',
    # Oceania
    'sydney': 'SYD',
    'melbourne': 'MEL',
    'auckland': 'AKL',
}


# ---------------- airport table -----------------
@lru_cache(maxsize=1)
def _airports() -> dict:
    return airportsdata.load('IATA')


@lru_cache(maxsize=1)
def _codes_by_city() -> dict[str, list[str]]:
    """Lower-cased city name -> commercial airport codes, in table order."""
    index: dict[str, list[str]] = {}
    for code, airport in _airports().items():
        if len(code) != 3 or code in EXCLUDED_AIRPORTS:
            continue
        if 'heliport' in (airport.get('name') or '').lower():
            continue
        city = CITY_ALIASES.get(code) or airport.get('city') or ''
        if city.strip():
            index.setdefault(city.strip().lower(), []).append(code)
    return index


# ---------------- lookups -----------------
def airport_to_city(code: str, fallback: str | None = None) -> str | None:
    """City of an IATA airport code ('JFK' -> 'New York'); ``fallback`` when the code is unknown."""
    airport = _airports().get(code.strip().upper()) if isinstance(code, str) else None
    city = (airport or {}).get('city')
    return city if city else fallback


def city_name_to_code(city_name: str) -> list[str]:
    """All commercial airport codes of a city, matched case-insensitively on the city name."""
    codes = _codes_by_city().get(city_name.strip().lower())
    if not codes:
        raise InvalidTopology(
            "unknown city or airport",
            f"{city_name!r} is not in the airport table; use a 3-letter airport or city code instead",
        )
    return list(codes)


def get_metropolitan_code(city_name: str) -> str | None:
    return METRO_CODES.get(city_name.strip().lower())


def normalize_location_codes(locations: str | Iterable[str], expand_cities: bool = False) -> list[str]:
    """Turn a mix of codes and city names into unique upper-case 3-letter codes.

    A 3-letter value is taken as a code. A city name becomes its metropolitan area code when
    there is one, unless ``expand_cities`` asks for every airport of the city instead.
    """
    if isinstance(locations, str):
        locations = [locations]
    normalized: list[str] = []
    for location in locations:
        if not isinstance(location, str) or not location.strip():
            raise InvalidTopology("location must be an airport code or a city name", f"got {location!r}")
        value = location.strip()
        if len(value) == 3:
            normalized.append(value.upper())
            continue
        metro = get_metropolitan_code(value)
        if metro is not None and not expand_cities:
            normalized.append(metro)
        else:
            codes = city_name_to_code(value)
            logging.debug("Resolved %s to %s", value, ', '.join(codes))
            normalized.extend(codes)
    return list(dict.fromkeys(normalized))
