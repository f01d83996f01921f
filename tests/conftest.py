"""
Pytest fixtures shared by the farescan tests.

Results pages are built from itinerary blocks shaped like the visible text of a real
search results page; no browser or network is involved.
"""

from datetime import date, datetime

import pandas as pd
import pytest

from farescan.models import Segment

RETRIEVED_AT = datetime(2026, 10, 1, 12, 0)


def _itinerary(
        dep: str = "10:05 AM",
        arr: str = "5:30 PM",
        airline: str | None = "Turkish Airlines",
        duration: str = "10 hr 25 min",
        route: str = "JFK–IST",
        stops: str = "Nonstop",
        layover: str | None = None,
        co2: str = "593 kg CO2e",
        emissions: str = "-12% emissions",
        price: str | None = "$1,250",
) -> list[str]:
    lines = [dep, "–", arr]
    if airline is not None:
        lines.append(airline)
    lines += [duration, route, stops]
    if layover is not None:
        lines.append(layover)
    lines += [co2, emissions]
    if price is not None:
        lines.append(price)
    return lines


@pytest.fixture
def segment() -> Segment:
    """JFK -> IST on 2026-12-01."""
    return Segment("JFK", "IST", date(2026, 12, 1))


@pytest.fixture
def retrieved_at() -> datetime:
    return RETRIEVED_AT


@pytest.fixture
def itinerary():
    """Factory for the raw lines of one itinerary block; keyword arguments override fields."""
    return _itinerary


@pytest.fixture
def page_text():
    """Factory for a raw results page: header, the given itinerary blocks, then padding."""

    def build(blocks: list[list[str]], padding: int = 0) -> str:
        lines = ["Google Flights", "Top departing flights", "Ranked based on price and convenience"]
        for block in blocks:
            lines.extend(block)
        lines.extend(f"Footer link {i}" for i in range(padding))
        return "\n".join(lines)

    return build


@pytest.fixture
def five_group_page(itinerary, page_text) -> str:
    """Five itineraries; the second one has no price."""
    blocks = [
        itinerary(dep="6:00 AM", arr="10:15 PM", price="$450"),
        itinerary(dep="7:30 AM", arr="11:00 PM", price=None),
        itinerary(dep="9:45 AM", arr="1:20 AM+1", airline="Lufthansa", stops="1 stop",
                  layover="1 hr 20 min FRA", price="$1,250"),
        itinerary(dep="1:00 PM", arr="6:30 AM+1", airline="Delta", price="$980"),
        itinerary(dep="11:55 PM", arr="5:10 PM+1", airline="KLM", price="$610"),
    ]
    return page_text(blocks)


@pytest.fixture
def flights_frame() -> pd.DataFrame:
    """Merged flight table for two entities over three dates, with placeholder rows."""
    return pd.DataFrame(
        {
            "entity": ["Berlin", "Berlin", "Berlin", "Munich", "Munich", "Munich", "Munich"],
            "airline": ["Lufthansa", "Eurowings", "Price graph", "Lufthansa", "Condor", "  ", "United"],
            "price": [300.0, 340.0, 50.0, 400.0, 420.0, 90.0, None],
            "departure_date": [
                date(2026, 12, 2),
                date(2026, 12, 2),
                date(2026, 12, 2),
                date(2026, 12, 2),
                date(2026, 12, 1),
                date(2026, 12, 1),
                date(2026, 12, 3),
            ],
        }
    )
