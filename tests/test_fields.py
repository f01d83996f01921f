"""Tests for single-line field extractors and time markers."""

from datetime import time

import pytest

from farescan.parsing import fields
from farescan.parsing.markers import AlternatingMarkers, is_time_marker, marker_indices, split_groups


class TestTimeMarkers:
    """Clock-time lines that delimit itineraries."""

    @pytest.mark.parametrize("line", ["9:00AM", "5:00 pm", "10:15 AM+1", "23:40+1"])
    def test_markers(self, line: str) -> None:
        assert is_time_marker(line)

    @pytest.mark.parametrize("line", ["AM", "", "9:00", "Nonstop", "10 hr 25 min"])
    def test_not_markers(self, line: str) -> None:
        assert not is_time_marker(line)

    def test_alternating_markers_keep_every_other(self) -> None:
        lines = ["header", "9:00 AM", "1:00 PM", "x", "2:00 PM", "6:00 PM", "y"]

        assert marker_indices(lines) == [1, 2, 4, 5]
        assert AlternatingMarkers().boundaries(lines) == [1, 4]

    def test_split_groups_tail(self) -> None:
        lines = ["a"] * 10

        assert split_groups(lines, [1, 4, 7]) == [(1, 4), (4, 7)]
        assert split_groups(lines, [1, 4, 7], include_tail=True) == [(1, 4), (4, 7), (7, 10)]
        assert split_groups(lines, []) == []


class TestFieldExtractors:
    """Price, stops, duration, emissions and route."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [("$1,250", 1250.0), ("$450", 450.0), ("USD 99.50", 99.5), ("450", 450.0), ("€80", 80.0)],
    )
    def test_price(self, text: str, expected: float) -> None:
        assert fields.parse_price(text) == expected

    @pytest.mark.parametrize("text", ["Price graph", "$", "1 stop", "12% emissions"])
    def test_not_price(self, text: str) -> None:
        assert fields.parse_price(text) is None

    def test_currency_marker(self) -> None:
        assert fields.has_currency_marker("$450")
        assert not fields.has_currency_marker("450")

    @pytest.mark.parametrize(
        ("text", "expected"),
        [("Nonstop", 0), ("Direct", 0), ("1 stop", 1), ("2 stops", 2), ("Delta", None)],
    )
    def test_stops(self, text: str, expected: int | None) -> None:
        assert fields.parse_stops(text) == expected

    @pytest.mark.parametrize(
        ("text", "expected"),
        [("8 hr 0 min", 480), ("3 hr 45 min", 225), ("8 hr", 480), ("50 min", 50), ("Nonstop", None)],
    )
    def test_duration(self, text: str, expected: int | None) -> None:
        assert fields.parse_duration_minutes(text) == expected

    def test_emissions(self) -> None:
        assert fields.parse_co2_kg("1,093 kg CO2e") == 1093
        assert fields.parse_emission_diff("-12% emissions") == -12
        assert fields.parse_emission_diff("+18% emissions") == 18
        assert fields.parse_emission_diff("Avg emissions") == 0

    def test_route_and_layover(self) -> None:
        assert fields.parse_route("JFKIST") == ("JFK", "IST")
        assert fields.parse_route("Delta") is None
        assert fields.is_layover("1 hr 20 min FRA")
        assert fields.is_layover("IST, FRA")
        assert not fields.is_layover("10 hr 25 min")

    def test_clock_times(self) -> None:
        assert fields.parse_clock_times("12:05 AM") == [(time(0, 5), 0)]
        assert fields.parse_clock_times("1:20 AM+1") == [(time(1, 20), 1)]
        assert fields.parse_clock_times("23:40+1") == [(time(23, 40), 1)]
        assert fields.parse_clock_times("13:00 PM") == []

    def test_noise_and_airline(self) -> None:
        assert fields.is_noise("Separate tickets booked together")
        assert fields.clean_airline("Delta, KLMOperated by Air France") == "Delta, KLM"
