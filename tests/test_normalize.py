"""Tests for page text normalization."""

from farescan.parsing.normalize import clean_line, content_line_count, normalize_text


class TestNormalizeText:
    """Raw visible-text dumps to clean lines."""

    def test_empty_input(self) -> None:
        assert normalize_text("") == []
        assert normalize_text(None) == []
        assert normalize_text([]) == []

    def test_non_ascii_and_whitespace_removed(self) -> None:
        assert normalize_text("  JFK\u2013IST \n\u202f9:00\u202fAM  ") == ["JFKIST", "9:00AM"]
        assert normalize_text(" 9:00 AM\t") == ["9:00 AM"]

    def test_blank_lines_kept_in_place(self) -> None:
        lines = normalize_text("9:00 AM\n\n   \n5:00 PM")

        assert lines == ["9:00 AM", "", "", "5:00 PM"]
        assert content_line_count(lines) == 2

    def test_accepts_chunks(self) -> None:
        assert normalize_text(["Delta\nNonstop", "$450"]) == ["Delta", "Nonstop", "$450"]

    def test_clean_line_drops_control_characters(self) -> None:
        assert clean_line("\x00$1,250\x07") == "$1,250"
