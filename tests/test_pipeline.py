"""Tests for the report renderer and the command line pipeline."""

import json
import pickle
from datetime import date
from pathlib import Path

import dacite
import pandas as pd
import pytest

from farescan import pipeline
from farescan.config import settings
from farescan.models import RouteDescriptor
from farescan.processing.merge import FlightResults
from farescan.processing.report import render_report


@pytest.fixture
def results() -> FlightResults:
    data = pd.DataFrame(
        {
            "entity": ["Berlin", "Berlin", "Munich"],
            "airline": ["Lufthansa", "Price graph", "Condor"],
            "price": [300.0, 20.0, 420.0],
            "departure_date": [date(2026, 12, 2), date(2026, 12, 2), date(2026, 12, 1)],
        }
    )
    return FlightResults(data=data, queries=[], skipped_count=2)


@pytest.fixture
def outputs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setattr(settings, "data_pickle", tmp_path / "results.pkl")
    monkeypatch.setattr(settings, "output_csv", tmp_path / "flights.csv")
    monkeypatch.setattr(settings, "output_html", tmp_path / "report.html")
    return tmp_path


class TestReport:
    """HTML rendering of the aggregate tables."""

    def test_tables_rendered(self) -> None:
        price_table = pd.DataFrame({"entity": ["Berlin"], "2026-12-02": [300.0], "Average": [300.0]})
        best = pd.DataFrame({"Date": ["2026-12-02"], "Price": [300.0], "N_Routes": [1]})

        html = render_report(price_table, best, title="December fares")

        assert "December fares" in html
        assert "Berlin" in html
        assert "2026-12-02" in html
        assert "No flight offers found." not in html

    def test_empty_tables(self) -> None:
        html = render_report(pd.DataFrame(columns=["entity", "Average"]), pd.DataFrame(columns=["Date"]))

        assert html.count("No flight offers found.") == 2


class TestRoutes:
    """Route descriptor files."""

    def test_load_routes(self, tmp_path: Path) -> None:
        path = tmp_path / "routes.json"
        path.write_text(json.dumps([
            {"city": "Berlin", "airport": "BER", "dest": "JFK"},
            {"city": "Munich", "airport": "MUC", "dest": "JFK", "comment": "hub"},
        ]), encoding="utf-8")

        routes = pipeline.load_routes(path)

        assert routes == [
            RouteDescriptor("Berlin", "BER", "JFK"),
            RouteDescriptor("Munich", "MUC", "JFK", comment="hub"),
        ]

    def test_unknown_keys_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "routes.json"
        path.write_text(json.dumps([{"city": "Berlin", "airport": "BER", "dest": "JFK", "price": 1}]))

        with pytest.raises(dacite.UnexpectedDataError):
            pipeline.load_routes(path)

    def test_build_queries_from_routes(self, tmp_path: Path) -> None:
        path = tmp_path / "routes.json"
        path.write_text(json.dumps([{"city": "Berlin", "airport": "BER", "dest": "JFK"}]))

        (query,) = pipeline.build_queries("2026-12-01", "2026-12-03", routes_file=path)

        assert query.entity == "Berlin"
        assert len(query.segments) == 3

    def test_build_queries_needs_routes_or_origins(self) -> None:
        with pytest.raises(ValueError):
            pipeline.build_queries("2026-12-01", "2026-12-03")


class TestRunPipeline:
    """End to end from pickled results."""

    def test_outputs_written(self, results: FlightResults, outputs: Path) -> None:
        with open(settings.data_pickle, "wb") as f:
            pickle.dump(results, f)

        html_path = pipeline.run_pipeline(by="mean", top=5)

        assert html_path == settings.output_html
        assert "Munich" in html_path.read_text(encoding="utf-8")
        flat = pd.read_csv(settings.output_csv)
        assert len(flat) == 2
        assert "Price graph" not in set(flat["airline"])

    def test_email_sent_with_csv(self, results: FlightResults, outputs: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        sent = []
        monkeypatch.setattr(pipeline, "send_report", lambda **kwargs: sent.append(kwargs))
        with open(settings.data_pickle, "wb") as f:
            pickle.dump(results, f)

        pipeline.run_pipeline(email=True)

        assert sent[0]["attachments"] == [settings.output_csv]

    def test_missing_pickle(self, outputs: Path) -> None:
        with pytest.raises(FileNotFoundError, match="--scrape"):
            pipeline.run_pipeline()

    def test_cli_reports_failure(self, outputs: Path) -> None:
        assert pipeline.main_cli(["--log-level", "WARNING"]) == 1

    def test_cli_scrape_needs_dates(self, outputs: Path) -> None:
        with pytest.raises(SystemExit):
            pipeline.main_cli(["--scrape", "--origin", "JFK", "--dest", "IST"])
