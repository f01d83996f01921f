from datetime import datetime
from pathlib import Path

import pandas as pd
from bs4 import BeautifulSoup
from jinja2 import Environment, FileSystemLoader, select_autoescape

from .merge import FlightResults

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / 'templates'


def pretty_format_html(html: str) -> str:
    """Return a pretty-formatted HTML string using BeautifulSoup with the 'lxml' parser."""
    if not html:
        return html
    return BeautifulSoup(html, 'lxml').prettify()


def _cell(value) -> str:
    if isinstance(value, list):
        return ', '.join(f"{v:,.0f}" for v in value)
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return '-'
    if isinstance(value, float):
        return f"{value:,.0f}" if value.is_integer() else f"{value:,.2f}"
    return str(value)


def _table(df: pd.DataFrame) -> dict:
    return {
        'columns': [str(c) for c in df.columns],
        'rows': [[_cell(v) for v in row] for row in df.itertuples(index=False, name=None)],
    }


def render_report(
        price_table: pd.DataFrame,
        best_dates: pd.DataFrame,
        results: FlightResults | None = None,
        title: str = 'Flight price report',
) -> str:
    """Render the wide price table and the best-dates ranking to a standalone HTML page."""
    env = Environment(loader=FileSystemLoader(str(TEMPLATES_DIR)), autoescape=select_autoescape(['html', 'xml']))
    tpl = env.get_template('price_report.html.j2')
    rendered = tpl.render(
        title=title,
        generated_at=datetime.now().strftime("%d.%m.%Y %H:%M"),
        price_table=_table(price_table),
        best_dates=_table(best_dates),
        flights=len(results.data) if results is not None else None,
        skipped=results.skipped_count if results is not None else None,
        failed=results.failed_segments if results is not None else None,
    )
    return pretty_format_html(rendered)
