"""Aggregation of the merged flight table: placeholder filtering, wide price table, best dates.

Every function takes the flat table produced by merge.py (or any frame with ``price``,
``airline``, ``departure_date`` and an entity column) and filters placeholder rows itself,
so callers never aggregate over "Price graph" or price-less rows by accident.
"""
import logging
import warnings
from typing import Literal

import pandas as pd

from ..errors import AggregationInputEmpty

PLACEHOLDER_PHRASES = ('price graph', 'price unavailable')
DATE_COLUMN = 'departure_date'
AVERAGE_COLUMN = 'Average'
COMMENT_COLUMN = 'comment'
BEST_DATE_COLUMNS = ['Date', 'Price', 'N_Routes']
BEST_DATE_STATS = ('mean', 'median', 'min')
REDUCERS = ('min', 'offers')


# ---------------- filtering -----------------
def filter_placeholder_rows(df: pd.DataFrame) -> pd.DataFrame:
    """Drop rows that are not real offers: placeholder or blank airline label, or no price.

    Matching is case-insensitive. Applying the filter twice gives the same frame. A frame
    without an ``airline`` column, or with no rows, is returned unchanged; the price check
    only applies when there is a ``price`` column.
    """
    if df.empty or 'airline' not in df.columns:
        return df
    airline = df['airline'].astype('string').str.strip()
    lowered = airline.str.lower()
    placeholder = pd.Series(False, index=df.index)
    for phrase in PLACEHOLDER_PHRASES:
        placeholder |= lowered.str.contains(phrase, regex=False).fillna(False).astype(bool)
    keep = airline.notna() & (airline.fillna('') != '') & ~placeholder
    if 'price' in df.columns:
        keep &= df['price'].notna()
    return df[keep.astype(bool)].reset_index(drop=True)


def _prepare(df: pd.DataFrame, key: str) -> pd.DataFrame | None:
    if key not in df.columns:
        raise KeyError(f"Entity column {key!r} not in flight table (columns: {', '.join(map(str, df.columns))})")
    data = filter_placeholder_rows(df)
    if data.empty:
        warnings.warn('No flight offers left after filtering placeholder rows', AggregationInputEmpty, stacklevel=3)
        return None
    if DATE_COLUMN not in data.columns:
        data = data.assign(**{DATE_COLUMN: pd.to_datetime(data['departure_time']).dt.date})
    data[DATE_COLUMN] = data[DATE_COLUMN].map(str)
    data['price'] = data['price'].astype(float)
    return data


# ---------------- wide price table -----------------
def _join_comments(values: pd.Series) -> str | None:
    distinct = dict.fromkeys(str(v).strip() for v in values.dropna() if str(v).strip())
    return '; '.join(distinct) or None


def _format_price(value, symbol: str, decimals: int):
    if isinstance(value, list):
        return ', '.join(_format_price(v, symbol, decimals) for v in value)
    if pd.isna(value):
        return None
    return f"{symbol}{value:,.{decimals}f}"


def summarize_prices(
        df: pd.DataFrame,
        key: str = 'entity',
        reducer: Literal['min', 'offers'] = 'min',
        round_prices: bool = True,
        currency_symbol: str | None = None,
        include_comment: bool = True,
) -> pd.DataFrame:
    """Wide table: one row per entity, one column per date (chronological), then ``Average``.

    With ``reducer='min'`` each cell holds the cheapest offer of that day; with ``'offers'`` it
    holds every offer price, cheapest first. ``Average`` is always the mean of the populated
    daily minima, so a row with a single populated date averages to that date's price.
    Entities without offers are left out. With ``include_comment`` and a ``comment`` column in
    the input, each entity's distinct comments are joined into a ``comment`` column after the key.
    """
    if reducer not in REDUCERS:
        raise ValueError(f"reducer must be one of {REDUCERS}, got {reducer!r}")
    data = _prepare(df, key)
    if data is None:
        return pd.DataFrame(columns=[key, AVERAGE_COLUMN])
    if round_prices:
        data['price'] = data['price'].round()

    cheapest = data.pivot_table(index=key, columns=DATE_COLUMN, values='price', aggfunc='min', sort=True)
    cheapest = cheapest.reindex(columns=sorted(cheapest.columns))
    average = cheapest.mean(axis=1, skipna=True)
    if round_prices:
        average = average.round()

    if reducer == 'offers':
        offers = data.sort_values('price', kind='mergesort').groupby([key, DATE_COLUMN])['price'].agg(list)
        table = offers.unstack(DATE_COLUMN).reindex(index=cheapest.index, columns=cheapest.columns)
    else:
        table = cheapest.copy()
    table[AVERAGE_COLUMN] = average
    table = table.reset_index()
    table.columns.name = None
    label_columns = [key]
    if include_comment and COMMENT_COLUMN in data.columns and data[COMMENT_COLUMN].notna().any():
        comments = data.groupby(key)[COMMENT_COLUMN].agg(_join_comments)
        table.insert(1, COMMENT_COLUMN, table[key].map(comments))
        label_columns.append(COMMENT_COLUMN)

    if currency_symbol is not None:
        decimals = 0 if round_prices else 2
        price_columns = [c for c in table.columns if c not in label_columns]
        table[price_columns] = table[price_columns].map(lambda v: _format_price(v, currency_symbol, decimals))
    logging.info('Price table: %d entities x %d dates', len(table), len(table.columns) - len(label_columns) - 1)
    return table


# ---------------- best dates -----------------
def find_best_dates(
        df: pd.DataFrame,
        n: int = 10,
        by: Literal['mean', 'median', 'min'] = 'min',
        key: str = 'entity',
) -> pd.DataFrame:
    """Rank departure dates by the chosen price statistic over all offers of that date.

    ``N_Routes`` is the number of distinct entities with at least one offer on the date.
    Ties on price go to the earlier date. ``n`` larger than the number of dates returns them all.
    """
    if by not in BEST_DATE_STATS:
        raise ValueError(f"by must be one of {BEST_DATE_STATS}, got {by!r}")
    if n < 0:
        raise ValueError(f"n must not be negative, got {n}")
    data = _prepare(df, key)
    if data is None:
        return pd.DataFrame(columns=BEST_DATE_COLUMNS)

    grouped = data.groupby(DATE_COLUMN)
    best = pd.DataFrame({
        'Price': grouped['price'].agg(by),
        'N_Routes': grouped[key].nunique(),
    }).rename_axis('Date').reset_index()
    best = best.sort_values(['Price', 'Date'], kind='mergesort').head(n).reset_index(drop=True)
    return best[BEST_DATE_COLUMNS]


def cheapest_per_day(df: pd.DataFrame, key: str = 'entity', keep_offers: bool = False) -> pd.DataFrame:
    """Flat table of the cheapest offer per entity and day (or all offers, cheapest first)."""
    data = _prepare(df, key)
    if data is None:
        return df.iloc[0:0].copy()
    ordered = data.sort_values([key, DATE_COLUMN, 'price'], kind='mergesort')
    if not keep_offers:
        ordered = ordered.drop_duplicates([key, DATE_COLUMN], keep='first')
    return ordered.reset_index(drop=True)
