"""
Series merger and unit normalization.

Turns per-country indicator series into chart rows keyed by year:
one row per year, one key per country (or per country and indicator),
ascending by year. A key is present only when upstream had a value.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from ..config import BILLION
from ..models import CountrySeries, IndicatorKind, IndicatorPoint

logger = logging.getLogger(__name__)

MergedRow = Dict[str, float]


def series_frame(series: Iterable[IndicatorPoint]) -> pd.DataFrame:
    """Series as a ``year``/``value`` DataFrame, absent values dropped, ascending."""
    df = pd.DataFrame(
        [(p.year, p.value) for p in series],
        columns=["year", "value"],
    )
    df["year"] = df["year"].astype(int)
    df["value"] = pd.to_numeric(df["value"], errors="coerce")
    df = df.dropna(subset=["value"])
    return df.sort_values("year", kind="mergesort").reset_index(drop=True)


def column_key(country: str, kind: IndicatorKind) -> str:
    """Row key used by the combined (country + indicator) variant."""
    return f"{country}_{kind.value}"


def _wide_frame(columns: Dict[str, pd.DataFrame]) -> pd.DataFrame:
    """Outer-join ``year``/``value`` frames into one column per key."""
    parts = []
    for key, df in columns.items():
        # A year reported twice keeps its last value
        s = df.drop_duplicates("year", keep="last").set_index("year")["value"]
        parts.append(s.rename(key))
    if not parts:
        return pd.DataFrame()
    wide = pd.concat(parts, axis=1, join="outer").sort_index()
    return wide.dropna(how="all")


def _to_rows(wide: pd.DataFrame, keys: Sequence[str]) -> List[MergedRow]:
    rows: List[MergedRow] = []
    for year, values in wide.iterrows():
        row: MergedRow = {"year": int(year)}
        for key in keys:
            value = values.get(key)
            if value is not None and not pd.isna(value):
                row[key] = float(value)
        rows.append(row)
    return rows


def merge(
    series_by_country: Mapping[str, CountrySeries],
    selected_countries: Sequence[str],
    kind: IndicatorKind = IndicatorKind.EDUCATION,
) -> List[MergedRow]:
    """Merge one indicator across countries into rows keyed by year.

    Args:
        series_by_country: Aggregator output.
        selected_countries: Countries to include; also fixes key order.
        kind: Which indicator to merge.

    Returns:
        Rows like ``{"year": 2011, "USA": 6.0, "BRA": 4.0}``, strictly
        ascending by year. Countries with no data add no keys.
    """
    countries = list(dict.fromkeys(selected_countries))
    columns = {}
    for country in countries:
        cs = series_by_country.get(country)
        if cs is None:
            logger.debug("No series for selected country %s", country)
            continue
        columns[country] = series_frame(cs.series(kind))
    return _to_rows(_wide_frame(columns), countries)


def merge_indicators(
    series_by_country: Mapping[str, CountrySeries],
    selected_countries: Sequence[str],
    debt_scale: Optional[float] = None,
) -> List[MergedRow]:
    """Merge both indicators into rows with ``<country>_<indicator>`` keys.

    Args:
        series_by_country: Aggregator output.
        selected_countries: Countries to include, in display order.
        debt_scale: When set (e.g. ``BILLION``), debt keys are divided by it
            via ``to_billions``/``scale_rows``. Raw USD otherwise.
    """
    countries = list(dict.fromkeys(selected_countries))
    keys = [column_key(c, kind) for kind in IndicatorKind for c in countries]

    columns = {}
    for country in countries:
        cs = series_by_country.get(country)
        if cs is None:
            continue
        for kind in IndicatorKind:
            columns[column_key(country, kind)] = series_frame(cs.series(kind))

    rows = _to_rows(_wide_frame(columns), keys)
    if debt_scale:
        debt_keys = [column_key(c, IndicatorKind.DEBT) for c in countries]
        rows = scale_rows(rows, debt_keys, debt_scale)
    return rows


def scale_rows(rows: Iterable[MergedRow], keys: Iterable[str], divisor: float) -> List[MergedRow]:
    """Return new rows with ``keys`` divided by ``divisor``; input untouched."""
    if not divisor:
        raise ValueError("divisor must be non-zero")
    keys = set(keys)
    return [
        {k: (v / divisor if k in keys else v) for k, v in row.items()}
        for row in rows
    ]


def to_billions(rows: Iterable[MergedRow], keys: Iterable[str]) -> List[MergedRow]:
    """Convert USD values under ``keys`` to billions of USD."""
    return scale_rows(rows, keys, BILLION)


def rows_frame(rows: Sequence[MergedRow]) -> pd.DataFrame:
    """Merged rows as a DataFrame (absent keys become NaN)."""
    if not rows:
        return pd.DataFrame(columns=["year"])
    return pd.DataFrame(list(rows))
