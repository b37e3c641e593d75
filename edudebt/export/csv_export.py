"""
CSV export of combined education/debt rows.

Header: ``Year``, then one education column per country, then one debt
column per country, in selection order. Absent values are empty cells.
"""

from typing import Dict, List, Optional, Sequence

import pandas as pd

from ..config import BILLION
from ..models import IndicatorKind
from ..transformers.merger import column_key, scale_rows


def export_columns(countries: Sequence[str], debt_scale: Optional[float] = BILLION) -> Dict[str, str]:
    """Map row keys to CSV header labels."""
    debt_unit = "USD bn" if debt_scale == BILLION else "USD"
    columns = {"year": "Year"}
    for c in countries:
        columns[column_key(c, IndicatorKind.EDUCATION)] = f"{c} Education (% of govt expenditure)"
    for c in countries:
        columns[column_key(c, IndicatorKind.DEBT)] = f"{c} Debt ({debt_unit})"
    return columns


def to_csv(
    combined_rows: Sequence[Dict[str, float]],
    countries: Sequence[str],
    debt_scale: Optional[float] = BILLION,
) -> str:
    """Serialize raw combined rows to CSV text.

    Args:
        combined_rows: Output of ``merge_indicators`` with raw USD debt.
        countries: Countries to export, in column order.
        debt_scale: Divisor for debt columns; None keeps raw USD.
    """
    countries = list(dict.fromkeys(countries))
    columns = export_columns(countries, debt_scale)

    rows: List[Dict[str, float]] = list(combined_rows)
    if debt_scale:
        debt_keys = [column_key(c, IndicatorKind.DEBT) for c in countries]
        rows = scale_rows(rows, debt_keys, debt_scale)

    df = pd.DataFrame(rows, columns=list(columns))
    df["year"] = df["year"].astype("Int64")
    df = df.rename(columns=columns)
    return df.to_csv(index=False, lineterminator="\n")


def export_filename(state) -> str:
    """Download name for a dashboard state, e.g. ``edu_debt_2010_2020.csv``."""
    return f"edu_debt_{state.start_year}_{state.end_year}.csv"
