"""
Checks for merged chart rows.

Every rule looks at the year-keyed frame built from combined rows
(``year`` plus one ``{country}_{indicator}`` column per series) and
reports the years of the rows it rejects.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd

from ..models import IndicatorKind
from ..transformers.merger import column_key


@dataclass
class RuleResult:
    """Outcome of one rule over the merged rows."""
    rule_name: str
    passed: bool
    column: Optional[str] = None
    years: List[int] = field(default_factory=list)
    details: Dict[str, Any] = field(default_factory=dict)

    def describe(self) -> str:
        """One-line description of a failure."""
        where = f" in {self.column}" if self.column else ""
        if self.years:
            listed = ", ".join(str(y) for y in self.years)
            return f"{self.rule_name}{where}: {len(self.years)} row(s) rejected ({listed})"
        reason = self.details.get('error', 'rejected')
        return f"{self.rule_name}{where}: {reason}"


def _years(df: pd.DataFrame, mask: pd.Series) -> List[int]:
    return [int(y) for y in df.loc[mask, 'year'].tolist()]


class Rule(ABC):
    """A single check over the merged-row frame."""

    name = 'rule'
    column: Optional[str] = None

    @abstractmethod
    def rejected(self, df: pd.DataFrame) -> pd.Series:
        """Boolean mask of the rows this rule rejects."""
        ...

    def evaluate(self, df: pd.DataFrame) -> RuleResult:
        if df.empty:
            return RuleResult(self.name, True, self.column)
        if 'year' not in df.columns:
            return RuleResult(
                self.name, False, self.column,
                details={'error': "rows carry no 'year' key"},
            )
        years = _years(df, self.rejected(df))
        return RuleResult(self.name, not years, self.column, years=years)


class UniqueYearsRule(Rule):
    """Each year appears in exactly one row."""

    name = 'unique_years'

    def rejected(self, df: pd.DataFrame) -> pd.Series:
        return df.duplicated(subset=['year'], keep='first')


class AscendingYearsRule(Rule):
    """Years strictly increase from row to row."""

    name = 'ascending_years'

    def rejected(self, df: pd.DataFrame) -> pd.Series:
        return df['year'].diff() <= 0


class YearWindowRule(Rule):
    """Every row's year lies within the selected window."""

    name = 'year_window'

    def __init__(self, start_year: int, end_year: int):
        self.start_year = start_year
        self.end_year = end_year

    def rejected(self, df: pd.DataFrame) -> pd.Series:
        return ~df['year'].between(self.start_year, self.end_year)


class ValueRangeRule(Rule):
    """
    A country's indicator values fall within ``[min_val, max_val]``.

    The column is ``{country}_{kind}``. A country with no data for the
    indicator contributes no column, which is not a failure.

    Args:
        country: ISO3 code.
        kind: Indicator whose column is checked.
        min_val: Inclusive lower bound, None for unbounded.
        max_val: Inclusive upper bound, None for unbounded.
    """

    def __init__(
        self,
        country: str,
        kind: IndicatorKind,
        min_val: Optional[float] = None,
        max_val: Optional[float] = None,
    ):
        self.column = column_key(country, kind)
        self.name = f"{kind.value}_range"
        self.min_val = min_val
        self.max_val = max_val

    def rejected(self, df: pd.DataFrame) -> pd.Series:
        if self.column not in df.columns:
            return pd.Series(False, index=df.index)
        values = pd.to_numeric(df[self.column], errors='coerce')
        mask = pd.Series(False, index=df.index)
        if self.min_val is not None:
            mask |= values < self.min_val
        if self.max_val is not None:
            mask |= values > self.max_val
        return mask


class NonEmptyRowsRule(Rule):
    """Every row has at least one indicator value besides its year."""

    name = 'non_empty_rows'

    def rejected(self, df: pd.DataFrame) -> pd.Series:
        values = df.drop(columns=['year'])
        if values.columns.empty:
            return pd.Series(True, index=df.index)
        return values.isna().all(axis=1)
