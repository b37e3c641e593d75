"""
Domain types shared by the fetcher, aggregator, merger and summaries.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from .config import DEBT_INDICATOR, EDUCATION_INDICATOR, NO_DATA


class IndicatorKind(str, Enum):
    """The two indicators the dashboard charts."""

    EDUCATION = "education"
    DEBT = "debt"

    @property
    def indicator_id(self) -> str:
        return _INDICATOR_IDS[self]

    @property
    def label(self) -> str:
        return _LABELS[self]


_INDICATOR_IDS = {
    IndicatorKind.EDUCATION: EDUCATION_INDICATOR,
    IndicatorKind.DEBT: DEBT_INDICATOR,
}

_LABELS = {
    IndicatorKind.EDUCATION: "Education",
    IndicatorKind.DEBT: "Debt",
}


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class IndicatorPoint:
    """One year of one indicator. ``value`` is None when upstream had no data."""

    year: int
    value: Optional[float] = None

    @property
    def present(self) -> bool:
        return self.value is not None and not math.isnan(self.value)


@dataclass(frozen=True)
class CountrySeries:
    """Both indicator series for one country, from a single fetch cycle."""

    country: str
    education_series: Tuple[IndicatorPoint, ...] = ()
    debt_series: Tuple[IndicatorPoint, ...] = ()

    def series(self, kind: IndicatorKind) -> Tuple[IndicatorPoint, ...]:
        if kind is IndicatorKind.EDUCATION:
            return self.education_series
        return self.debt_series

    @property
    def is_empty(self) -> bool:
        return not any(p.present for p in self.education_series + self.debt_series)


@dataclass(frozen=True)
class SummaryStat:
    """Average and coarse trend for one country and indicator."""

    country: str
    indicator_kind: IndicatorKind
    average: Union[float, str]
    trend: Trend

    @property
    def has_data(self) -> bool:
        return self.average != NO_DATA

    def to_dict(self) -> Dict[str, Any]:
        return {
            "country": self.country,
            "indicator": self.indicator_kind.value,
            "average": self.average,
            "trend": self.trend.value,
        }
