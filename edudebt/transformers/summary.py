"""
Per-country summary statistics for the dashboard callouts.

The trend is a two-point comparison of the chronologically first and
last recorded values. It is deliberately not a regression.
"""

from typing import Iterable, List, Mapping, Sequence

from ..config import BILLION, NO_DATA
from ..models import CountrySeries, IndicatorKind, IndicatorPoint, SummaryStat, Trend


def summarize(
    series: Iterable[IndicatorPoint],
    country: str,
    kind: IndicatorKind = IndicatorKind.EDUCATION,
) -> SummaryStat:
    """Average (2 decimals) and trend of one series.

    Absent values are skipped, not counted as zero. With no values the
    average is the ``NO_DATA`` sentinel; with fewer than two values the
    trend is NEUTRAL.
    """
    present = sorted((p for p in series if p.present), key=lambda p: p.year)
    values = [p.value for p in present]

    if not values:
        return SummaryStat(country, kind, NO_DATA, Trend.NEUTRAL)

    average = round(sum(values) / len(values), 2)
    return SummaryStat(country, kind, average, _trend(values))


def _trend(values: Sequence[float]) -> Trend:
    if len(values) < 2:
        return Trend.NEUTRAL
    first, last = values[0], values[-1]
    if last > first:
        return Trend.UP
    if last < first:
        return Trend.DOWN
    return Trend.NEUTRAL


def summarize_all(
    series_by_country: Mapping[str, CountrySeries],
    selected_countries: Sequence[str],
) -> List[SummaryStat]:
    """Stats for every selected country, education first then debt."""
    stats = []
    for country in dict.fromkeys(selected_countries):
        cs = series_by_country.get(country) or CountrySeries(country=country)
        for kind in IndicatorKind:
            stats.append(summarize(cs.series(kind), country, kind))
    return stats


def format_average(stat: SummaryStat) -> str:
    """Display string: ``5.67%`` for education, ``$12.35B`` for debt."""
    if not stat.has_data:
        return "N/A"
    if stat.indicator_kind is IndicatorKind.DEBT:
        return f"${stat.average / BILLION:,.2f}B"
    return f"{stat.average:.2f}%"
