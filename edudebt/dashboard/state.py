"""
Dashboard selection state.

A frozen DashboardState holds what the user picked: countries, year
window, chart kind and which indicator is shown. ``normalize_state``
builds one from raw input; every change goes through ``with_changes``
and yields a new, validated state.
"""

from dataclasses import dataclass, replace
from typing import Iterable, Optional, Tuple

from .. import config
from ..errors import InvalidSelection
from ..extractors.world_bank import validate_window
from ..models import IndicatorKind
from ..pipeline.aggregator import normalize_countries
from .charts import ChartKind


@dataclass(frozen=True)
class DashboardState:
    countries: Tuple[str, ...] = config.DEFAULT_COUNTRIES
    start_year: int = config.DEFAULT_START_YEAR
    end_year: int = config.DEFAULT_END_YEAR
    chart_kind: ChartKind = ChartKind.LINE
    show_education: bool = True
    show_debt: bool = True
    dark_mode: bool = False

    @property
    def selection(self) -> Tuple[Tuple[str, ...], int, int]:
        """The part of the state that drives a refetch."""
        return (self.countries, self.start_year, self.end_year)


def _as_int(value, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidSelection(f"year must be an integer, got {value!r}")


def _as_countries(values: Optional[Iterable[object]]) -> Tuple[str, ...]:
    if values is None:
        return config.DEFAULT_COUNTRIES
    if isinstance(values, str):
        values = [v for v in values.split(",") if v.strip()]
    return tuple(normalize_countries(str(v) for v in values))


def normalize_state(raw: dict) -> DashboardState:
    """Build a DashboardState from a raw UI payload.

    Unsupported countries and inverted year ranges raise InvalidSelection;
    years outside the data source's range are clamped.
    """
    countries = _as_countries(raw.get("countries"))
    start = _as_int(raw.get("start_year"), config.DEFAULT_START_YEAR)
    end = _as_int(raw.get("end_year"), config.DEFAULT_END_YEAR)
    start, end = validate_window(start, end)

    try:
        chart_kind = ChartKind.parse(raw.get("chart_kind", ChartKind.LINE))
    except ValueError:
        raise InvalidSelection(f"unknown chart kind {raw.get('chart_kind')!r}")

    return DashboardState(
        countries=countries,
        start_year=start,
        end_year=end,
        chart_kind=chart_kind,
        show_education=bool(raw.get("show_education", True)),
        show_debt=bool(raw.get("show_debt", True)),
        dark_mode=bool(raw.get("dark_mode", False)),
    )


def with_changes(state: DashboardState, **changes) -> DashboardState:
    """Return a new, normalized state with ``changes`` applied."""
    updated = replace(state, **changes)
    return normalize_state({
        "countries": updated.countries,
        "start_year": updated.start_year,
        "end_year": updated.end_year,
        "chart_kind": updated.chart_kind,
        "show_education": updated.show_education,
        "show_debt": updated.show_debt,
        "dark_mode": updated.dark_mode,
    })


def active_kind(state: DashboardState) -> IndicatorKind:
    """Indicator shown by the single main chart: education unless hidden."""
    if state.show_education or not state.show_debt:
        return IndicatorKind.EDUCATION
    return IndicatorKind.DEBT
