"""
Chart kind dispatch.

Builds a library-neutral chart spec (plain dict) from merged rows.
Every ChartKind must have a builder in ``_BUILDERS``; the module
refuses to import otherwise.
"""

from enum import Enum
from typing import Any, Callable, Dict, List, Sequence

from .. import config


class ChartKind(str, Enum):
    LINE = "line"
    BAR = "bar"
    AREA = "area"
    COMPOSED = "composed"
    PIE = "pie"

    @classmethod
    def parse(cls, value) -> "ChartKind":
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


def color_for(country: str, index: int) -> str:
    palette = list(config.SUPPORTED_COUNTRIES.values())
    return config.SUPPORTED_COUNTRIES.get(country, palette[index % len(palette)])


def _series(countries: Sequence[str], mark: str) -> List[Dict[str, Any]]:
    return [
        {"key": c, "mark": mark, "color": color_for(c, i)}
        for i, c in enumerate(countries)
    ]


def _cartesian(mark: str) -> Callable:
    def build(rows, countries):
        return {"x": "year", "data": list(rows), "series": _series(countries, mark)}
    return build


def _composed(rows, countries) -> Dict[str, Any]:
    # Bar and line drawn for the same key
    series = []
    for i, c in enumerate(countries):
        color = color_for(c, i)
        series.append({"key": c, "mark": "bar", "color": color})
        series.append({"key": c, "mark": "line", "color": color})
    return {"x": "year", "data": list(rows), "series": series}


def _pie(rows, countries) -> Dict[str, Any]:
    """One slice per country sized by its mean over the rows."""
    slices = []
    for i, c in enumerate(countries):
        values = [row[c] for row in rows if c in row]
        if not values:
            continue
        slices.append({
            "key": c,
            "value": round(sum(values) / len(values), 2),
            "color": color_for(c, i),
        })
    return {"data": slices}


_BUILDERS: Dict[ChartKind, Callable] = {
    ChartKind.LINE: _cartesian("line"),
    ChartKind.BAR: _cartesian("bar"),
    ChartKind.AREA: _cartesian("area"),
    ChartKind.COMPOSED: _composed,
    ChartKind.PIE: _pie,
}

_missing = set(ChartKind) - set(_BUILDERS)
if _missing:
    raise RuntimeError(f"No chart builder for: {sorted(k.value for k in _missing)}")


def build_chart_spec(
    kind: ChartKind,
    rows: Sequence[Dict[str, float]],
    countries: Sequence[str],
    title: str = "",
) -> Dict[str, Any]:
    """Chart spec for the renderer.

    Cartesian kinds return ``{"kind", "title", "x", "data", "series"}``;
    pie returns ``{"kind", "title", "data"}`` with one slice per country.
    """
    kind = ChartKind.parse(kind)
    spec = _BUILDERS[kind](rows, list(countries))
    return {"kind": kind.value, "title": title, **spec}
