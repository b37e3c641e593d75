"""
World Bank Indicators API client.

Fetches one indicator series for one country from api.worldbank.org.
The API returns ``[metadata, data]``; ``data`` is null when the service
has nothing for the requested country/indicator/window.
"""

from typing import List, Optional, Tuple

import requests

from .. import config
from ..errors import FetchFailed, InvalidSelection
from ..models import IndicatorKind, IndicatorPoint
from .base_client import BaseClient


def validate_window(start_year: int, end_year: int) -> Tuple[int, int]:
    """Check ordering and clamp a year window to ``[MIN_YEAR, current year]``.

    Raises:
        InvalidSelection: If ``start_year > end_year``.
    """
    if start_year > end_year:
        raise InvalidSelection(
            f"start year {start_year} is after end year {end_year}"
        )
    upper = config.current_year()
    start = min(max(start_year, config.MIN_YEAR), upper)
    end = min(max(end_year, config.MIN_YEAR), upper)
    return start, end


def validate_country(country: str) -> str:
    """Return the normalized ISO3 code or raise InvalidSelection."""
    code = str(country).strip().upper()
    if code not in config.SUPPORTED_COUNTRIES:
        raise InvalidSelection(f"unsupported country code {country!r}")
    return code


class WorldBankClient(BaseClient):
    """Client for the World Bank Indicators API.

    Each ``fetch`` issues exactly one request; ``per_page`` is sized so
    the whole year window fits on the first page.

    Usage::

        client = WorldBankClient()
        points = client.fetch("BRA", "SE.XPD.TOTL.GB.ZS", 2010, 2020)
        for p in points:
            print(p.year, p.value)
    """

    source_name = "world_bank"
    base_url = config.BASE_URL

    MIN_PER_PAGE = 100

    def fetch(
        self,
        country: str,
        indicator_id: str,
        start_year: int,
        end_year: int,
    ) -> List[IndicatorPoint]:
        """Fetch a single indicator series.

        Args:
            country: ISO3 code from the supported set.
            indicator_id: World Bank indicator code.
            start_year: Start of date range (inclusive).
            end_year: End of date range (inclusive).

        Returns:
            IndicatorPoints in upstream order (usually newest first),
            all within the requested window. Empty when upstream has no data.

        Raises:
            InvalidSelection: Unknown country or inverted year range.
            FetchFailed: Network error, timeout, non-2xx status or bad JSON.
        """
        code = validate_country(country)
        start, end = validate_window(start_year, end_year)
        if (start, end) != (start_year, end_year):
            self._log.warning(
                "Year window %s-%s clamped to %s-%s", start_year, end_year, start, end
            )

        params = {
            "format": "json",
            "date": f"{start}:{end}",
            "per_page": max(self.MIN_PER_PAGE, end - start + 1),
        }
        path = f"/country/{code}/indicator/{indicator_id}"

        try:
            raw = self._get(path, params=params)
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else "?"
            raise FetchFailed(code, indicator_id, f"HTTP {status}") from exc
        except requests.RequestException as exc:
            raise FetchFailed(code, indicator_id, exc.__class__.__name__) from exc
        except ValueError as exc:
            raise FetchFailed(code, indicator_id, "invalid JSON") from exc

        records = self._unwrap(raw)
        if not records:
            self._log.debug("No data for %s/%s in %s-%s", code, indicator_id, start, end)
            return []

        points = self._parse_records(records)
        return [p for p in points if start <= p.year <= end]

    def fetch_kind(
        self,
        country: str,
        kind: IndicatorKind,
        start_year: int,
        end_year: int,
    ) -> List[IndicatorPoint]:
        """Fetch the series for one of the dashboard's indicator kinds."""
        return self.fetch(country, kind.indicator_id, start_year, end_year)

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _unwrap(raw) -> list:
        """Return the data array from a ``[metadata, data]`` envelope."""
        # Unknown country/indicator combinations come back as metadata only
        if not isinstance(raw, list) or len(raw) < 2:
            return []
        data = raw[1]
        return data if isinstance(data, list) else []

    def _parse_records(self, records: list) -> List[IndicatorPoint]:
        """Map World Bank JSON records to IndicatorPoints."""
        points = []
        for rec in records:
            if not isinstance(rec, dict):
                self._log.warning("Skipping non-object record: %r", rec)
                continue
            year = _parse_year(rec.get("date"))
            if year is None:
                self._log.warning("Skipping record with bad date: %r", rec.get("date"))
                continue
            points.append(IndicatorPoint(year=year, value=_parse_value(rec.get("value"))))
        return points


def _parse_year(raw) -> Optional[int]:
    try:
        return int(str(raw)[:4])
    except (TypeError, ValueError):
        return None


def _parse_value(raw) -> Optional[float]:
    if raw is None:
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None
