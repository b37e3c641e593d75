"""
Multi-country aggregator.

Fans the indicator fetcher out across the selected countries and both
indicator kinds, runs every request concurrently, and joins the results
into one CountrySeries per country.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, Iterable, List, Optional, Tuple

from .. import config
from ..extractors.world_bank import WorldBankClient, validate_country, validate_window
from ..models import CountrySeries, IndicatorKind, IndicatorPoint


def normalize_countries(countries: Iterable[str]) -> List[str]:
    """Validate codes and drop duplicates, keeping first-seen order."""
    seen: List[str] = []
    for country in countries:
        code = validate_country(country)
        if code not in seen:
            seen.append(code)
    return seen


class MultiCountryAggregator:
    """Fetch education and debt series for many countries at once.

    All ``2 x len(countries)`` requests run in parallel. The join is
    all-or-nothing: if any request fails, the first failure to complete is
    raised and no partial mapping is returned.

    Usage::

        agg = MultiCountryAggregator(WorldBankClient())
        series = agg.aggregate(["USA", "BRA"], 2010, 2020)
        print(series["BRA"].education_series)
    """

    KINDS = (IndicatorKind.EDUCATION, IndicatorKind.DEBT)

    def __init__(self, client: Optional[WorldBankClient] = None, max_workers: Optional[int] = None):
        self.client = client or WorldBankClient()
        self.max_workers = max_workers or config.MAX_WORKERS
        self.logger = logging.getLogger(self.__class__.__name__)

    def aggregate(
        self,
        countries: Iterable[str],
        start_year: int,
        end_year: int,
        stats: Optional[Dict[str, int]] = None,
    ) -> Dict[str, CountrySeries]:
        """Fetch both indicators for every country concurrently.

        Args:
            countries: ISO3 codes from the supported set.
            start_year: Start of date range.
            end_year: End of date range.
            stats: Optional dict filled with this call's ``api_calls`` and
                ``errors``, also when the aggregation fails.

        Returns:
            Dict mapping country code to its CountrySeries.

        Raises:
            InvalidSelection: Before any request, for a bad selection.
            FetchFailed: If any single request fails.
        """
        if stats is not None:
            stats.update(api_calls=0, errors=0)

        codes = normalize_countries(countries)
        start, end = validate_window(start_year, end_year)
        if not codes:
            return {}

        tasks = [(code, kind) for code in codes for kind in self.KINDS]
        workers = max(1, min(len(tasks), self.max_workers))
        self.logger.debug("Fetching %d series with %d workers", len(tasks), workers)

        slots: Dict[Tuple[str, IndicatorKind], List[IndicatorPoint]] = {}
        pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="wb-fetch")
        futures = {
            pool.submit(self.client.fetch_kind, code, kind, start, end): (code, kind)
            for code, kind in tasks
        }
        try:
            for future in as_completed(futures):
                error = future.exception()
                if error is not None:
                    # Do not wait for requests still in flight
                    pool.shutdown(wait=False, cancel_futures=True)
                    code, kind = futures[future]
                    self.logger.warning(
                        "Aggregation aborted by %s/%s: %s", code, kind.value, error
                    )
                    raise error
                slots[futures[future]] = future.result()
            pool.shutdown(wait=True)
        finally:
            if stats is not None:
                issued = [f for f in futures if not f.cancelled()]
                stats["api_calls"] = len(issued)
                stats["errors"] = sum(
                    1 for f in issued if f.done() and f.exception() is not None
                )

        # Re-key explicitly; completion order carries no meaning
        return {
            code: CountrySeries(
                country=code,
                education_series=tuple(slots[(code, IndicatorKind.EDUCATION)]),
                debt_series=tuple(slots[(code, IndicatorKind.DEBT)]),
            )
            for code in codes
        }

    def get_telemetry(self) -> Dict:
        """Telemetry of the underlying client."""
        return self.client.get_telemetry()
