"""
Refresh controller.

Runs one fetch-merge-summarize cycle per selection change. Every call
takes a new generation number; only the latest generation may publish
its snapshot, so a slow, older refresh that finishes late is discarded.
A failed refresh keeps the last good snapshot and the selection.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Dict, Mapping, Optional, Sequence

from ..dashboard.state import DashboardState
from ..errors import DashboardError, FetchFailed
from ..models import CountrySeries, IndicatorKind
from ..quality.validator import merged_rows_validator
from ..transformers.merger import merge, merge_indicators
from ..transformers.summary import summarize_all
from .aggregator import MultiCountryAggregator, normalize_countries
from .result import DashboardSnapshot, RefreshResult

FAILURE_MESSAGE = "Unable to load indicator data. Please try again."
INVALID_MESSAGE = "The selected countries or years are not supported."


def build_snapshot(
    state: DashboardState,
    series_by_country: Mapping[str, CountrySeries],
    countries: Optional[Sequence[str]] = None,
) -> DashboardSnapshot:
    """Shape aggregator output into chart rows and summary stats.

    ``countries`` are the codes the series are keyed by; they default to
    the normalized codes of ``state.countries``.
    """
    if countries is None:
        countries = normalize_countries(state.countries)
    countries = list(countries)
    return DashboardSnapshot(
        state=state,
        countries=countries,
        series_by_country=dict(series_by_country),
        education_rows=merge(series_by_country, countries, IndicatorKind.EDUCATION),
        debt_rows=merge(series_by_country, countries, IndicatorKind.DEBT),
        combined_rows=merge_indicators(series_by_country, countries),
        summaries=summarize_all(series_by_country, countries),
    )


class RefreshController:
    """Coordinate refreshes so the last-triggered one wins.

    Usage::

        controller = RefreshController()
        result = controller.refresh(DashboardState(countries=("USA", "BRA")))
        if result.success:
            rows = controller.snapshot.education_rows
        else:
            print(result.message)
    """

    def __init__(self, aggregator: Optional[MultiCountryAggregator] = None, max_pending: int = 4):
        self.aggregator = aggregator or MultiCountryAggregator()
        self.logger = logging.getLogger(self.__class__.__name__)

        self._lock = threading.Lock()
        self._generation = 0
        self._state: Optional[DashboardState] = None
        self._snapshot: Optional[DashboardSnapshot] = None
        self._last_result: Optional[RefreshResult] = None
        self._executor = ThreadPoolExecutor(
            max_workers=max_pending, thread_name_prefix="refresh"
        )

    # --- Published state ------------------------------------------------------

    @property
    def state(self) -> Optional[DashboardState]:
        """Most recently requested selection (kept on failure)."""
        return self._state

    @property
    def snapshot(self) -> Optional[DashboardSnapshot]:
        """Snapshot of the latest successful, non-superseded refresh."""
        return self._snapshot

    @property
    def last_result(self) -> Optional[RefreshResult]:
        return self._last_result

    @property
    def generation(self) -> int:
        return self._generation

    def is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    # --- Refresh --------------------------------------------------------------

    def refresh(self, state: DashboardState) -> RefreshResult:
        """Run a full refresh cycle for ``state``.

        Returns:
            RefreshResult. ``success`` is False on FetchFailed or
            InvalidSelection; ``superseded`` is True when a newer refresh
            started while this one was running.
        """
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._state = state

        started = datetime.now(timezone.utc)
        stats: Dict[str, int] = {}
        self.logger.info(
            "Refresh #%d: %s %s-%s",
            generation, ",".join(state.countries) or "-", state.start_year, state.end_year,
        )

        try:
            countries = normalize_countries(state.countries)
            series = self.aggregator.aggregate(
                countries, state.start_year, state.end_year, stats=stats
            )
            snapshot = build_snapshot(state, series, countries)
        except DashboardError as exc:
            message = FAILURE_MESSAGE if isinstance(exc, FetchFailed) else INVALID_MESSAGE
            result = self._build_result(generation, started, stats, error=str(exc), message=message)
            return self._publish(result)

        report = merged_rows_validator(
            state.start_year, state.end_year, snapshot.countries
        ).validate_rows(snapshot.combined_rows)
        warnings = report.warnings()
        for w in warnings:
            self.logger.warning("Refresh #%d: %s", generation, w)

        result = self._build_result(generation, started, stats, snapshot=snapshot, warnings=warnings)
        return self._publish(result)

    def refresh_async(self, state: DashboardState) -> Future:
        """Submit a refresh in the background and return its future."""
        return self._executor.submit(self.refresh, state)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    # --- Internal helpers -----------------------------------------------------

    def _publish(self, result: RefreshResult) -> RefreshResult:
        with self._lock:
            if result.generation != self._generation:
                result.superseded = True
                self.logger.warning(
                    "Refresh #%d superseded by #%d; result discarded",
                    result.generation, self._generation,
                )
                return result
            if result.success:
                self._snapshot = result.snapshot
            self._last_result = result

        if result.success:
            self.logger.info(
                "Refresh #%d done: %d rows in %.2fs",
                result.generation, result.records, result.duration_seconds,
            )
        else:
            self.logger.error("Refresh #%d failed: %s", result.generation, result.error)
        return result

    def _build_result(
        self,
        generation: int,
        started: datetime,
        stats: Dict[str, int],
        snapshot: Optional[DashboardSnapshot] = None,
        error: Optional[str] = None,
        message: Optional[str] = None,
        warnings: Optional[list] = None,
    ) -> RefreshResult:
        completed = datetime.now(timezone.utc)
        return RefreshResult(
            success=error is None,
            generation=generation,
            snapshot=snapshot,
            api_calls=stats.get("api_calls", 0),
            errors=stats.get("errors", 0),
            started_at=started,
            completed_at=completed,
            duration_seconds=(completed - started).total_seconds(),
            error=error,
            message=message,
            warnings=warnings or [],
        )
