"""
Refresh result container.

Structured output of one refresh cycle, with telemetry and the
chart-ready snapshot when the refresh succeeded.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..models import CountrySeries, IndicatorKind, SummaryStat
from ..transformers.merger import to_billions


@dataclass(frozen=True)
class DashboardSnapshot:
    """Everything the renderer needs for one selection.

    ``countries`` holds the normalized ISO3 codes the rows and summaries
    are keyed by, in selection order.
    """

    state: Any
    countries: List[str]
    series_by_country: Dict[str, CountrySeries]
    education_rows: List[Dict[str, float]]
    debt_rows: List[Dict[str, float]]
    combined_rows: List[Dict[str, float]]
    summaries: List[SummaryStat]

    def summary_for(self, country: str) -> List[SummaryStat]:
        return [s for s in self.summaries if s.country == country]

    def rows_for(self, kind: IndicatorKind, in_billions: bool = True) -> List[Dict[str, float]]:
        """Chart rows for one indicator; debt optionally in USD billions."""
        if kind is IndicatorKind.EDUCATION:
            return self.education_rows
        if in_billions:
            return to_billions(self.debt_rows, self.countries)
        return self.debt_rows


@dataclass
class RefreshResult:
    """Result of a single refresh cycle.

    ``superseded`` is set when a newer refresh started before this one
    finished; its snapshot was not published.
    """

    success: bool
    generation: int
    snapshot: Optional[DashboardSnapshot] = None
    superseded: bool = False
    api_calls: int = 0
    errors: int = 0
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration_seconds: float = 0.0
    error: Optional[str] = None
    message: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def records(self) -> int:
        """Number of combined rows in the snapshot."""
        return len(self.snapshot.combined_rows) if self.snapshot else 0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dictionary (excludes the snapshot)."""
        return {
            "success": self.success,
            "generation": self.generation,
            "superseded": self.superseded,
            "records": self.records,
            "api_calls": self.api_calls,
            "errors": self.errors,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "error": self.error,
            "message": self.message,
            "warnings": self.warnings,
        }
