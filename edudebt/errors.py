"""
Error types raised by the dashboard data layer.

An upstream response with no data is not an error: the fetcher returns
an empty series for it.
"""

from typing import Optional


class DashboardError(Exception):
    """Base class for all dashboard data errors."""


class FetchFailed(DashboardError):
    """A single indicator request failed (network, timeout, non-2xx, bad JSON)."""

    def __init__(self, country: str, indicator_id: str, reason: Optional[str] = None):
        self.country = country
        self.indicator_id = indicator_id
        self.reason = reason or "request failed"
        super().__init__(f"Fetch failed for {country}/{indicator_id}: {self.reason}")


class InvalidSelection(DashboardError, ValueError):
    """Year range or country code outside the supported bounds."""
