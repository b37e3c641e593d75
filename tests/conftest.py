"""Shared test fixtures and path setup."""
import sys
import threading
from pathlib import Path

# Add project root to sys.path so tests can import edudebt.*
sys.path.insert(0, str(Path(__file__).parent.parent))

import pandas as pd
import pytest

from edudebt.models import CountrySeries, IndicatorKind, IndicatorPoint


def wb_item(country, indicator, year, value):
    """One World Bank data record."""
    return {
        "indicator": {"id": indicator, "value": indicator},
        "country": {"id": country[:2], "value": country},
        "countryiso3code": country,
        "date": str(year),
        "value": value,
        "unit": "",
        "obs_status": "",
        "decimal": 1,
    }


def wb_envelope(country, indicator, points):
    """``[metadata, data]`` envelope, newest first like the live API."""
    data = [wb_item(country, indicator, y, v) for y, v in sorted(points, reverse=True)]
    meta = {"page": 1, "pages": 1, "per_page": 100, "total": len(data)}
    return [meta, data or None]


def points(*pairs):
    return tuple(IndicatorPoint(year=y, value=v) for y, v in pairs)


class FakeClient:
    """Stands in for WorldBankClient inside the aggregator.

    ``data`` maps (country, kind) to a list of (year, value);
    ``failures`` maps (country, kind) to an exception to raise.
    """

    def __init__(self, data=None, failures=None, barrier=None, delays=None):
        self.data = data or {}
        self.failures = failures or {}
        self.barrier = barrier
        self.delays = delays or {}
        self.calls = []
        self._lock = threading.Lock()
        self.api_calls = 0
        self.errors = 0

    def fetch_kind(self, country, kind, start_year, end_year):
        with self._lock:
            self.calls.append((country, kind, start_year, end_year))
            self.api_calls += 1
        if self.barrier is not None:
            self.barrier.wait()
        delay = self.delays.get(country)
        if delay is not None:
            delay.wait(timeout=5)
        if (country, kind) in self.failures:
            with self._lock:
                self.errors += 1
            raise self.failures[(country, kind)]
        pairs = self.data.get((country, kind), [])
        return [IndicatorPoint(y, v) for y, v in pairs if start_year <= y <= end_year]

    def get_telemetry(self):
        with self._lock:
            return {"source": "fake", "api_calls": self.api_calls, "errors": self.errors}


@pytest.fixture
def mock_education_usa():
    """USA education expenditure, with one null year."""
    return wb_envelope(
        "USA", "SE.XPD.TOTL.GB.ZS",
        [(2010, 13.1), (2011, 12.9), (2012, None)],
    )


@pytest.fixture
def mock_empty_envelope():
    """Metadata-only response returned for unknown combinations."""
    return [{"page": 1, "pages": 0, "per_page": 50, "total": 0}, None]


@pytest.fixture
def e2e_data():
    """USA/BRA education 2010-2012 with no values in 2012."""
    return {
        ("USA", IndicatorKind.EDUCATION): [(2010, 5.0), (2011, 6.0)],
        ("BRA", IndicatorKind.EDUCATION): [(2011, 4.0)],
        ("USA", IndicatorKind.DEBT): [],
        ("BRA", IndicatorKind.DEBT): [(2010, 350e9), (2012, 410e9)],
    }


@pytest.fixture
def sample_series():
    """Aggregator output for USA and BRA."""
    return {
        "USA": CountrySeries(
            country="USA",
            education_series=points((2011, 6.0), (2010, 5.0)),
            debt_series=(),
        ),
        "BRA": CountrySeries(
            country="BRA",
            education_series=points((2012, None), (2011, 4.0)),
            debt_series=points((2012, 410e9), (2011, None), (2010, 350e9)),
        ),
    }


@pytest.fixture
def merged_df():
    """Combined rows as a DataFrame, for rule tests."""
    return pd.DataFrame({
        'year': [2010, 2011, 2012],
        'USA_education': [5.0, 6.0, None],
        'BRA_education': [None, 4.0, None],
        'BRA_debt': [350e9, None, 410e9],
    })


@pytest.fixture
def messy_df():
    """Rows with duplicate/out-of-order years and bad values."""
    return pd.DataFrame({
        'year': [2011, 2010, 2010, 2030],
        'USA_education': [5.0, 120.0, -1.0, None],
        'USA_debt': [1e9, -5.0, None, None],
    })
