"""
Dashboard configuration.

Supported countries, World Bank indicator codes, year bounds and
HTTP settings. Network settings can be overridden from the environment.
"""

import os
from datetime import date

# World Bank Indicators API
BASE_URL = os.getenv("EDUDEBT_BASE_URL", "https://api.worldbank.org/v2")

# (connect, read) timeout in seconds for a single request
CONNECT_TIMEOUT = float(os.getenv("EDUDEBT_CONNECT_TIMEOUT", "5"))
READ_TIMEOUT = float(os.getenv("EDUDEBT_READ_TIMEOUT", "15"))

# Upper bound on concurrent fetches per refresh
MAX_WORKERS = int(os.getenv("EDUDEBT_MAX_WORKERS", "16"))

# Indicator codes
EDUCATION_INDICATOR = "SE.XPD.TOTL.GB.ZS"  # Education expenditure (% of govt expenditure)
DEBT_INDICATOR = "DT.DOD.DECT.CD"          # External debt stocks (current US$)

# Countries offered by the selector (ISO3) and their chart colors
SUPPORTED_COUNTRIES = {
    "USA": "#FF6B6B",  # United States
    "ETH": "#4ECDC4",  # Ethiopia
    "BRA": "#45B7D1",  # Brazil
    "IND": "#FFA07A",  # India
    "CHN": "#98D8C8",  # China
}

# Time period
MIN_YEAR = 1960
DEFAULT_START_YEAR = 2010
DEFAULT_END_YEAR = 2020
DEFAULT_COUNTRIES = ("USA",)

# Display units
BILLION = 1e9
NO_DATA = "no data"


def current_year() -> int:
    """Latest year the data source can hold."""
    return date.today().year
