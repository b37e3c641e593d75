"""Tests for CSV export."""

from edudebt.config import BILLION
from edudebt.dashboard.state import DashboardState
from edudebt.export.csv_export import export_columns, export_filename, to_csv
from edudebt.transformers.merger import merge_indicators

ROWS = [
    {"year": 2010, "USA_education": 5.0, "BRA_debt": 350e9},
    {"year": 2011, "USA_education": 6.0, "BRA_education": 4.0},
]


class TestToCsv:

    def test_header_layout(self):
        header = to_csv(ROWS, ["USA", "BRA"]).splitlines()[0]
        assert header == (
            "Year,"
            "USA Education (% of govt expenditure),"
            "BRA Education (% of govt expenditure),"
            "USA Debt (USD bn),"
            "BRA Debt (USD bn)"
        )

    def test_one_line_per_row_with_empty_cells(self):
        lines = to_csv(ROWS, ["USA", "BRA"]).splitlines()
        assert len(lines) == 3
        assert lines[1] == "2010,5.0,,,350.0"
        assert lines[2] == "2011,6.0,4.0,,"

    def test_raw_usd(self):
        text = to_csv(ROWS, ["BRA"], debt_scale=None)
        lines = text.splitlines()
        assert lines[0] == "Year,BRA Education (% of govt expenditure),BRA Debt (USD)"
        assert lines[1] == "2010,,350000000000.0"

    def test_input_not_mutated(self):
        rows = [dict(r) for r in ROWS]
        to_csv(rows, ["USA", "BRA"])
        assert rows == ROWS

    def test_empty_rows(self):
        assert to_csv([], ["USA"]).splitlines() == [
            "Year,USA Education (% of govt expenditure),USA Debt (USD bn)"
        ]

    def test_from_merged_series(self, sample_series):
        rows = merge_indicators(sample_series, ["USA", "BRA"])
        lines = to_csv(rows, ["USA", "BRA"]).splitlines()
        assert [line.split(",")[0] for line in lines[1:]] == ["2010", "2011", "2012"]


def test_export_columns_units():
    assert export_columns(["USA"], BILLION)["USA_debt"] == "USA Debt (USD bn)"
    assert export_columns(["USA"], None)["USA_debt"] == "USA Debt (USD)"


def test_export_filename():
    state = DashboardState(start_year=2005, end_year=2015)
    assert export_filename(state) == "edu_debt_2005_2015.csv"
