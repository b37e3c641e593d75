"""
Core validation engine.

DataValidator runs a list of rules over merged rows and produces a
ValidationReport. ``merged_rows_validator`` builds the standard checks
for the combined education/debt rows of one selection.
"""

import logging
from typing import List, Sequence

import pandas as pd

from ..models import IndicatorKind
from ..transformers.merger import rows_frame
from .report import ValidationReport
from .rules import (
    AscendingYearsRule,
    NonEmptyRowsRule,
    Rule,
    UniqueYearsRule,
    ValueRangeRule,
    YearWindowRule,
)


class DataValidator:
    """
    Validate merged rows against a list of rules.

    Usage:
        from edudebt.quality import DataValidator, UniqueYearsRule, YearWindowRule

        v = DataValidator("merged_rows")
        v.add_rule(UniqueYearsRule())
        v.add_rule(YearWindowRule(2010, 2020))

        report = v.validate_rows(snapshot.combined_rows)
        for line in report.warnings():
            print(line)
    """

    def __init__(self, name: str = 'validation'):
        self.name = name
        self.rules: List[Rule] = []
        self.logger = logging.getLogger(self.__class__.__name__)

    def add_rule(self, rule: Rule) -> 'DataValidator':
        self.rules.append(rule)
        return self

    def add_rules(self, rules: Sequence[Rule]) -> 'DataValidator':
        self.rules.extend(rules)
        return self

    @property
    def rule_count(self) -> int:
        return len(self.rules)

    def validate(self, df: pd.DataFrame) -> ValidationReport:
        """Run every rule against a year-keyed frame."""
        results = [rule.evaluate(df) for rule in self.rules]

        years = pd.to_numeric(df['year'], errors='coerce').dropna() if 'year' in df.columns else []
        report = ValidationReport(
            name=self.name,
            results=results,
            row_count=len(df),
            first_year=int(years.min()) if len(years) else None,
            last_year=int(years.max()) if len(years) else None,
        )
        self.logger.debug(
            "%s: %d rules over %d rows, %d failed",
            self.name, len(results), report.row_count, len(report.failures),
        )
        return report

    def validate_rows(self, rows: Sequence[dict]) -> ValidationReport:
        """Validate merged rows (list of dicts) directly."""
        return self.validate(rows_frame(rows))


def merged_rows_validator(
    start_year: int,
    end_year: int,
    countries: Sequence[str],
) -> DataValidator:
    """Standard checks for combined education/debt rows.

    Years unique, strictly ascending and inside the window; education
    shares within 0-100; debt stocks non-negative; no all-empty rows.
    """
    v = DataValidator('merged_rows')
    v.add_rules([
        UniqueYearsRule(),
        AscendingYearsRule(),
        YearWindowRule(start_year, end_year),
        NonEmptyRowsRule(),
    ])
    for country in countries:
        v.add_rule(ValueRangeRule(country, IndicatorKind.EDUCATION, min_val=0, max_val=100))
        v.add_rule(ValueRangeRule(country, IndicatorKind.DEBT, min_val=0))
    return v
