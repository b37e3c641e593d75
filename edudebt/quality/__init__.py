from .rules import (
    AscendingYearsRule,
    NonEmptyRowsRule,
    Rule,
    RuleResult,
    UniqueYearsRule,
    ValueRangeRule,
    YearWindowRule,
)
from .report import ValidationReport
from .validator import DataValidator, merged_rows_validator

__all__ = [
    "AscendingYearsRule",
    "DataValidator",
    "NonEmptyRowsRule",
    "Rule",
    "RuleResult",
    "UniqueYearsRule",
    "ValidationReport",
    "ValueRangeRule",
    "YearWindowRule",
    "merged_rows_validator",
]
