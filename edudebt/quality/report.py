"""
Outcome of checking one set of merged rows.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from .rules import RuleResult


@dataclass
class ValidationReport:
    """
    Rule results for merged rows, plus the year span they cover.

    Attributes:
        name: Name of the check set.
        results: One result per rule, in the order the rules were added.
        row_count: Number of merged rows checked.
        first_year: Earliest year in the rows, if any.
        last_year: Latest year in the rows, if any.
    """
    name: str
    results: List[RuleResult]
    row_count: int
    first_year: Optional[int] = None
    last_year: Optional[int] = None

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.results)

    @property
    def failures(self) -> List[RuleResult]:
        return [r for r in self.results if not r.passed]

    @property
    def rejected_years(self) -> List[int]:
        """Sorted years named by at least one failed rule."""
        return sorted({y for r in self.failures for y in r.years})

    def warnings(self) -> List[str]:
        """One line per failed rule, attached to the refresh result."""
        return [r.describe() for r in self.failures]

    def to_dict(self) -> Dict:
        return {
            'name': self.name,
            'passed': self.passed,
            'rows': self.row_count,
            'years': [self.first_year, self.last_year],
            'rejected_years': self.rejected_years,
            'failures': [
                {'rule': r.rule_name, 'column': r.column, 'years': r.years, **r.details}
                for r in self.failures
            ],
        }
