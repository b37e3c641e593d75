"""
Dashboard snapshot demo: Education Expenditure vs External Debt

Runs one refresh for a country selection, prints the chart rows and the
per-country callouts, validates the merged rows, and writes the CSV export.

    python examples/dashboard_snapshot.py USA BRA IND --start 2010 --end 2020
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from edudebt.dashboard.charts import build_chart_spec
from edudebt.dashboard.state import active_kind, normalize_state
from edudebt.errors import InvalidSelection
from edudebt.export.csv_export import export_filename, to_csv
from edudebt.models import IndicatorKind
from edudebt.pipeline.refresh import RefreshController
from edudebt.quality import merged_rows_validator
from edudebt.transformers.summary import format_average


def parse_args():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("countries", nargs="*", default=["USA"])
    parser.add_argument("--start", type=int, default=2010)
    parser.add_argument("--end", type=int, default=2020)
    parser.add_argument("--chart", default="line")
    parser.add_argument("--out", type=Path, default=Path("."))
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args()


def main():
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

    try:
        state = normalize_state({
            "countries": args.countries,
            "start_year": args.start,
            "end_year": args.end,
            "chart_kind": args.chart,
        })
    except InvalidSelection as exc:
        print(f"Invalid selection: {exc}")
        return 2

    print("=" * 60)
    print("Education Expenditure and External Debt")
    print("=" * 60)
    print(f"Countries:  {', '.join(state.countries)}")
    print(f"Years:      {state.start_year}-{state.end_year}")
    print()

    controller = RefreshController()
    result = controller.refresh(state)

    # Telemetry
    print("--- Telemetry ---")
    print(f"  Success:    {result.success}")
    print(f"  Rows:       {result.records}")
    print(f"  API calls:  {result.api_calls}")
    print(f"  Duration:   {result.duration_seconds:.2f}s")
    print()

    if not result.success:
        print(result.message)
        print(f"  ({result.error})")
        controller.shutdown()
        return 1

    snapshot = result.snapshot

    # Callouts
    print("--- Country Summary ---")
    for country in state.countries:
        edu, debt = snapshot.summary_for(country)
        print(
            f"  {country}  Avg. Education: {format_average(edu):>8s} ({edu.trend.value:7s})"
            f"  Avg. Debt: {format_average(debt):>10s} ({debt.trend.value})"
        )
    print()

    # Main chart
    kind = active_kind(state)
    rows = snapshot.rows_for(kind)
    spec = build_chart_spec(state.chart_kind, rows, state.countries, title=kind.label)
    print(f"--- {kind.label} ({spec['kind']} chart) ---")
    for row in rows:
        cells = "  ".join(
            f"{c}={row[c]:.2f}" if c in row else f"{c}=  -  " for c in state.countries
        )
        unit = "B" if kind is IndicatorKind.DEBT else "%"
        print(f"  {row['year']}  {cells}  ({unit})")
    print()

    # Quality
    report = merged_rows_validator(
        state.start_year, state.end_year, state.countries
    ).validate_rows(snapshot.combined_rows)
    print("--- Quality ---")
    print(f"  Status:     {'PASSED' if report.passed else 'FAILED'}")
    print(f"  Rows:       {report.row_count} ({report.first_year}-{report.last_year})")
    for line in report.warnings():
        print(f"  FAIL  {line}")

    # Export
    path = args.out / export_filename(state)
    path.write_text(to_csv(snapshot.combined_rows, state.countries))
    print(f"\nCSV written to {path}")

    controller.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
