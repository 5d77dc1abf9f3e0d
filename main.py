"""Command-line entry point: analyze a KPI series from a file or demo data."""

import sys
from pathlib import Path
from typing import List, Optional

import numpy as np
import pandas as pd

from src.analytics import (
    AnalysisOrchestrator,
    AnalyticsError,
    KPI_CATALOG,
    calculate_statistics,
    generate_mock_series,
    get_kpi,
)


def load_series(file_path: Path, column: Optional[str] = None) -> List[float]:
    """
    Load one numeric column from a CSV or Excel file.

    Uses the given column, or the last numeric column when omitted.
    """
    file_ext = file_path.suffix.lower()
    if file_ext == '.csv':
        df = pd.read_csv(file_path)
    elif file_ext in ['.xlsx', '.xls']:
        df = pd.read_excel(file_path)
    else:
        raise ValueError(f"Unsupported file type: {file_ext} (use .csv, .xlsx or .xls)")

    if column is None:
        numeric = df.select_dtypes(include='number').columns
        if len(numeric) == 0:
            raise ValueError(f"No numeric columns in {file_path}")
        column = numeric[-1]

    return pd.to_numeric(df[column], errors='coerce').dropna().tolist()


def run_analysis(source: str, category: Optional[str] = None, horizon: int = 7, seed: Optional[int] = None):
    """
    Analyze a catalog KPI (synthetic history) or a file column.

    Args:
        source: KPI id from the catalog, or a path to a CSV/Excel file
        category: KPI category (required for files, optional for KPI ids)
        horizon: Forecast periods
        seed: Seed for demo data and driver sampling
    """
    rng = np.random.default_rng(seed)

    if source in KPI_CATALOG:
        kpi = get_kpi(source)
        title = kpi.title
        category = category or kpi.category
        series = generate_mock_series(source, days=90, rng=rng)
    else:
        path = Path(source)
        if not path.exists():
            print(f"❌ Not a KPI id or file: {source}")
            print(f"   Known KPIs: {', '.join(KPI_CATALOG)}")
            return None
        if not category:
            print("❌ A category is required when analyzing a file")
            return None
        title = path.stem
        try:
            series = load_series(path)
        except ValueError as e:
            print(f"❌ Could not load {path}: {e}")
            return None

    print(f"\n{'='*80}")
    print(f"KPI ANALYSIS: {title} ({category})")
    print(f"{'='*80}\n")

    stats = calculate_statistics(series)
    print(f"Points:  {len(series)}")
    print(f"Average: {stats.avg:,.2f}   Min: {stats.min:,.2f}   Max: {stats.max:,.2f}")
    print(f"Change:  {stats.change_percent:+.1f}%")

    orchestrator = AnalysisOrchestrator()
    try:
        result = orchestrator.analyze(series, category, horizon=horizon, rng=rng)
    except AnalyticsError as e:
        print(f"❌ Analysis failed: {e}")
        return None

    print(f"\nTrend:    {result.trend.description} (slope {result.trend.slope:+.3f}/day)")
    print(f"Forecast: {result.forecast.summary}")
    print("          " + ", ".join(f"{v:,.1f}" for v in result.forecast.values))
    print("Drivers:")
    for driver in result.drivers:
        print(f"  - {driver}")

    return result


def main():
    """Main entry point."""
    if len(sys.argv) < 2:
        print("Usage: python main.py <kpi_id|file_path> [category] [horizon]")
        print(f"\nKnown KPIs: {', '.join(KPI_CATALOG)}")
        print("\nExamples:")
        print("  python main.py revenue")
        print("  python main.py data/revenue.csv Финансы 14")
        sys.exit(1)

    source = sys.argv[1]
    category = sys.argv[2] if len(sys.argv) > 2 else None
    try:
        horizon = int(sys.argv[3]) if len(sys.argv) > 3 else 7
    except ValueError:
        print(f"❌ Horizon must be an integer, got {sys.argv[3]!r}")
        sys.exit(1)

    if run_analysis(source, category, horizon) is None:
        sys.exit(1)


if __name__ == "__main__":
    main()
