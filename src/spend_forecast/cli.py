from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pandas as pd

from .data import monthly_category_frame, prepare_transactions
from .insights import InsightReport, generate_comprehensive_insights
from .pipeline import ForecastConfig, build_forecasts

logger = logging.getLogger(__name__)


def parse_category_filter(raw: Optional[str]) -> Optional[Iterable[str]]:
    if raw is None:
        return None
    return [token.strip() for token in raw.split(",") if token.strip()]


def load_budgets(path: Optional[Path]) -> Dict[str, float]:
    if path is None:
        return {}
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"Budgets file must contain a JSON object of category -> amount: {path}")
    return {str(category): float(amount) for category, amount in raw.items()}


def summarize_forecasts(forecast_df: pd.DataFrame, confidence: float = 0.95) -> str:
    if forecast_df.empty:
        return "No forecasts generated. Insufficient data? Check inputs."

    lines: List[str] = [f"Forecast by category (next month, {confidence:.0%} interval):"]
    for category, group in forecast_df.groupby("category"):
        first = group.sort_values("ds").iloc[0]
        lines.append(
            f"- {category}: {first['selected_forecast']:.2f} "
            f"[{first['lower']:.2f}, {first['upper']:.2f}] via {first['selected_method']}; "
            f"{len(group)}-month total {group['selected_forecast'].sum():.2f}"
        )

    method_counts = forecast_df.drop_duplicates("category")["selected_method"].value_counts()
    lines.append("\nSelected methods:")
    lines.append(method_counts.to_string())
    return "\n".join(lines)


def summarize_insights(report: InsightReport) -> str:
    if not report.all:
        return "No insights for this data."
    lines = ["Insights:"]
    for insight in report.all:
        lines.append(f"- [{insight.priority}] {insight.title}: {insight.message}")
        if insight.action:
            lines.append(f"    -> {insight.action}")
    return "\n".join(lines)


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Monthly spending forecasts with smoothing, regression and best-method selection.",
    )
    parser.add_argument(
        "--transactions",
        type=Path,
        required=True,
        help="Path to a CSV of normalized transactions (columns: date, amount, type, category[, subcategory, account]).",
    )
    parser.add_argument(
        "--horizon",
        type=int,
        default=6,
        help="Number of future months to forecast (default: 6).",
    )
    parser.add_argument(
        "--confidence",
        type=float,
        default=0.95,
        help="Confidence level for forecast intervals: 0.90, 0.95 or 0.99 (default: 0.95).",
    )
    parser.add_argument(
        "--category",
        type=str,
        help="Comma-separated list of categories to include (optional).",
    )
    parser.add_argument(
        "--budgets",
        type=Path,
        help="Optional JSON file mapping category to monthly budget, used for budget alerts.",
    )
    parser.add_argument(
        "--forecast-output",
        type=Path,
        help="Optional path to write future forecasts as CSV.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    transactions = prepare_transactions(pd.read_csv(args.transactions))
    logger.info("Loaded %d transactions from %s", len(transactions), args.transactions)
    if args.category:
        allowed = set(parse_category_filter(args.category))
        transactions = transactions[transactions["category"].isin(allowed)]
        if transactions.empty:
            raise ValueError("Category filter removed all rows. Check the provided category values.")

    config = ForecastConfig(horizon=args.horizon, confidence=args.confidence)
    monthly = monthly_category_frame(transactions)
    forecast_df = build_forecasts(monthly, config)

    print(summarize_forecasts(forecast_df, config.confidence))

    report = generate_comprehensive_insights(transactions, budgets=load_budgets(args.budgets))
    print()
    print(summarize_insights(report))

    if args.forecast_output:
        forecast_df.to_csv(args.forecast_output, index=False)
        print(f"\nSaved forecasts to {args.forecast_output}")


if __name__ == "__main__":
    main()
