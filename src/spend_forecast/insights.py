"""Human-readable spending insights derived from transactions.

Each generator accepts anything :func:`spend_forecast.data.prepare_transactions`
accepts and returns :class:`Insight` records; empty or degenerate input
yields no insights rather than an error.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Dict, List, Mapping, Optional

import pandas as pd

from .data import TransactionsLike, expense_transactions, monthly_totals, prepare_transactions
from .seasonality import SeasonalityResult, detect_seasonality
from .stats import detect_outliers, mean

logger = logging.getLogger(__name__)

CURRENCY_SYMBOL = "₹"
# Sunday first; index = (pandas dayofweek + 1) % 7
DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
WEEKEND_DAYS = (0, 6)

PEAK_DAY_RATIO = 1.5
WEEKEND_SPIKE_RATIO = 1.3
MIN_ANOMALY_MONTHS = 3
RECENT_MONTHS = 3
CATEGORY_TREND_RATIO = 1.4
CATEGORY_TREND_MIN_AMOUNT = 1000.0
SEASONAL_PEAK_INDEX = 1.2
SEASONAL_LOW_INDEX = 0.8
BUDGET_WARNING_SHARE = 0.8

PRIORITY_ORDER = {"high": 1, "medium": 2, "low": 3}
INSIGHT_TYPES = {
    "pattern": ("pattern",),
    "anomaly": ("anomaly",),
    "trend": ("trend",),
    "seasonal": ("seasonal",),
    "budget_alert": ("budget-alert", "budget-warning"),
}


@dataclass
class Insight:
    type: str
    priority: str
    title: str
    message: str
    action: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class DayOfWeekStats:
    day: str
    total: float
    count: int
    average: float


@dataclass
class DayOfWeekAnalysis:
    day_data: List[DayOfWeekStats]
    insights: List[Insight]
    weekend_avg: float
    weekday_avg: float


@dataclass
class SeasonalAnalysis:
    seasonality: SeasonalityResult
    insights: List[Insight] = field(default_factory=list)


@dataclass
class InsightReport:
    all: List[Insight]
    by_type: Dict[str, List[Insight]]
    by_priority: Dict[str, List[Insight]]
    day_patterns: Optional[DayOfWeekAnalysis]
    seasonal: Optional[SeasonalAnalysis]

    def to_dict(self) -> dict:
        return asdict(self)


def _money(value: float) -> str:
    return f"{CURRENCY_SYMBOL}{value:,.0f}"


def analyze_day_of_week_patterns(transactions: Optional[TransactionsLike]) -> Optional[DayOfWeekAnalysis]:
    df = prepare_transactions(transactions)
    if df.empty:
        return None

    expenses = expense_transactions(df)
    totals = [0.0] * 7
    counts = [0] * 7
    if not expenses.empty:
        weekday = (expenses["date"].dt.dayofweek + 1) % 7
        by_day = expenses["amount"].abs().groupby(weekday).agg(["sum", "count"])
        for day, row in by_day.iterrows():
            totals[int(day)] = float(row["sum"])
            counts[int(day)] = int(row["count"])

    total_spending = sum(totals)
    avg_daily = total_spending / 7
    insights: List[Insight] = []

    if total_spending > 0:
        peak = max(range(7), key=lambda i: totals[i])
        if totals[peak] > avg_daily * PEAK_DAY_RATIO:
            share = totals[peak] / total_spending * 100
            insights.append(
                Insight(
                    type="pattern",
                    priority="medium",
                    title=f"{DAY_NAMES[peak]} is Your Peak Spending Day",
                    message=f"{share:.0f}% of your spending happens on {DAY_NAMES[peak]}s ({_money(totals[peak])})",
                    action="Consider meal prepping or avoiding shopping on this day",
                )
            )

    weekend_avg = sum(totals[d] for d in WEEKEND_DAYS) / len(WEEKEND_DAYS)
    weekday_days = [d for d in range(7) if d not in WEEKEND_DAYS]
    weekday_avg = sum(totals[d] for d in weekday_days) / len(weekday_days)

    if weekday_avg > 0 and weekend_avg > weekday_avg * WEEKEND_SPIKE_RATIO:
        difference = (weekend_avg / weekday_avg - 1) * 100
        insights.append(
            Insight(
                type="pattern",
                priority="high",
                title="Weekend Spending Spike Detected",
                message=(
                    f"Weekend spending is {difference:.0f}% higher than weekdays "
                    f"({_money(weekend_avg)} vs {_money(weekday_avg)})"
                ),
                action="Plan weekend budgets or activities to control spending",
            )
        )

    day_data = [
        DayOfWeekStats(
            day=DAY_NAMES[i],
            total=totals[i],
            count=counts[i],
            average=totals[i] / counts[i] if counts[i] > 0 else 0.0,
        )
        for i in range(7)
    ]
    return DayOfWeekAnalysis(day_data=day_data, insights=insights, weekend_avg=weekend_avg, weekday_avg=weekday_avg)


def detect_spending_anomalies(transactions: Optional[TransactionsLike]) -> List[Insight]:
    expenses = expense_transactions(prepare_transactions(transactions))
    if expenses.empty:
        return []

    month_keys = expenses["date"].dt.strftime("%Y-%m")
    amounts = expenses["amount"].abs()
    monthly = amounts.groupby(month_keys).sum().sort_index()
    months = [str(m) for m in monthly.index]
    if len(months) < MIN_ANOMALY_MONTHS:
        logger.debug("Anomaly scan needs %d months, got %d", MIN_ANOMALY_MONTHS, len(months))
        return []

    insights: List[Insight] = []
    totals = [float(v) for v in monthly.to_numpy()]
    average = mean(totals)

    for outlier in detect_outliers(totals).outliers:
        amount = outlier.value
        if average <= 0 or amount <= average:
            continue
        percent = (amount - average) / average * 100
        month_name = pd.Timestamp(f"{months[outlier.index]}-01").strftime("%B %Y")
        insights.append(
            Insight(
                type="anomaly",
                priority="high",
                title=f"Unusual Spending in {month_name}",
                message=f"Spending was {percent:.0f}% higher than average ({_money(amount)} vs {_money(average)})",
                action="Review large expenses in this month",
            )
        )

    by_category = (
        amounts.groupby([expenses["category"], month_keys])
        .sum()
        .unstack(fill_value=0.0)
        .reindex(columns=months, fill_value=0.0)
    )
    recent = months[-RECENT_MONTHS:]
    for category, row in by_category.iterrows():
        historical_avg = mean([float(row[m]) for m in months])
        recent_avg = mean([float(row[m]) for m in recent])
        if historical_avg <= 0:
            continue
        if recent_avg > historical_avg * CATEGORY_TREND_RATIO and recent_avg > CATEGORY_TREND_MIN_AMOUNT:
            increase = (recent_avg - historical_avg) / historical_avg * 100
            insights.append(
                Insight(
                    type="trend",
                    priority="medium",
                    title=f"{category} Spending Trending Up",
                    message=(
                        f"Last {len(recent)} months average is {increase:.0f}% higher "
                        f"({_money(recent_avg)} vs {_money(historical_avg)})"
                    ),
                    action=f"Review {category} expenses and identify unnecessary costs",
                )
            )

    return insights


def analyze_seasonal_patterns(transactions: Optional[TransactionsLike]) -> Optional[SeasonalAnalysis]:
    df = prepare_transactions(transactions)
    if df.empty:
        return None

    seasonality = detect_seasonality(monthly_totals(df))
    insights: List[Insight] = []
    if not seasonality.has_seasonality:
        return SeasonalAnalysis(seasonality=seasonality, insights=insights)

    peaks = sorted(
        ((month, index) for month, index in seasonality.indices.items() if index > SEASONAL_PEAK_INDEX),
        key=lambda item: item[1],
        reverse=True,
    )
    if peaks:
        month, index = peaks[0]
        name = calendar.month_name[month]
        insights.append(
            Insight(
                type="seasonal",
                priority="high",
                title=f"{name} is Historically High Spending",
                message=f"Spending is typically {(index - 1) * 100:.0f}% above average in {name}",
                action=f"Budget {_money(seasonality.overall_average * index)} for {name}",
            )
        )

    lows = sorted(
        ((month, index) for month, index in seasonality.indices.items() if index < SEASONAL_LOW_INDEX),
        key=lambda item: item[1],
    )
    if lows:
        month, index = lows[0]
        name = calendar.month_name[month]
        insights.append(
            Insight(
                type="seasonal",
                priority="low",
                title=f"{name} Shows Lower Spending",
                message=f"Historically {(1 - index) * 100:.0f}% below average - good for savings",
                action="Consider extra savings or debt payments in this month",
            )
        )

    return SeasonalAnalysis(seasonality=seasonality, insights=insights)


def generate_budget_forecast_alerts(
    transactions: Optional[TransactionsLike],
    budgets: Optional[Mapping[str, float]],
    today: Optional[date] = None,
) -> List[Insight]:
    """Project this month's spend per budgeted category from how far the month has progressed."""
    if not budgets:
        return []
    expenses = expense_transactions(prepare_transactions(transactions))
    if expenses.empty:
        return []

    if today is None:
        today = date.today()
    current_month = f"{today.year:04d}-{today.month:02d}"
    current = expenses[expenses["date"].dt.strftime("%Y-%m") == current_month]
    spending = current["amount"].abs().groupby(current["category"]).sum().to_dict()

    days_in_month = calendar.monthrange(today.year, today.month)[1]
    days_remaining = days_in_month - today.day
    progress = today.day / days_in_month

    insights: List[Insight] = []
    for category, raw_budget in budgets.items():
        budget = float(raw_budget)
        if budget <= 0:
            continue
        spent = float(spending.get(category, 0.0))
        remaining = budget - spent
        projected = spent / progress if progress > 0 else spent
        overrun = projected - budget

        if overrun > 0 and days_remaining > 0:
            insights.append(
                Insight(
                    type="budget-alert",
                    priority="high",
                    title=f"{category} Budget at Risk",
                    message=f"On track to exceed budget by {_money(overrun)} ({overrun / budget * 100:.0f}%)",
                    action=f"Reduce daily spending to {_money(max(remaining, 0.0) / days_remaining)} or less",
                )
            )
        elif budget * BUDGET_WARNING_SHARE < spent < budget:
            per_day = remaining / days_remaining if days_remaining > 0 else remaining
            insights.append(
                Insight(
                    type="budget-warning",
                    priority="medium",
                    title=f"{category} Budget {BUDGET_WARNING_SHARE * 100:.0f}% Used",
                    message=f"{_money(remaining)} remaining for {days_remaining} days",
                    action=f"Limit to {_money(per_day)}/day",
                )
            )

    return insights


def generate_comprehensive_insights(
    transactions: Optional[TransactionsLike],
    budgets: Optional[Mapping[str, float]] = None,
    today: Optional[date] = None,
) -> InsightReport:
    df = prepare_transactions(transactions)

    day_patterns = analyze_day_of_week_patterns(df)
    anomalies = detect_spending_anomalies(df)
    seasonal = analyze_seasonal_patterns(df)
    budget_alerts = generate_budget_forecast_alerts(df, budgets or {}, today=today)

    combined: List[Insight] = []
    if day_patterns is not None:
        combined.extend(day_patterns.insights)
    combined.extend(anomalies)
    if seasonal is not None:
        combined.extend(seasonal.insights)
    combined.extend(budget_alerts)

    # sorted() is stable, so generators keep their relative order within a priority
    ordered = sorted(combined, key=lambda insight: PRIORITY_ORDER.get(insight.priority, len(PRIORITY_ORDER) + 1))
    logger.debug("Generated %d insights", len(ordered))

    return InsightReport(
        all=ordered,
        by_type={
            name: [i for i in ordered if i.type in types] for name, types in INSIGHT_TYPES.items()
        },
        by_priority={
            priority: [i for i in ordered if i.priority == priority] for priority in PRIORITY_ORDER
        },
        day_patterns=day_patterns,
        seasonal=seasonal,
    )
