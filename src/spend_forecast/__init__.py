"""Spending analytics toolkit: smoothing, regression, seasonality and best-method forecasts."""

from .data import (
    Transaction,
    TransactionType,
    monthly_category_frame,
    monthly_totals,
    prepare_transactions,
)
from .insights import (
    Insight,
    InsightReport,
    analyze_day_of_week_patterns,
    analyze_seasonal_patterns,
    detect_spending_anomalies,
    generate_budget_forecast_alerts,
    generate_comprehensive_insights,
)
from .models import (
    calculate_moving_average,
    double_exponential_smoothing,
    exponential_smoothing,
    linear_regression,
    regression_forecast,
)
from .pipeline import ComprehensiveForecast, ForecastConfig, build_forecasts, comprehensive_forecast
from .seasonality import detect_seasonality
from .stats import detect_outliers, mean, quartiles, std_dev, variance
from .volatility import calculate_confidence_intervals, calculate_volatility

__all__ = [
    "ComprehensiveForecast",
    "ForecastConfig",
    "Insight",
    "InsightReport",
    "Transaction",
    "TransactionType",
    "analyze_day_of_week_patterns",
    "analyze_seasonal_patterns",
    "build_forecasts",
    "calculate_confidence_intervals",
    "calculate_moving_average",
    "calculate_volatility",
    "comprehensive_forecast",
    "detect_outliers",
    "detect_seasonality",
    "detect_spending_anomalies",
    "double_exponential_smoothing",
    "exponential_smoothing",
    "generate_budget_forecast_alerts",
    "generate_comprehensive_insights",
    "linear_regression",
    "mean",
    "monthly_category_frame",
    "monthly_totals",
    "prepare_transactions",
    "quartiles",
    "regression_forecast",
    "std_dev",
    "variance",
]

__version__ = "0.1.0"
